"""Slack Bolt wiring.

Registers one async listener per Slack event the bot consumes. Each listener
decodes its payload into a typed event and hands it to the EventRouter
together with the Bolt utilities it may need.
"""

from typing import Any, Dict, Optional

from slack_bolt.async_app import AsyncApp, AsyncBoltContext
from slack_bolt.middleware.assistant.async_assistant import AsyncAssistant

from ..log import get_logger
from ..router import EventRouter, SlackIO
from ..schemas.conversation import BotIdentity
from ..schemas.events import decode_event
from .post_blocks import MODEL_SELECT_ACTION_ID

logger = get_logger("slack_app")

CODE_ASSIST_CALLBACK_ID = "code_assist"


def bot_identity(context: Optional[AsyncBoltContext]) -> BotIdentity:
    if not context:
        return BotIdentity()
    return BotIdentity(user_id=context.bot_user_id, bot_id=context.bot_id)


def register_listeners(app: AsyncApp, router: EventRouter) -> AsyncAssistant:
    """Attach every listener to `app`; returns the registered assistant middleware."""
    assistant = AsyncAssistant()

    @assistant.thread_started
    async def handle_thread_started(payload, client, context, say, set_suggested_prompts, save_thread_context):
        await router.dispatch(
            decode_event("thread_started", payload),
            SlackIO(
                client=client,
                bot=bot_identity(context),
                say=say,
                set_suggested_prompts=set_suggested_prompts,
                save_thread_context=save_thread_context,
            ),
        )

    @assistant.thread_context_changed
    async def handle_thread_context_changed(payload, client, context, save_thread_context):
        await router.dispatch(
            decode_event("thread_context_changed", payload),
            SlackIO(client=client, bot=bot_identity(context), save_thread_context=save_thread_context),
        )

    @assistant.user_message
    async def handle_assistant_message(payload, client, context, say, set_title, set_status, get_thread_context):
        await router.dispatch(
            decode_event("assistant_user_message", payload),
            SlackIO(
                client=client,
                bot=bot_identity(context),
                say=say,
                set_title=set_title,
                set_status=set_status,
                get_thread_context=get_thread_context,
            ),
        )

    app.use(assistant)

    @app.event("message")
    async def handle_message(event: Dict[str, Any], client, context, say):
        await router.dispatch(
            decode_event("channel_message", event),
            SlackIO(client=client, bot=bot_identity(context), say=say),
        )

    @app.event("app_mention")
    async def handle_app_mention(event: Dict[str, Any], client, context, say):
        await router.dispatch(
            decode_event("app_mention", event),
            SlackIO(client=client, bot=bot_identity(context), say=say),
        )

    @app.event("app_home_opened")
    async def handle_app_home_opened(event: Dict[str, Any], client, context):
        await router.dispatch(
            decode_event("app_home_opened", event),
            SlackIO(client=client, bot=bot_identity(context)),
        )

    @app.action(MODEL_SELECT_ACTION_ID)
    async def handle_model_select(ack, body: Dict[str, Any], client, context):
        event = decode_event("model_selected", body)
        if event is None:
            await ack()
            return
        await router.dispatch(event, SlackIO(client=client, bot=bot_identity(context), ack=ack))

    @app.function(CODE_ASSIST_CALLBACK_ID)
    async def handle_code_assist(inputs: Dict[str, Any], client, context, complete, fail):
        event = decode_event("code_assist", inputs)
        if event is None:
            await fail(error="Missing channel_id, message_id or user_id input.")
            return
        await router.dispatch(
            event,
            SlackIO(client=client, bot=bot_identity(context), complete=complete, fail=fail),
        )

    logger.info("Slack listeners registered")
    return assistant
