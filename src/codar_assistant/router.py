"""Event routing: one handler per typed event, looked up in a dispatch table.

Bolt listeners (see slack/app.py) decode their payload and call
EventRouter.dispatch. A failing handler is logged and never reaches Bolt.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel
from slack_sdk.web.async_client import AsyncWebClient

from .llm.models import ModelOption, find_model
from .llm.prompts import SUMMARIZE_CHANNEL_PROMPT
from .pipeline.dispatch import CompletionDispatcher
from .pipeline.involvement import DEFAULT_INVOLVEMENT_WINDOW, check_thread_involvement, mentions_bot
from .schemas.conversation import BotIdentity
from .schemas.events import (
    AppHomeOpened,
    AppMention,
    AssistantUserMessage,
    ChannelMessage,
    CodeAssistInvoked,
    ModelSelected,
    ThreadContextChanged,
    ThreadStarted,
)
from .slack.post_blocks import build_home_view, build_reply_payload
from .store.preferences import ModelPreferenceStore

logger = logging.getLogger("router")

WELCOME_MESSAGE = "Hi! I'm your coding assistant. Ask me any questions about code!"
SUGGESTED_PROMPTS_TITLE = "Here are some questions you can ask:"
SUGGESTED_PROMPTS: List[Dict[str, str]] = [
    {
        "title": "Code Example",
        "message": "Show me an example of implementing a binary search tree in Python.",
    },
    {
        "title": "Code Review",
        "message": "What are best practices for writing clean, maintainable code?",
    },
    {
        "title": "Debug Help",
        "message": "How do I debug memory leaks in Python applications?",
    },
]
SUMMARIZE_SUGGESTION = {"title": "Summarize channel", "message": SUMMARIZE_CHANNEL_PROMPT}

MENTIONS_DISABLED_REPLY = "I'm not talking direct mentions at the moment. Start a new thread with me instead."
EMPTY_MENTION_REPLY = "How can I help you?"
GREETING_TRIGGER = "hello"

Callback = Callable[..., Awaitable[Any]]


@dataclass
class SlackIO:
    """Platform collaborators available to a handler; unused ones stay None."""
    client: AsyncWebClient
    bot: BotIdentity = field(default_factory=BotIdentity)
    say: Optional[Callback] = None
    ack: Optional[Callback] = None
    set_status: Optional[Callback] = None
    set_title: Optional[Callback] = None
    set_suggested_prompts: Optional[Callback] = None
    save_thread_context: Optional[Callback] = None
    get_thread_context: Optional[Callback] = None
    complete: Optional[Callback] = None
    fail: Optional[Callback] = None


class EventRouter:
    def __init__(
        self,
        dispatcher: CompletionDispatcher,
        preferences: ModelPreferenceStore,
        catalog: Sequence[ModelOption],
        mentions_enabled: bool = False,
        involvement_window: int = DEFAULT_INVOLVEMENT_WINDOW,
    ):
        self.dispatcher = dispatcher
        self.preferences = preferences
        self.catalog = list(catalog)
        self.mentions_enabled = mentions_enabled
        self.involvement_window = involvement_window
        self._handlers: Dict[Type[BaseModel], Callable[[Any, SlackIO], Awaitable[None]]] = {
            ThreadStarted: self.on_thread_started,
            ThreadContextChanged: self.on_thread_context_changed,
            AssistantUserMessage: self.on_assistant_message,
            ChannelMessage: self.on_channel_message,
            AppMention: self.on_app_mention,
            ModelSelected: self.on_model_selected,
            AppHomeOpened: self.on_app_home_opened,
            CodeAssistInvoked: self.on_code_assist,
        }

    async def dispatch(self, event: Optional[BaseModel], io: SlackIO) -> None:
        if event is None:
            return
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning(f"No handler for {type(event).__name__}")
            return
        try:
            await handler(event, io)
        except Exception:
            logger.exception(f"Error handling {type(event).__name__}")

    # Assistant container

    async def on_thread_started(self, event: ThreadStarted, io: SlackIO) -> None:
        await io.say(WELCOME_MESSAGE)
        await io.save_thread_context(event.context)

        prompts = list(SUGGESTED_PROMPTS)
        if event.context_channel_id:
            prompts.append(SUMMARIZE_SUGGESTION)
        await io.set_suggested_prompts(prompts=prompts, title=SUGGESTED_PROMPTS_TITLE)

    async def on_thread_context_changed(self, event: ThreadContextChanged, io: SlackIO) -> None:
        await io.save_thread_context(event.context)

    async def on_assistant_message(self, event: AssistantUserMessage, io: SlackIO) -> None:
        await io.set_title(event.text)
        await io.set_status("is thinking...")

        if event.text == SUMMARIZE_CHANNEL_PROMPT:
            context = await io.get_thread_context() if io.get_thread_context else None
            channel_id = (context or {}).get("channel_id") or event.channel
            await self.dispatcher.summarize_channel(
                io.client, io.say, channel_id, event.user, thread_ts=event.thread_ts
            )
            return

        await self.dispatcher.reply_in_thread(
            io.client, io.say, event.channel, event.thread_ts, event.text, event.user,
            message_ts=event.ts,
        )

    # Channels

    async def on_channel_message(self, event: ChannelMessage, io: SlackIO) -> None:
        text = event.text or ""

        # Mentions are answered by the app_mention listener
        if mentions_bot(text, io.bot):
            return
        if event.bot_id:
            return
        if event.subtype and event.subtype != "thread_broadcast":
            return

        if not event.thread_ts:
            if GREETING_TRIGGER in text and event.user:
                await io.say(f"Hey there <@{event.user}>!")
            return

        if not text.strip():
            return
        if not event.user:
            logger.info("Message received without a valid user ID, ignoring.")
            return

        if text == SUMMARIZE_CHANNEL_PROMPT:
            await self.dispatcher.summarize_channel(
                io.client, io.say, event.channel, event.user, thread_ts=event.thread_ts
            )
            return

        involved = await check_thread_involvement(
            io.client, event.channel, event.thread_ts, io.bot, window=self.involvement_window
        )
        if not involved:
            logger.info(f"Bot is not involved in thread {event.thread_ts}. Ignoring message.")
            return

        logger.info(f"Bot is involved in thread {event.thread_ts}, processing user message...")
        await self.dispatcher.reply_in_thread(
            io.client, io.say, event.channel, event.thread_ts, text, event.user,
            message_ts=event.ts,
        )

    async def on_app_mention(self, event: AppMention, io: SlackIO) -> None:
        if not self.mentions_enabled:
            await io.say(**build_reply_payload(MENTIONS_DISABLED_REPLY))
            return

        thread_ts = event.thread_ts or event.ts
        if not event.user:
            logger.info("App mention received without a valid user ID, ignoring.")
            return

        text = event.text
        if io.bot.mention:
            text = text.replace(io.bot.mention, "", 1)
        text = text.strip()

        if not text:
            logger.info(f"Ignoring empty mention from {event.user} in channel {event.channel}")
            await io.say(**build_reply_payload(EMPTY_MENTION_REPLY, thread_ts))
            return

        logger.info(f"Processing mention from {event.user} in channel {event.channel} (thread: {thread_ts})")
        await self.dispatcher.reply_in_thread(
            io.client, io.say, event.channel, thread_ts, text, event.user,
            message_ts=event.ts,
        )

    # App Home

    async def on_model_selected(self, event: ModelSelected, io: SlackIO) -> None:
        if io.ack:
            await io.ack()

        if not event.model_id:
            logger.warning("Model selection action received without a valid selected option.")
            return

        self.preferences.set(event.user_id, event.model_id)
        logger.info(f"User {event.user_id} selected model: {event.model_id}")

        model = find_model(self.catalog, event.model_id)
        name = event.model_name or (model.name if model else event.model_id)
        try:
            await io.client.chat_postEphemeral(
                channel=event.user_id,
                user=event.user_id,
                text=f"Model updated to: {name}",
            )
        except Exception:
            logger.exception("Failed to send ephemeral confirmation message")

    async def on_app_home_opened(self, event: AppHomeOpened, io: SlackIO) -> None:
        current = self.preferences.get(event.user_id)
        await io.client.views_publish(
            user_id=event.user_id,
            view=build_home_view(event.user_id, self.catalog, current),
        )

    # Workflow steps

    async def on_code_assist(self, event: CodeAssistInvoked, io: SlackIO) -> None:
        await self.dispatcher.code_assist(
            io.client, event.channel_id, event.message_id, event.user_id, io.complete, io.fail
        )
