"""Turn a user message into a model reply posted back to Slack.

Every entry point catches its own failures: the user gets a fixed apology in
the thread and the event loop keeps running.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from slack_sdk.web.async_client import AsyncWebClient

from ..llm.client import LLMClient
from ..llm.prompts import build_channel_summary_prompt, build_prompt_sequence, system_prompt
from ..slack.history import (
    DEFAULT_HISTORY_LIMIT,
    fetch_channel_history,
    fetch_message,
    fetch_thread_history,
)
from ..slack.post_blocks import build_mrkdwn_blocks, build_reply_payload
from ..store.preferences import ModelPreferenceStore

logger = logging.getLogger("pipeline")

ERROR_REPLY = "I'm sorry, I encountered an error processing this message. Please try again."
EMPTY_REPLY = "Sorry, I couldn't generate a response."
CODE_ASSIST_ACK = "You have summoned Codar, stand by..."
CODE_ASSIST_NO_HISTORY = "Failed to retrieve message history."

SayFunction = Callable[..., Awaitable[Any]]


class CompletionDispatcher:
    def __init__(
        self,
        llm: LLMClient,
        preferences: ModelPreferenceStore,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        system: Optional[str] = None,
    ):
        self.llm = llm
        self.preferences = preferences
        self.history_limit = history_limit
        self._system = system

    @property
    def system(self) -> str:
        return self._system if self._system is not None else system_prompt()

    async def reply_in_thread(
        self,
        client: AsyncWebClient,
        say: SayFunction,
        channel: str,
        thread_ts: str,
        text: str,
        user_id: Optional[str],
        message_ts: Optional[str] = None,
    ) -> Optional[str]:
        """
        Answer `text` using the thread so far as context.
        Returns the posted reply, or None when the apology was sent instead.
        """
        try:
            logger.info(f"Processing message in thread {thread_ts}: {text!r}")
            history = await fetch_thread_history(
                client, channel, thread_ts, limit=self.history_limit, exclude_ts=message_ts
            )
            messages = build_prompt_sequence(history, text, system=self.system)
            model = self.preferences.get(user_id)

            reply = await self.llm.complete(messages, model=model, span_name="completion.thread_reply")
            reply = reply or EMPTY_REPLY

            await say(**build_reply_payload(reply, thread_ts))
            return reply
        except Exception:
            logger.exception(f"Error processing message in thread {thread_ts}")
            await self._apologize(say, thread_ts)
            return None

    async def summarize_channel(
        self,
        client: AsyncWebClient,
        say: SayFunction,
        channel_id: str,
        user_id: Optional[str],
        thread_ts: Optional[str] = None,
    ) -> Optional[str]:
        """Summarize the latest channel activity and post it to the thread."""
        try:
            logger.info(f"Summarizing channel {channel_id}")
            history = await fetch_channel_history(client, channel_id, limit=self.history_limit)
            # Slack returns newest first
            prompt = build_channel_summary_prompt(channel_id, reversed(history))
            messages = [
                {"role": "system", "content": self.system},
                {"role": "user", "content": prompt},
            ]
            model = self.preferences.get(user_id)

            summary = await self.llm.complete(messages, model=model, span_name="completion.channel_summary")
            summary = summary or EMPTY_REPLY

            await say(**build_reply_payload(summary, thread_ts))
            return summary
        except Exception:
            logger.exception(f"Error summarizing channel {channel_id}")
            await self._apologize(say, thread_ts)
            return None

    async def code_assist(
        self,
        client: AsyncWebClient,
        channel_id: str,
        message_id: str,
        user_id: str,
        complete: Callable[..., Awaitable[Any]],
        fail: Callable[..., Awaitable[Any]],
    ) -> None:
        """
        Workflow step: answer the referenced message in place of a
        "stand by" notice, then report the step as completed.
        """
        try:
            ack = await client.chat_postMessage(
                channel=channel_id,
                text=CODE_ASSIST_ACK,
                blocks=build_mrkdwn_blocks(CODE_ASSIST_ACK),
            )

            message = await fetch_message(client, channel_id, message_id)
            if not message or not message.get("text"):
                await fail(error=CODE_ASSIST_NO_HISTORY)
                return

            messages: List[Dict[str, str]] = [
                {"role": "system", "content": self.system},
                {"role": "user", "content": message["text"]},
            ]
            reply = await self.llm.complete(
                messages, model=self.preferences.get(user_id), span_name="completion.code_assist"
            )

            await complete(outputs={"message": user_id})

            await client.chat_update(
                channel=channel_id,
                ts=ack.get("ts") or "",
                text="",
                blocks=build_mrkdwn_blocks(f"<@{user_id}>,\n\n{reply or ''}"),
            )
        except Exception as e:
            logger.exception("code_assist step failed")
            await fail(error=f"Failed to complete the step: {e}")

    async def _apologize(self, say: SayFunction, thread_ts: Optional[str]) -> None:
        try:
            await say(**build_reply_payload(ERROR_REPLY, thread_ts))
        except Exception:
            logger.exception(f"Failed to send error message in thread {thread_ts}")
