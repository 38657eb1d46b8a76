"""Conversation history reads against the Slack Web API.

All reads share one recovery path: when Slack answers ``not_in_channel`` the
bot joins the channel and retries the call exactly once.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

import aiohttp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from ..log import get_logger
from ..schemas.conversation import ConversationMessage

logger = get_logger("slack_history")

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 1000

# Network failures below the Web API layer (no Slack error code)
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class HistoryUnavailableError(Exception):
    """Raised when history still cannot be read after joining the channel."""

    def __init__(self, channel: str, error: str):
        super().__init__(f"Cannot read history of {channel}: {error}")
        self.channel = channel
        self.error = error


def _api_error(e: SlackApiError) -> str:
    try:
        return e.response["error"]
    except (KeyError, TypeError):
        return str(e)


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return DEFAULT_HISTORY_LIMIT
    return max(1, min(int(limit), MAX_HISTORY_LIMIT))


async def _call_with_join(
    client: AsyncWebClient,
    channel: str,
    call: Callable[[], Awaitable[Any]],
) -> Optional[List[Dict[str, Any]]]:
    """
    Run a history call. Returns its messages, or None when Slack refused for a
    reason other than membership or could not be reached (logged). Raises
    HistoryUnavailableError when the retry after joining fails too.
    """
    try:
        response = await call()
    except TRANSPORT_ERRORS as e:
        logger.error(f"Error fetching history for {channel}: {e!r}")
        return None
    except SlackApiError as e:
        error = _api_error(e)
        if error != "not_in_channel":
            logger.error(f"Error fetching history for {channel}: {error}")
            return None

        logger.info(f"Not a member of {channel}, joining and retrying")
        try:
            await client.conversations_join(channel=channel)
            response = await call()
        except SlackApiError as retry_error:
            raise HistoryUnavailableError(channel, _api_error(retry_error)) from retry_error
        except TRANSPORT_ERRORS as retry_error:
            raise HistoryUnavailableError(channel, repr(retry_error)) from retry_error

    return response.get("messages") or []


async def fetch_thread_history(
    client: AsyncWebClient,
    channel: str,
    thread_ts: str,
    *,
    limit: Optional[int] = DEFAULT_HISTORY_LIMIT,
    exclude_ts: Optional[str] = None,
) -> List[ConversationMessage]:
    """
    Messages of a thread, oldest first, as conversation turns.
    Keeps only messages with text and a human or bot sender, and drops the
    triggering message (exclude_ts) so it is not sent to the model twice.
    """
    limit = clamp_limit(limit)

    async def call():
        return await client.conversations_replies(
            channel=channel, ts=thread_ts, oldest=thread_ts, limit=limit
        )

    raw = await _call_with_join(client, channel, call)
    if not raw:
        return []

    return [
        ConversationMessage.from_slack(m)
        for m in raw
        if m.get("text")
        and (m.get("user") or m.get("bot_id"))
        and not (exclude_ts and m.get("ts") == exclude_ts)
    ]


async def fetch_thread_replies(
    client: AsyncWebClient,
    channel: str,
    thread_ts: str,
    *,
    limit: int,
) -> List[Dict[str, Any]]:
    """Raw replies of a thread (no filtering), used for the involvement check."""
    limit = clamp_limit(limit)

    async def call():
        return await client.conversations_replies(channel=channel, ts=thread_ts, limit=limit)

    return await _call_with_join(client, channel, call) or []


async def fetch_channel_history(
    client: AsyncWebClient,
    channel: str,
    *,
    limit: Optional[int] = DEFAULT_HISTORY_LIMIT,
) -> List[Dict[str, Any]]:
    """Latest channel messages, newest first as Slack returns them."""
    limit = clamp_limit(limit)

    async def call():
        return await client.conversations_history(channel=channel, limit=limit)

    return await _call_with_join(client, channel, call) or []


async def fetch_message(
    client: AsyncWebClient,
    channel: str,
    message_ts: str,
) -> Optional[Dict[str, Any]]:
    """A single message by timestamp, or None when it cannot be read."""

    async def call():
        return await client.conversations_history(
            channel=channel, oldest=message_ts, limit=1, inclusive=True
        )

    messages = await _call_with_join(client, channel, call)
    if messages is None:
        return None
    return messages[0] if messages else {}
