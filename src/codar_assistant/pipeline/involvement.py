"""Decide whether the bot takes part in a thread it was not explicitly mentioned in.

The bot answers follow-up messages only in threads where it was addressed or
has already replied, so it stays out of unrelated conversations.
"""

import logging
from typing import Any, Dict, Iterable

from slack_sdk.web.async_client import AsyncWebClient

from ..schemas.conversation import BotIdentity
from ..slack.history import fetch_thread_replies

logger = logging.getLogger("pipeline")

DEFAULT_INVOLVEMENT_WINDOW = 5


def mentions_bot(text: str, bot: BotIdentity) -> bool:
    return bool(text) and bot.mention is not None and bot.mention in text


def sent_by_bot(message: Dict[str, Any], bot: BotIdentity) -> bool:
    bot_id = message.get("bot_id")
    if bot_id and bot_id in (bot.bot_id, bot.user_id):
        return True
    return bool(bot.user_id) and message.get("user") == bot.user_id


def is_bot_involved(messages: Iterable[Dict[str, Any]], bot: BotIdentity) -> bool:
    """True if any message mentions the bot or was posted by it."""
    return any(
        mentions_bot(m.get("text") or "", bot) or sent_by_bot(m, bot)
        for m in messages
    )


async def check_thread_involvement(
    client: AsyncWebClient,
    channel: str,
    thread_ts: str,
    bot: BotIdentity,
    window: int = DEFAULT_INVOLVEMENT_WINDOW,
) -> bool:
    """
    Look at the first `window` messages of the thread. Any failure reading
    them counts as not involved, so the bot never replies unprompted.
    """
    try:
        messages = await fetch_thread_replies(client, channel, thread_ts, limit=window)
    except Exception:
        logger.exception(f"Could not read thread {thread_ts} for involvement check")
        return False
    return is_bot_involved(messages, bot)
