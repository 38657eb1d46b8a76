"""Typed variants of the Slack events the bot reacts to.

Bolt hands listeners loosely shaped dicts. Each payload is decoded once into
one of the models below; the router and everything after it only sees these.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Callable, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ThreadStarted(BaseModel):
    kind: Literal["thread_started"] = "thread_started"
    channel_id: str
    thread_ts: str
    user_id: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)

    @property
    def context_channel_id(self) -> Optional[str]:
        return self.context.get("channel_id")


class ThreadContextChanged(BaseModel):
    kind: Literal["thread_context_changed"] = "thread_context_changed"
    channel_id: str
    thread_ts: str
    context: Dict[str, Any] = Field(default_factory=dict)


class AssistantUserMessage(BaseModel):
    """A message a user sent inside the bot's own assistant thread."""
    kind: Literal["assistant_user_message"] = "assistant_user_message"
    channel: str
    thread_ts: str
    ts: Optional[str] = None
    user: Optional[str] = None
    text: str = ""


class ChannelMessage(BaseModel):
    kind: Literal["channel_message"] = "channel_message"
    channel: str
    ts: Optional[str] = None
    thread_ts: Optional[str] = None
    user: Optional[str] = None
    bot_id: Optional[str] = None
    subtype: Optional[str] = None
    text: Optional[str] = None


class AppMention(BaseModel):
    kind: Literal["app_mention"] = "app_mention"
    channel: str
    ts: str
    thread_ts: Optional[str] = None
    user: Optional[str] = None
    text: str = ""


class ModelSelected(BaseModel):
    kind: Literal["model_selected"] = "model_selected"
    user_id: str
    model_id: Optional[str] = None
    model_name: Optional[str] = None


class AppHomeOpened(BaseModel):
    kind: Literal["app_home_opened"] = "app_home_opened"
    user_id: str
    tab: Optional[str] = None


class CodeAssistInvoked(BaseModel):
    kind: Literal["code_assist"] = "code_assist"
    channel_id: str
    message_id: str
    user_id: str


BotEvent = Annotated[
    Union[
        ThreadStarted,
        ThreadContextChanged,
        AssistantUserMessage,
        ChannelMessage,
        AppMention,
        ModelSelected,
        AppHomeOpened,
        CodeAssistInvoked,
    ],
    Field(discriminator="kind"),
]


def _assistant_thread(payload: Dict[str, Any]) -> Dict[str, Any]:
    thread = payload.get("assistant_thread") or {}
    return {
        "channel_id": thread.get("channel_id"),
        "thread_ts": thread.get("thread_ts"),
        "user_id": thread.get("user_id"),
        "context": thread.get("context") or {},
    }


def _thread_started(payload: Dict[str, Any]) -> ThreadStarted:
    return ThreadStarted(**_assistant_thread(payload))


def _thread_context_changed(payload: Dict[str, Any]) -> ThreadContextChanged:
    fields = _assistant_thread(payload)
    fields.pop("user_id")
    return ThreadContextChanged(**fields)


def _assistant_user_message(payload: Dict[str, Any]) -> AssistantUserMessage:
    return AssistantUserMessage(
        channel=payload.get("channel"),
        thread_ts=payload.get("thread_ts"),
        ts=payload.get("ts"),
        user=payload.get("user"),
        text=payload.get("text") or "",
    )


def _channel_message(payload: Dict[str, Any]) -> ChannelMessage:
    return ChannelMessage(
        channel=payload.get("channel"),
        ts=payload.get("ts"),
        thread_ts=payload.get("thread_ts"),
        user=payload.get("user"),
        bot_id=payload.get("bot_id"),
        subtype=payload.get("subtype"),
        text=payload.get("text") if isinstance(payload.get("text"), str) else None,
    )


def _app_mention(payload: Dict[str, Any]) -> AppMention:
    return AppMention(
        channel=payload.get("channel"),
        ts=payload.get("ts"),
        thread_ts=payload.get("thread_ts"),
        user=payload.get("user"),
        text=payload.get("text") or "",
    )


def _model_selected(body: Dict[str, Any]) -> ModelSelected:
    actions = body.get("actions") or [{}]
    option = actions[0].get("selected_option") or {}
    return ModelSelected(
        user_id=(body.get("user") or {}).get("id"),
        model_id=option.get("value") or None,
        model_name=(option.get("text") or {}).get("text"),
    )


def _app_home_opened(payload: Dict[str, Any]) -> AppHomeOpened:
    return AppHomeOpened(user_id=payload.get("user"), tab=payload.get("tab"))


def _code_assist(inputs: Dict[str, Any]) -> CodeAssistInvoked:
    return CodeAssistInvoked(
        channel_id=inputs.get("channel_id"),
        message_id=inputs.get("message_id"),
        user_id=inputs.get("user_id"),
    )


_DECODERS: Dict[str, Callable[[Dict[str, Any]], BaseModel]] = {
    "thread_started": _thread_started,
    "thread_context_changed": _thread_context_changed,
    "assistant_user_message": _assistant_user_message,
    "channel_message": _channel_message,
    "app_mention": _app_mention,
    "model_selected": _model_selected,
    "app_home_opened": _app_home_opened,
    "code_assist": _code_assist,
}


def decode_event(kind: str, payload: Optional[Dict[str, Any]]) -> Optional[BotEvent]:
    """
    Decode a raw Bolt payload into its typed variant.
    Returns None (and logs) when required fields are missing or malformed.
    """
    decoder = _DECODERS.get(kind)
    if decoder is None:
        raise ValueError(f"Unknown event kind: {kind}")
    try:
        return decoder(payload or {})
    except ValidationError as e:
        logger.info(f"Ignoring malformed {kind} payload: {e.error_count()} invalid field(s)")
        return None
