"""Slack Block Kit payload builders.

Provides the mrkdwn section block used for every reply and the App Home view
with the model selector.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from codar_assistant.llm.models import ModelOption, find_model
from codar_assistant.rendering.slack_format import markdown_to_slack_mrkdwn

MODEL_SELECT_BLOCK_ID = "model_select_input_block"
MODEL_SELECT_ACTION_ID = "model_select_action"


def build_markdown_section(text: str) -> Dict[str, Any]:
    """Section block holding the text converted to Slack mrkdwn."""
    return {
        "type": "section",
        "text": {"type": "mrkdwn", "text": markdown_to_slack_mrkdwn(text)},
    }


def build_mrkdwn_blocks(text: str) -> List[Dict[str, Any]]:
    """
    Build Block Kit payload that renders Slack mrkdwn properly.
    Posts the entire text as a single block (no splitting).
    """
    return [build_markdown_section(text)]


def build_reply_payload(text: str, thread_ts: Optional[str] = None) -> Dict[str, Any]:
    """
    Keyword arguments for say(): fallback text for notifications plus the block.
    """
    payload: Dict[str, Any] = {
        "text": text,
        "blocks": build_mrkdwn_blocks(text),
    }
    if thread_ts:
        payload["thread_ts"] = thread_ts
    return payload


def _option(model: ModelOption) -> Dict[str, Any]:
    return {
        "text": {"type": "plain_text", "text": model.name, "emoji": True},
        "value": model.id,
    }


def build_model_select(catalog: Sequence[ModelOption], current_model: str) -> Dict[str, Any]:
    select: Dict[str, Any] = {
        "type": "static_select",
        "placeholder": {"type": "plain_text", "text": "Select a model", "emoji": True},
        "options": [_option(m) for m in catalog],
        "action_id": MODEL_SELECT_ACTION_ID,
    }
    selected = find_model(catalog, current_model)
    if selected is not None:
        select["initial_option"] = _option(selected)
    return {
        "type": "actions",
        "block_id": MODEL_SELECT_BLOCK_ID,
        "elements": [select],
    }


def build_home_view(user_id: str, catalog: Sequence[ModelOption], current_model: str) -> Dict[str, Any]:
    """
    App Home tab: welcome text, model selector (preselecting the user's model
    when it is in the catalog) and a help footer.
    """
    welcome = (
        f"*Welcome home, <@{user_id}> :house:*\n\n"
        "I'm Codar, your AI coding assistant! I can help you with code questions, "
        "debugging, best practices, and more. You can mention me in any channel "
        "(`@Codar`) or start a thread with me directly."
    )
    return {
        "type": "home",
        "blocks": [
            build_markdown_section(welcome),
            {"type": "divider"},
            {
                "type": "rich_text",
                "elements": [
                    {
                        "type": "rich_text_section",
                        "elements": [
                            {"type": "text", "text": "Select an AI model", "style": {"bold": True}},
                        ],
                    }
                ],
            },
            build_model_select(catalog, current_model),
            {"type": "divider"},
            {
                "type": "context",
                "elements": [
                    {
                        "type": "mrkdwn",
                        "text": "Need help? Check out the <https://docs.slack.dev/block-kit/|Block Kit documentation> or ask me a question!",
                    }
                ],
            },
        ],
    }
