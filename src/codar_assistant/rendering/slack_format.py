"""Slack mrkdwn formatting for LLM outputs.

Models answer in generic Markdown; Slack renders its own dialect (single
asterisk bold, no headings, no list syntax). Code spans are left alone.
"""

from __future__ import annotations

import re
from typing import List

_FENCE_RE = re.compile(r"(```[\s\S]*?```)")

# Markdown # Heading (levels 1-3) -> Slack *Heading*
_HEADING_RE = re.compile(r"^#{1,3}[ \t]+(.+)$", re.MULTILINE)

# Inline code first so a `**` inside it never opens bold; bold may wrap whole
# code spans. A `**` touching another `*` (e.g. ***x***) is not bold.
_BOLD_OR_CODE_RE = re.compile(
    r"(?P<code>`[^`\n]+`)"
    r"|(?<!\*)\*\*(?P<bold>(?:`[^`\n]+`|[^*`\n])+?)\*\*(?!\*)"
)

# "* item" / "- item" at line start -> "• item"
_BULLET_RE = re.compile(r"^[*-][ \t]+(?=\S)", re.MULTILINE)


def _heading(match: re.Match) -> str:
    title = match.group(1).strip().strip("*").strip()
    return f"*{title}*" if title else match.group(0)


def _bold(match: re.Match) -> str:
    if match.group("code") is not None:
        return match.group(0)
    return f"*{match.group('bold')}*"


def _convert(text: str) -> str:
    text = _HEADING_RE.sub(_heading, text)
    text = _BOLD_OR_CODE_RE.sub(_bold, text)
    return _BULLET_RE.sub("• ", text)


def markdown_to_slack_mrkdwn(text: str) -> str:
    """
    Convert Markdown headings, bold and bullets to Slack mrkdwn.
    Keeps triple-backtick code blocks and inline code unchanged.
    Converting already converted text changes nothing.
    """
    if not text:
        return text
    parts = _FENCE_RE.split(text)
    out: List[str] = []
    for i, p in enumerate(parts):
        # split() puts the captured fences at odd indexes
        out.append(p if i % 2 else _convert(p))
    return "".join(out)
