from hypothesis import given
from hypothesis import strategies as st

from codar_assistant.rendering.slack_format import markdown_to_slack_mrkdwn


def test_headings_become_bold_lines():
    md = "# Title\n## Section\n### Heading\nbody"
    out = markdown_to_slack_mrkdwn(md)
    assert out == "*Title*\n*Section*\n*Heading*\nbody"
    assert "#" not in out


def test_level_three_heading_inside_longer_text():
    out = markdown_to_slack_mrkdwn("Intro\n\n### Heading\nMore text")
    assert "*Heading*" in out
    assert "###" not in out


def test_bold_conversion_markdown_to_slack():
    out = markdown_to_slack_mrkdwn("Use **bold** and **more bold** here.")
    assert "**" not in out
    assert out == "Use *bold* and *more bold* here."


def test_bullets_become_glyphs():
    out = markdown_to_slack_mrkdwn("* first\n- second\n  indented - not a bullet")
    assert out == "• first\n• second\n  indented - not a bullet"


def test_bullet_with_bold_item():
    assert markdown_to_slack_mrkdwn("* **Step** one") == "• *Step* one"


def test_heading_with_bold_is_not_double_wrapped():
    assert markdown_to_slack_mrkdwn("## **Setup**") == "*Setup*"


def test_plain_text_unchanged():
    text = "Nothing special here.\nJust two lines, with a * star and a 3 - 1 sum."
    assert markdown_to_slack_mrkdwn(text) == text


def test_empty_text():
    assert markdown_to_slack_mrkdwn("") == ""


def test_code_fence_is_preserved():
    md = "Example:\n```python\n# comment\n- not a bullet\nx = a**b**c\n```\n- bullet"
    out = markdown_to_slack_mrkdwn(md)
    assert "```python\n# comment\n- not a bullet\nx = a**b**c\n```" in out
    assert out.endswith("• bullet")


def test_inline_code_is_preserved():
    out = markdown_to_slack_mrkdwn("Call `f(**kwargs)` with **care**")
    assert out == "Call `f(**kwargs)` with *care*"


def test_bullet_starting_with_inline_code():
    assert markdown_to_slack_mrkdwn("- `pip install x`") == "• `pip install x`"


def test_reapplying_is_safe():
    md = "### Heading\n**bold** text\n* item\n- other"
    once = markdown_to_slack_mrkdwn(md)
    assert markdown_to_slack_mrkdwn(once) == once


def test_bold_wrapping_inline_code():
    """
    WHY: Models often bold a whole instruction that contains a command.
    HOW: Convert a bold phrase with an inline code span inside it.
    EXPECTED: Bold narrowed to single asterisks, code span untouched.
    """
    out = markdown_to_slack_mrkdwn("**Run `pip install x` first**")
    assert out == "*Run `pip install x` first*"
    assert "**" not in out


def test_triple_asterisks_left_alone():
    assert markdown_to_slack_mrkdwn("***x***") == "***x***"


_NO_MARKERS = st.text(alphabet=st.characters(blacklist_characters="*#-`"))


@given(_NO_MARKERS)
def test_text_without_markers_is_unchanged(text):
    assert markdown_to_slack_mrkdwn(text) == text


@given(st.text())
def test_converting_twice_changes_nothing(text):
    once = markdown_to_slack_mrkdwn(text)
    assert markdown_to_slack_mrkdwn(once) == once


@given(st.text(alphabet="*#-` \nab"))
def test_converting_twice_changes_nothing_on_marker_heavy_text(text):
    once = markdown_to_slack_mrkdwn(text)
    assert markdown_to_slack_mrkdwn(once) == once
