from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

from ..config import DATA_DIR
from ..schemas.conversation import ConversationMessage

PROMPTS_DIR = DATA_DIR / "prompts"

SUMMARIZE_CHANNEL_PROMPT = "Assistant, please summarize the activity in this channel!"

def load_prompt(name: str) -> str:
    path = PROMPTS_DIR / f"{name}.md"
    if not path.exists():
        raise FileNotFoundError(f"Prompt {name} not found in {PROMPTS_DIR}")
    with open(path, "r") as f:
        return f.read().strip()

@lru_cache()
def system_prompt() -> str:
    return load_prompt("system")

def build_prompt_sequence(
    history: Iterable[ConversationMessage],
    user_text: str,
    system: Optional[str] = None,
) -> List[Dict[str, str]]:
    """
    [system, *history (oldest first), current message], without empty entries.
    A new list is built on every call.
    """
    messages = [{"role": "system", "content": system if system is not None else system_prompt()}]
    messages.extend(m.to_openai() for m in history)
    messages.append({"role": "user", "content": user_text})
    return [m for m in messages if m["content"]]

def build_channel_summary_prompt(channel_id: str, messages: Iterable[Dict[str, Any]]) -> str:
    """
    Single-shot summary request. `messages` must be oldest first; only
    messages posted by people are included.
    """
    prompt = f"Generate a brief summary of the following messages from Slack channel <#{channel_id}>:"
    for m in messages:
        if m.get("user"):
            prompt += f"\n<@{m['user']}> says: {m.get('text', '')}"
    return prompt
