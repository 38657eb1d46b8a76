from typing import Literal, Optional, Dict, Any
from pydantic import BaseModel

Role = Literal["system", "user", "assistant"]

class ConversationMessage(BaseModel):
    role: Role
    content: str
    user_id: Optional[str] = None
    bot_id: Optional[str] = None
    ts: Optional[str] = None

    @classmethod
    def from_slack(cls, message: Dict[str, Any]) -> "ConversationMessage":
        """Bot-authored messages become assistant turns, everything else a user turn."""
        return cls(
            role="assistant" if message.get("bot_id") else "user",
            content=message.get("text") or "",
            user_id=message.get("user"),
            bot_id=message.get("bot_id"),
            ts=message.get("ts"),
        )

    def to_openai(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}

class BotIdentity(BaseModel):
    """The running bot as Slack knows it (from the Bolt context)."""
    user_id: Optional[str] = None
    bot_id: Optional[str] = None

    @property
    def mention(self) -> Optional[str]:
        return f"<@{self.user_id}>" if self.user_id else None
