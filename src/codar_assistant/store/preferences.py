"""In-memory store of each user's selected completion model.

Lives for the lifetime of the process; nothing is written to disk. One
instance is created at startup and handed to the dispatcher and the router.
"""

from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

class ModelPreferenceStore:
    def __init__(self, default_model: str, initial: Optional[Dict[str, str]] = None):
        self.default_model = default_model
        self._models: Dict[str, str] = dict(initial or {})

    def get(self, user_id: Optional[str]) -> str:
        """Selected model for the user, or the default when none was chosen."""
        if not user_id:
            return self.default_model
        return self._models.get(user_id, self.default_model)

    def set(self, user_id: str, model_id: str) -> None:
        self._models[user_id] = model_id
        logger.debug(f"Stored model {model_id} for user {user_id}")

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._models

    def __len__(self) -> int:
        return len(self._models)
