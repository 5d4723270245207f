import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SESSION_FILE = "session_data.json"

# Only the auth token and the signed-in user survive a restart. Anything
# else the wizard holds is per-session and rebuilt from the backend.
TOKEN_KEY = "token"
USER_KEY = "user"
PERSISTED_KEYS = {TOKEN_KEY, USER_KEY}


def _serializable(value: Any) -> bool:
    return isinstance(value, (int, float, str, bool, list, dict))


class SessionStore:
    """Auth token and user profile persisted to a small JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or SESSION_FILE
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Restore persisted keys from ``path`` if it exists."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return
        if isinstance(data, dict):
            self._data = {k: v for k, v in data.items() if k in PERSISTED_KEYS}

    def save(self) -> None:
        data = {k: v for k, v in self._data.items() if k in PERSISTED_KEYS and _serializable(v)}
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def set_token(self, token: str) -> None:
        self._data[TOKEN_KEY] = token
        self.save()

    def get_token(self) -> Optional[str]:
        return self._data.get(TOKEN_KEY) or None

    def remove_token(self) -> None:
        self._data.pop(TOKEN_KEY, None)
        self.save()

    def set_user(self, user: Dict[str, Any]) -> None:
        self._data[USER_KEY] = user
        self.save()

    def get_user(self) -> Optional[Dict[str, Any]]:
        return self._data.get(USER_KEY)

    def remove_user(self) -> None:
        self._data.pop(USER_KEY, None)
        self.save()

    def clear_auth_data(self) -> None:
        self._data = {}
        self.save()

    def has_stored_auth(self) -> bool:
        return bool(self.get_token()) and self.get_user() is not None
