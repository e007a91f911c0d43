"""
Authenticated session for the current user.

A SessionContext is created once and handed to every network client that
needs it. Nothing reads auth state from a global; code that must react to
the session ending registers an on-unauthorized callback instead.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from shared.models import User


logger = logging.getLogger(__name__)


class SessionContext:
    """Holds the bearer token and the signed-in user."""

    def __init__(
        self,
        token: Optional[str] = None,
        user: Optional[User] = None,
        storage_path: Optional[Path] = None,
    ):
        self._token = token
        self._user = user
        self._storage_path = storage_path
        self._on_unauthorized: list[Callable[[], None]] = []

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def user_id(self) -> Optional[str]:
        return self._user.id if self._user else None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def add_unauthorized_callback(self, callback: Callable[[], None]) -> None:
        """Register a callback run when the server rejects our token."""
        self._on_unauthorized.append(callback)

    def login(self, user: Optional[User], token: str) -> None:
        self._user = user
        self._token = token
        self.save()

    def set_profile(self, user: User) -> None:
        self._user = user
        self.save()

    def logout(self) -> None:
        """Forget credentials locally."""
        self._user = None
        self._token = None
        self.save()

    def expire(self) -> None:
        """The server answered 401: log out and notify listeners."""
        logger.warning("Session rejected by server, logging out")
        self.logout()
        for callback in list(self._on_unauthorized):
            try:
                callback()
            except Exception as e:
                logger.exception(f"Unauthorized callback failed: {e}")

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self) -> None:
        """Write the session to its storage file, if it has one."""
        if self._storage_path is None:
            return
        data = {
            "token": self._token,
            "user": self._user.model_dump() if self._user else None,
        }
        try:
            self._storage_path.parent.mkdir(parents=True, exist_ok=True)
            self._storage_path.write_text(json.dumps(data))
        except OSError as e:
            logger.error(f"Failed to save session: {e}")

    @classmethod
    def load(cls, path: Path) -> "SessionContext":
        """Restore a session from disk; a missing or corrupt file gives an empty one."""
        session = cls(storage_path=path)
        if not path.exists():
            return session
        try:
            data = json.loads(path.read_text())
            user = User.model_validate(data["user"]) if data.get("user") else None
        except (OSError, json.JSONDecodeError, AttributeError, KeyError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
            return session
        session._token = data.get("token")
        session._user = user
        return session
