"""Session context: who is signed in.

The signed-in identity is held by an explicit ``SessionContext`` object
that is passed to the services needing it. It is cached in a
``SessionStore`` under a fixed key (``"currentUser"`` by default) so a
restart can restore it. Only the user's id and username are stored.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from pydantic import ValidationError as PydanticValidationError

from ...infrastructure.config.settings import get_settings
from ...infrastructure.logging import get_logger
from .schemas import UserIdentity

logger = get_logger(__name__)


class SessionStore(Protocol):
    """Durable key-value storage for session data."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySessionStore:
    """Process-local store; used for request-scoped sessions and in tests."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileSessionStore:
    """JSON file store. The whole file is rewritten on every change."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path or get_settings().SESSION_STORE_PATH)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable session file {self.path}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class SessionContext:
    """The current user, if any, backed by a ``SessionStore``."""

    def __init__(self, store: Optional[SessionStore] = None, storage_key: Optional[str] = None):
        self.store: SessionStore = store if store is not None else MemorySessionStore()
        self.storage_key = storage_key or get_settings().SESSION_STORAGE_KEY
        self._user: Optional[UserIdentity] = None

    @classmethod
    def for_user(cls, user: Optional[UserIdentity]) -> "SessionContext":
        """A throwaway in-memory context already signed in as ``user``."""
        context = cls(MemorySessionStore())
        if user is not None:
            context.set_user(user)
        return context

    def init_from_storage(self) -> Optional[UserIdentity]:
        """Restore the cached identity. A malformed entry is discarded."""
        cached = self.store.get(self.storage_key)
        if cached is None:
            self._user = None
            return None
        try:
            self._user = UserIdentity.model_validate(cached)
        except PydanticValidationError:
            logger.warning("Discarding malformed cached session")
            self.store.delete(self.storage_key)
            self._user = None
        return self._user

    def set_user(self, user: UserIdentity) -> None:
        self._user = UserIdentity(id=user.id, username=user.username)
        self.store.set(self.storage_key, self._user.model_dump())

    def clear(self) -> None:
        """Sign out and forget the cached identity."""
        self._user = None
        self.store.delete(self.storage_key)

    @property
    def current_user(self) -> Optional[UserIdentity]:
        return self._user

    @property
    def current_user_id(self) -> Optional[str]:
        return self._user.id if self._user else None

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None
