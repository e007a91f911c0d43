"""
Read-through cache of server read views.

Entries are keyed by (query key, game id). The server is the only writer:
the cache never derives new values on its own, it only remembers the last
response and whether that response is still current. Invalidation marks an
entry stale so the next read refetches it; nothing is refetched eagerly.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from shared.enums import QueryKey


logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached server response."""
    value: Any = None
    stale: bool = True
    loaded: bool = False
    # Bumped on every invalidation
    generation: int = 0


class QueryCache(QObject):
    """
    Game-scoped cache of server read views.

    Signals:
    - invalidated(key, game_id): an entry was marked stale
    - updated(key, game_id): an entry received a fresh value
    """

    invalidated = pyqtSignal(str, str)
    updated = pyqtSignal(str, str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._entries: dict[tuple[str, str], CacheEntry] = {}

    @staticmethod
    def _key(key: QueryKey | str) -> str:
        return key.value if isinstance(key, QueryKey) else key

    def get(self, key: QueryKey | str, game_id: str, default: Any = None) -> Any:
        """Return the cached value, stale or not."""
        entry = self._entries.get((self._key(key), game_id))
        if entry is None or not entry.loaded:
            return default
        return entry.value

    def set(self, key: QueryKey | str, game_id: str, value: Any) -> None:
        """Store a fresh server response."""
        name = self._key(key)
        entry = self._entries.setdefault((name, game_id), CacheEntry())
        entry.value = value
        entry.stale = False
        entry.loaded = True
        self.updated.emit(name, game_id)

    def is_stale(self, key: QueryKey | str, game_id: str) -> bool:
        entry = self._entries.get((self._key(key), game_id))
        return entry is None or entry.stale

    async def fetch(
        self,
        key: QueryKey | str,
        game_id: str,
        loader: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached value, calling the loader only if it is missing or stale.

        Loader errors propagate and leave the entry stale. A response that
        was in flight when the entry got invalidated is returned and kept,
        but the entry stays stale.
        """
        name = self._key(key)
        entry = self._entries.setdefault((name, game_id), CacheEntry())
        if not entry.stale:
            return entry.value

        generation = entry.generation
        value = await loader()

        entry = self._entries.setdefault((name, game_id), CacheEntry())
        if entry.generation != generation:
            entry.value = value
            entry.loaded = True
            return value

        self.set(name, game_id, value)
        return value

    def invalidate(self, key: QueryKey | str, game_id: str) -> None:
        """Mark one game-scoped entry stale."""
        name = self._key(key)
        entry = self._entries.setdefault((name, game_id), CacheEntry())
        entry.stale = True
        entry.generation += 1
        logger.debug(f"Invalidated {name} for game {game_id}")
        self.invalidated.emit(name, game_id)

    def invalidate_game(self, game_id: str) -> None:
        """Mark every read view of a game stale (used after a reconnect)."""
        names = {name for (name, gid) in self._entries if gid == game_id}
        names.update(key.value for key in QueryKey)
        for name in sorted(names):
            self.invalidate(name, game_id)

    def clear(self, game_id: Optional[str] = None) -> None:
        """Forget cached values, for one game or all of them."""
        if game_id is None:
            self._entries.clear()
            return
        for cache_key in [k for k in self._entries if k[1] == game_id]:
            del self._entries[cache_key]
