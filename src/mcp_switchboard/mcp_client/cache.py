"""
Caching of capability listings.

`BaseCacheStore` is the key/value port (get/put/forget with TTL).
`CapabilityCache` layers per-(server, kind) semantics on top of it.
"""
import abc
from typing import Any

import structlog

from ..models.capabilities import CapabilityEntry
from ..models.common import CapabilityKind
from ..utils.clock import Clock, SystemClock

logger = structlog.get_logger(__name__)


class BaseCacheStore(abc.ABC):
    """Key/value store with per-entry TTL."""

    @abc.abstractmethod
    async def get(self, key: str) -> Any | None:
        """Returns the stored value, or None when absent or expired."""
        pass

    @abc.abstractmethod
    async def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        pass

    @abc.abstractmethod
    async def forget(self, key: str) -> None:
        pass


class InMemoryCacheStore(BaseCacheStore):
    """
    Process-local store. Each entry is replaced by a single dict assignment, so
    readers see either the old or the new value, never a partial one.
    """

    def __init__(self, clock: Clock | None = None):
        self.clock = clock if clock is not None else SystemClock()
        self._entries: dict[str, tuple[Any, float]] = {} # key -> (value, expires_at)

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock.monotonic() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        self._entries[key] = (value, self.clock.monotonic() + ttl_seconds)

    async def forget(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class CapabilityCache:
    """
    Caches listings per (server_id, kind). Stored snapshots are tuples of frozen
    entries.

    Keys embed a generation number: invalidating everything bumps the generation,
    which makes every existing key unreachable in one step, before the old keys
    are forgotten from the store.

    A listing fetched across an invalidation must not be stored: callers take a
    `token()` when they miss and pass it to `put()`, which drops the write if
    the server was invalidated in between.
    """

    def __init__(self, store: BaseCacheStore | None = None, default_ttl_seconds: float = 86400.0, key_prefix: str = "mcp"):
        self.store = store if store is not None else InMemoryCacheStore()
        self.default_ttl_seconds = default_ttl_seconds
        self.key_prefix = key_prefix
        self._generation = 0
        self._server_epochs: dict[str, int] = {}
        self._known_keys: set[str] = set()

    def _key(self, server_id: str, kind: CapabilityKind) -> str:
        return f"{self.key_prefix}:{self._generation}:{CapabilityKind(kind).value}:{server_id}"

    def token(self, server_id: str) -> tuple[int, int]:
        """Identifies the cache state of one server; changes on every invalidation that covers it."""
        return self._generation, self._server_epochs.get(server_id, 0)

    async def get(self, server_id: str, kind: CapabilityKind) -> tuple[CapabilityEntry, ...] | None:
        """Returns the cached snapshot, or None on a miss."""
        return await self.store.get(self._key(server_id, kind))

    async def put(self, server_id: str, kind: CapabilityKind, entries: list[CapabilityEntry] | tuple[CapabilityEntry, ...], ttl_seconds: float | None = None, token: tuple[int, int] | None = None) -> tuple[CapabilityEntry, ...]:
        snapshot = tuple(entries)
        if token is not None and token != self.token(server_id):
            logger.debug("Discarding listing fetched before invalidation", server_id=server_id, kind=CapabilityKind(kind).value)
            return snapshot
        key = self._key(server_id, kind)
        await self.store.put(key, snapshot, ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds)
        self._known_keys.add(key)
        if token is not None and token != self.token(server_id):
            # Invalidated while the store was writing
            await self.store.forget(key)
            return snapshot
        logger.debug("Cached capability listing", server_id=server_id, kind=CapabilityKind(kind).value, entries=len(snapshot))
        return snapshot

    async def invalidate(self, server_id: str | None = None) -> None:
        """Drops every kind for one server, or for all servers when `server_id` is None."""
        if server_id is None:
            stale = self._known_keys
            self._generation += 1
            self._known_keys = set()
            logger.info("Invalidated all capability listings", generation=self._generation)
        else:
            self._server_epochs[server_id] = self._server_epochs.get(server_id, 0) + 1
            stale = {self._key(server_id, kind) for kind in CapabilityKind}
            self._known_keys -= stale
            logger.info("Invalidated capability listings", server_id=server_id)

        for key in stale:
            await self.store.forget(key)
