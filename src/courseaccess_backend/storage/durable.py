"""
Durable key/value store.

The store is the only source of truth for access records, their lookup
indices, prerequisite edge sets and the catalog records. It is a thin layer
over an aiocache backend (Redis in deployments, the in-memory backend in
tests) adding two things the backend does not give us:

1. optional expiry with a store-wide TTL and explicit bumping. Keys written
   with `persistent=True` never expire, whatever the TTL. The TTL is off by
   default.
2. staged transactions: writes of one logical operation are buffered and
   only applied once the whole operation succeeded. Writers are serialized
   by a per-store lock, so a transaction also sees a stable view of the keys
   it reads.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Set

from aiocache.base import BaseCache

logger = logging.getLogger(__name__)

_DELETED = object()


class StagedTransaction:
    """Buffered writes against a DurableIndexStore.

    Reads see the transaction's own staged writes first and fall through to
    the store otherwise.
    """

    def __init__(self, store: "DurableIndexStore"):
        self._store = store
        self._writes: Dict[str, Any] = {}
        self._persistent: Set[str] = set()
        self._bumps: Set[str] = set()
        self._after_commit: List[Callable[[], Awaitable[None]]] = []

    async def get(self, key: str, default: Any = None) -> Any:
        if key in self._writes:
            value = self._writes[key]
            return default if value is _DELETED else value
        return await self._store.get(key, default)

    async def has(self, key: str) -> bool:
        if key in self._writes:
            return self._writes[key] is not _DELETED
        return await self._store.has(key)

    def set(self, key: str, value: Any, persistent: bool = False):
        self._writes[key] = value
        if persistent:
            self._persistent.add(key)
        else:
            self._persistent.discard(key)

    def delete(self, key: str):
        self._writes[key] = _DELETED
        self._persistent.discard(key)
        self._bumps.discard(key)

    def bump(self, key: str):
        """Refresh the expiry of a key when the transaction commits."""
        self._bumps.add(key)

    def after_commit(self, hook: Callable[[], Awaitable[None]]):
        """Run `hook` after a successful commit, still under the write lock."""
        self._after_commit.append(hook)

    @property
    def pending(self) -> int:
        return len(self._writes) + len(self._bumps)

    async def commit(self):
        to_set = [(k, v) for k, v in self._writes.items() if v is not _DELETED and k not in self._persistent]
        to_keep = [(k, v) for k, v in self._writes.items() if v is not _DELETED and k in self._persistent]
        to_delete = [key for key, value in self._writes.items() if value is _DELETED]
        # set() already applies the store TTL
        to_bump = [key for key in self._bumps if key not in self._writes]

        if to_set:
            await self._store.multi_set(to_set)
        if to_keep:
            await self._store.multi_set(to_keep, persistent=True)
        for key in to_delete:
            await self._store.delete(key)
        for key in to_bump:
            await self._store.bump(key)

        logger.debug(
            f"Committed transaction: {len(to_set) + len(to_keep)} set, "
            f"{len(to_delete)} deleted, {len(to_bump)} bumped"
        )

        for hook in self._after_commit:
            await hook()


class DurableIndexStore:

    def __init__(self, cache: BaseCache, ttl: Optional[int] = None):
        """
        Args:
            cache: aiocache backend holding the durable keys
            ttl: expiry in seconds applied on every non-persistent write and bump;
                None or 0 means no expiry
        """
        self._cache = cache
        self.ttl = ttl or None
        self._write_lock = asyncio.Lock()

    async def get(self, key: str, default: Any = None) -> Any:
        value = await self._cache.get(key)
        return default if value is None else value

    async def has(self, key: str) -> bool:
        return bool(await self._cache.exists(key))

    async def set(self, key: str, value: Any, persistent: bool = False):
        await self._cache.set(key, value, ttl=None if persistent else self.ttl)

    async def multi_set(self, pairs: List[tuple], persistent: bool = False):
        await self._cache.multi_set(pairs, ttl=None if persistent else self.ttl)

    async def delete(self, key: str) -> bool:
        return bool(await self._cache.delete(key))

    async def bump(self, key: str) -> bool:
        # expire(key, 0) drops any expiry on the key
        return bool(await self._cache.expire(key, self.ttl or 0))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StagedTransaction]:
        """Stage writes and apply them only if the block exits cleanly.

        Example:
            async with store.transaction() as txn:
                if await txn.has(key):
                    raise AlreadyGrantedError(...)
                txn.set(key, value)
        """
        async with self._write_lock:
            txn = StagedTransaction(self)
            yield txn
            await txn.commit()
