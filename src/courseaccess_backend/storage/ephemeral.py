"""
Ephemeral read-through/write-through cache layered over the durable store.
Entries expire independently and are never authoritative.
"""

import logging
from typing import Any, Optional

from aiocache.base import BaseCache

logger = logging.getLogger(__name__)


class EphemeralCache:
    """
    Short-lived overlay for access checks and index lookups.

    A miss is not an error, only a signal to read the durable store. Backend
    failures are logged and treated as misses so that a broken cache never
    fails an operation.
    """

    def __init__(self, cache: BaseCache, ttl_seconds: int = 900):
        """
        Args:
            cache: aiocache backend for the cache entries
            ttl_seconds: default time to live of an entry (default 15 minutes)
        """
        self._cache = cache
        self.ttl_seconds = ttl_seconds

    async def read(self, key: str) -> Optional[Any]:
        try:
            value = await self._cache.get(key)
        except Exception as e:
            logger.warning(f"Ephemeral cache read error for {key}: {e}")
            return None

        if value is None:
            logger.debug(f"Cache miss for {key}")
        else:
            logger.debug(f"Cache hit for {key}")
        return value

    async def write(self, key: str, value: Any, ttl: Optional[float] = None):
        """Store a value and reset its expiry"""
        try:
            await self._cache.set(key, value, ttl=ttl or self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Failed to cache {key}: {e}")
            # a stale entry must not outlive a failed refresh
            await self.invalidate(key)

    async def invalidate(self, key: str):
        try:
            await self._cache.delete(key)
            logger.debug(f"Invalidated {key}")
        except Exception as e:
            logger.warning(f"Failed to invalidate {key}: {e}")
