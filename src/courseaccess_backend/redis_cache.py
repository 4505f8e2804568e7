from typing import Optional
from aiocache import Cache
from aiocache.base import BaseCache
from aiocache.serializers import JsonSerializer

from courseaccess_backend.settings import settings

DURABLE_NAMESPACE = "durable"
EPHEMERAL_NAMESPACE = "temp"


def build_cache(namespace: str, backend: Optional[str] = None) -> BaseCache:
    """Create an aiocache backend for the given namespace.

    Both the durable store and the ephemeral cache live in the same Redis
    database; the namespace keeps their keys apart.
    """
    backend = backend or settings.STORAGE_BACKEND

    if backend == "memory":
        return Cache(Cache.MEMORY, serializer=JsonSerializer(), namespace=namespace)

    return Cache(
        Cache.REDIS,
        endpoint=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        password=settings.REDIS_PASSWORD if settings.REDIS_PASSWORD else None,
        pool_max_size=10,
        db=settings.REDIS_DB,
        serializer=JsonSerializer(),
        namespace=namespace,
    )
