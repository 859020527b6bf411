"""
CloudMemo Backend - Key-Value Store Implementations
=====================================================

What:  Redis-backed and in-process implementations of KeyValueStore, plus the
       factory and FastAPI dependency that hand one instance to every request.
How:   KV_URL selects the backend: redis://... or rediss://... builds a
       redis.asyncio client, memory:// builds the in-process store.
Who:   Injected into routes via Depends(get_kv_store).

Key layout:
    auth:token:<token>   "1"                         session TTL
    memo:list            JSON array of memos         cache TTL
    memo:<id>            JSON memo                   cache TTL
    clip:latest          JSON {text, created_at}     clip TTL
"""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from cloudmemo.config import settings
from cloudmemo.exceptions import KeyValueStoreError
from cloudmemo.services.kv_base import KeyValueStore

logger = logging.getLogger(__name__)

MEMORY_URL_SCHEME = "memory://"


# ══════════════════════════════════════════════════════════════════════════
# Redis
# ══════════════════════════════════════════════════════════════════════════

class RedisKeyValueStore(KeyValueStore):
    """
    KeyValueStore on top of redis.asyncio.

    from_url() does not open a socket; the pool connects lazily on the first
    command, so building the store at import time is safe even when Redis is
    down. decode_responses=True keeps every value a str.
    """

    def __init__(self, url: str, client: Optional[redis.Redis] = None):
        self.client = client or redis.from_url(url, decode_responses=True)
        logger.info("RedisKeyValueStore configured for %s", url.split("@")[-1])

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(key)
        except RedisError as e:
            raise KeyValueStoreError(context={"op": "get", "key": key, "error": str(e)})

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            await self.client.set(key, value, ex=ttl)
        except RedisError as e:
            raise KeyValueStoreError(context={"op": "set", "key": key, "error": str(e)})

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            raise KeyValueStoreError(context={"op": "delete", "key": key, "error": str(e)})

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.warning("Redis ping failed: %s", str(e))
            return False

    async def close(self) -> None:
        await self.client.aclose()


# ══════════════════════════════════════════════════════════════════════════
# In-process
# ══════════════════════════════════════════════════════════════════════════

class MemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed KeyValueStore with lazy expiry.

    Entries are (value, expires_at) pairs on a monotonic clock. An expired
    entry is dropped when it is read, and every write sweeps out the rest,
    so session tokens that are never presented again do not accumulate.
    Single process only: every uvicorn worker would get its own sessions
    and cache.

    Args:
        clock: Seconds source, monotonic by default. Tests pass a fake to
               step past a TTL without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self._purge_expired()
        expires_at = self._clock() + ttl if ttl is not None else None
        self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [
            key for key, (_, expires_at) in self._data.items()
            if expires_at is not None and now >= expires_at
        ]
        for key in expired:
            del self._data[key]

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()


# ══════════════════════════════════════════════════════════════════════════
# Factory & Dependency
# ══════════════════════════════════════════════════════════════════════════

def create_kv_store(url: str) -> KeyValueStore:
    """
    Build the store named by `url`.

    Raises:
        ValueError: Unsupported scheme (checked at import, so a bad KV_URL
                    fails the process at startup).
    """
    if url.startswith(MEMORY_URL_SCHEME):
        logger.info("Using in-process key-value store")
        return MemoryKeyValueStore()
    if url.startswith(("redis://", "rediss://", "unix://")):
        return RedisKeyValueStore(url)
    raise ValueError(f"Unsupported KV_URL scheme: {url!r} (use redis:// or memory://)")


# Process-wide instance; Redis connections are pooled inside the client
kv_store = create_kv_store(settings.kv_url)


def get_kv_store() -> KeyValueStore:
    """FastAPI dependency returning the process-wide key-value store."""
    return kv_store
