"""
CloudMemo Backend - Abstract Key-Value Store Interface
========================================================

What:  Abstract base class for the expiring key-value store.
How:   Concrete stores (Redis, in-memory) inherit from KeyValueStore and
       implement the five coroutines below.
Who:   AuthService (session tokens), MemoService (cached reads) and
       ClipService (the clip slot), plus the health check.

Everything stored is a string; callers serialize JSON themselves so the
interface stays identical across backends.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Interface for a string key-value store with optional per-key expiry.

    Contract:
        - get() returns None for keys that were never set, were deleted, or
          whose TTL elapsed. Absence is never an error.
        - set() overwrites unconditionally and resets the TTL.
        - delete() of a missing key is a no-op.
        - Backend failures are raised as KeyValueStoreError.

    Implementations:
        - RedisKeyValueStore: redis.asyncio, for deployments
        - MemoryKeyValueStore: in-process dict, for development and tests
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the live value for `key`, or None."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """
        Store `value` under `key`.

        Args:
            key: Store key, e.g. "auth:token:<token>" or "memo:list"
            value: String payload (JSON for cached records)
            ttl: Seconds until the key expires; None keeps it until deleted
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove `key` if present."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """
        Lightweight connectivity probe for the health check.

        Returns: True if the store answers, False otherwise. Never raises.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release connections; called once at shutdown."""
        ...
