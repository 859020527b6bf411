"""
CloudMemo Backend - Memo Service (CRUD + Cache Coherency)
===========================================================

What:  Reads and writes memos in the relational store and keeps the two cache
       families in the key-value store coherent with it.
How:   Reads go cache → store → cache fill. Writes go store → commit →
       invalidate. Every method receives its db session and kv store from the
       caller, so the service itself holds no state.
Who:   Called by routes/memos.py.

Cache Invalidation Rules:
    ┌────────────┬───────────┬─────────────┐
    │ Operation  │ memo:list │ memo:<id>   │
    ├────────────┼───────────┼─────────────┤
    │ create     │ deleted   │ -           │
    │ update     │ deleted   │ deleted     │
    │ delete     │ deleted   │ deleted     │
    └────────────┴───────────┴─────────────┘

    The commit always happens before the invalidation. Invalidating first
    would let a concurrent read re-cache the pre-write row between the delete
    and the commit.

Failure Policy:
    The relational store is the source of truth. A key-value failure while
    reading, filling or invalidating a cache key is logged and the request
    carries on; the worst case is a stale entry that lives until its TTL.
    Store failures are wrapped in DatabaseError.
"""

import logging
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cloudmemo.config import settings
from cloudmemo.exceptions import DatabaseError, KeyValueStoreError, NotFoundError
from cloudmemo.models.memo import Memo, utc_now
from cloudmemo.schemas.memo import MemoListAdapter, MemoResponse
from cloudmemo.services.kv_base import KeyValueStore

logger = logging.getLogger(__name__)

MEMO_LIST_CACHE_KEY = "memo:list"


def memo_cache_key(memo_id: int) -> str:
    """Cache key for a single memo."""
    return f"memo:{memo_id}"


class MemoService:
    """
    Business logic layer for memo operations.

    Responsibilities:
        - list_memos(): Full list, most recently updated first, cached
        - get_memo(): Single memo, cached per id
        - create_memo() / update_memo() / delete_memo(): Writes plus invalidation
    """

    # ── Cache helpers ─────────────────────────────────────────────────────

    async def _cache_get(self, kv: KeyValueStore, key: str) -> Optional[str]:
        try:
            return await kv.get(key)
        except KeyValueStoreError as e:
            logger.warning("Cache read failed for %s, falling back to store: %s", key, e.context)
            return None

    async def _cache_set(self, kv: KeyValueStore, key: str, value: str) -> None:
        try:
            await kv.set(key, value, ttl=settings.cache_ttl_seconds)
        except KeyValueStoreError as e:
            logger.warning("Cache fill failed for %s: %s", key, e.context)

    async def _invalidate(self, kv: KeyValueStore, *keys: str) -> None:
        for key in keys:
            try:
                await kv.delete(key)
            except KeyValueStoreError as e:
                # Stale until TTL; the write itself is already committed
                logger.warning("Cache invalidation failed for %s: %s", key, e.context)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_memos(self, db: AsyncSession, kv: KeyValueStore) -> List[MemoResponse]:
        """
        Return every memo, most recently updated first.

        Query plan:
            SELECT id, content, created_at, updated_at FROM memos
            ORDER BY updated_at DESC, id DESC
            → idx_memos_updated_at; id breaks ties between equal timestamps

        Returns:
            List of MemoResponse (possibly served from memo:list)

        Raises:
            DatabaseError: Query execution failed
        """
        cached = await self._cache_get(kv, MEMO_LIST_CACHE_KEY)
        if cached is not None:
            return MemoListAdapter.validate_json(cached)

        try:
            result = await db.execute(
                select(Memo).order_by(desc(Memo.updated_at), desc(Memo.id))
            )
            memos = [MemoResponse.model_validate(memo) for memo in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing memos: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve memos. Please try again.",
                context={"error_type": type(e).__name__},
            )

        await self._cache_set(
            kv, MEMO_LIST_CACHE_KEY, MemoListAdapter.dump_json(memos).decode()
        )
        return memos

    async def get_memo(self, db: AsyncSession, kv: KeyValueStore, memo_id: int) -> MemoResponse:
        """
        Retrieve a single memo by id.

        Raises:
            NotFoundError: No memo with this id (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        key = memo_cache_key(memo_id)
        cached = await self._cache_get(kv, key)
        if cached is not None:
            return MemoResponse.model_validate_json(cached)

        memo = await self._load(db, memo_id)
        response = MemoResponse.model_validate(memo)
        await self._cache_set(kv, key, response.model_dump_json())
        return response

    async def _load(self, db: AsyncSession, memo_id: int) -> Memo:
        try:
            memo = await db.get(Memo, memo_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching memo %s: %s", memo_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the memo. Please try again.",
                context={"memo_id": memo_id},
            )
        if memo is None:
            raise NotFoundError(resource="memo", resource_id=str(memo_id))
        return memo

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_memo(self, db: AsyncSession, kv: KeyValueStore, content: str) -> MemoResponse:
        """
        Insert a memo with created_at == updated_at == now.

        Returns:
            The created record including its store-assigned id
        """
        now = utc_now()
        memo = Memo(content=content, created_at=now, updated_at=now)
        try:
            db.add(memo)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating memo: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the memo. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Memo %s created (%d chars)", memo.id, len(content))
        await self._invalidate(kv, MEMO_LIST_CACHE_KEY)
        return MemoResponse.model_validate(memo)

    async def update_memo(
        self,
        db: AsyncSession,
        kv: KeyValueStore,
        memo_id: int,
        content: str,
    ) -> MemoResponse:
        """
        Replace a memo's content and advance updated_at; created_at is untouched.

        Concurrent updates from two sessions race with last write wins; there
        is no version column to detect the conflict.

        Raises:
            NotFoundError: No memo with this id
            DatabaseError: Store failure
        """
        memo = await self._load(db, memo_id)
        memo.content = content
        memo.updated_at = utc_now()
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error updating memo %s: %s", memo_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the memo. Please try again.",
                context={"memo_id": memo_id},
            )

        logger.info("Memo %s updated (%d chars)", memo_id, len(content))
        await self._invalidate(kv, MEMO_LIST_CACHE_KEY, memo_cache_key(memo_id))
        return MemoResponse.model_validate(memo)

    async def delete_memo(self, db: AsyncSession, kv: KeyValueStore, memo_id: int) -> None:
        """
        Delete a memo and drop both of its cache entries.

        Raises:
            NotFoundError: No memo with this id
            DatabaseError: Store failure
        """
        memo = await self._load(db, memo_id)
        try:
            await db.delete(memo)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error deleting memo %s: %s", memo_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the memo. Please try again.",
                context={"memo_id": memo_id},
            )

        logger.info("Memo %s deleted", memo_id)
        await self._invalidate(kv, MEMO_LIST_CACHE_KEY, memo_cache_key(memo_id))


# ── Singleton Instance ────────────────────────────────────────────────────
memo_service = MemoService()
