"""
CloudMemo Backend - Cloud Clipboard Service
=============================================

What:  Reads and overwrites the single clip slot in the key-value store.
Who:   Called by routes/clip.py.

The key-value store is the only home of the clip, so its failures propagate
as KeyValueStoreError (503) instead of being swallowed like cache failures.
An expired or never-written slot is a normal state, returned as text=None.
"""

import logging

from cloudmemo.config import settings
from cloudmemo.models.memo import utc_now
from cloudmemo.schemas.clip import ClipResponse
from cloudmemo.services.kv_base import KeyValueStore

logger = logging.getLogger(__name__)

CLIP_CACHE_KEY = "clip:latest"


class ClipService:
    """Single-slot clipboard: no history, each save replaces the last."""

    async def get_clip(self, kv: KeyValueStore) -> ClipResponse:
        payload = await kv.get(CLIP_CACHE_KEY)
        if payload is None:
            return ClipResponse(text=None)
        return ClipResponse.model_validate_json(payload)

    async def save_clip(self, kv: KeyValueStore, text: str) -> ClipResponse:
        """
        Overwrite the slot and restart its TTL.

        Saving "" is allowed and distinct from "never saved": the next read
        returns text="" with a fresh created_at.
        """
        clip = ClipResponse(text=text, created_at=utc_now())
        await kv.set(CLIP_CACHE_KEY, clip.model_dump_json(), ttl=settings.clip_ttl_seconds)
        logger.info("Clip saved (%d chars, ttl=%ds)", len(text), settings.clip_ttl_seconds)
        return clip


clip_service = ClipService()
