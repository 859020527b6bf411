"""
CloudMemo Backend - Memo Request/Response Schemas
===================================================

What:  Pydantic models defining the memo API contract.
How:   FastAPI validates request bodies against these models, serializes
       responses through them, and generates the OpenAPI docs from them.
       The same models round-trip the cached copies in the key-value store
       and are reused by cloudmemo.client to parse responses.

Type strictness:
    Pydantic v2 does not coerce numbers into strings, so `{"content": 5}` is
    rejected as invalid_payload, which is what "content must be textual" means.
"""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field, TypeAdapter, field_validator


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything the backend writes is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class MemoCreate(BaseModel):
    """Body of POST /memos. A new memo must have some content."""
    content: str = Field(min_length=1, description="Memo body (non-empty)")


class MemoUpdate(BaseModel):
    """Body of PUT /memos/{id}. Any string is accepted, including an empty one."""
    content: str = Field(description="Replacement memo body")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class MemoResponse(BaseModel):
    """
    Canonical memo record as returned by every memo endpoint.

    Who:   Returned by GET/POST /memos and GET/PUT /memos/{id}; also the shape
           stored under the memo:list and memo:<id> cache keys.
    """
    id: int = Field(description="Store-assigned memo identifier")
    content: str = Field(description="Memo body")
    created_at: datetime = Field(description="First save time (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last save time (UTC ISO 8601)")

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        """Pins timestamps to UTC so store and cache serialize identically."""
        return _as_utc(v)


# List payloads are bare JSON arrays, matching GET /memos
MemoListAdapter = TypeAdapter(List[MemoResponse])
