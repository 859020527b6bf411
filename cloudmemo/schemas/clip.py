"""
CloudMemo Backend - Cloud Clipboard Schemas
=============================================

What:  Pydantic models for GET/POST /clip.

There is exactly one clip slot. "Never saved / expired" is `{"text": null}`;
a saved empty string is `{"text": "", "created_at": ...}` and means "cleared".
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ClipSave(BaseModel):
    """Body of POST /clip. Empty text is a valid cleared state."""
    text: str = Field(description="Clipboard text to store")


class ClipResponse(BaseModel):
    """
    Current clip payload.

    Routes return it with exclude_unset, so the empty slot serializes as
    `{"text": null}` without a created_at key.
    """
    text: Optional[str] = Field(default=None, description="Saved text, null if none")
    created_at: Optional[datetime] = Field(
        default=None,
        description="When the text was saved (UTC ISO 8601)",
    )
