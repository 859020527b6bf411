"""
CloudMemo Backend - Cloud Clipboard Routes
============================================

What:  GET/POST /clip for the single cloud-clipboard slot.
"""

from fastapi import APIRouter, Depends, Response, status

from cloudmemo.dependencies import require_session
from cloudmemo.schemas.clip import ClipResponse, ClipSave
from cloudmemo.schemas.common import ErrorResponse
from cloudmemo.services.clip_service import clip_service
from cloudmemo.services.kv_base import KeyValueStore
from cloudmemo.services.kv_store import get_kv_store

router = APIRouter(
    prefix="/clip",
    tags=["Clipboard"],
    dependencies=[Depends(require_session)],
    responses={
        401: {"description": "Missing or expired session", "model": ErrorResponse},
        503: {"description": "Key-value store unavailable", "model": ErrorResponse},
    },
)


@router.get(
    "",
    response_model=ClipResponse,
    response_model_exclude_unset=True,
    summary="Read the clip",
    description='Returns {"text": null} when nothing was saved or the clip expired.',
)
async def get_clip(
    response: Response,
    kv: KeyValueStore = Depends(get_kv_store),
) -> ClipResponse:
    clip = await clip_service.get_clip(kv)
    response.headers["Cache-Control"] = "no-store"
    return clip


@router.post(
    "",
    response_model=ClipResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload", "model": ErrorResponse}},
    summary="Overwrite the clip",
)
async def save_clip(
    body: ClipSave,
    kv: KeyValueStore = Depends(get_kv_store),
) -> ClipResponse:
    return await clip_service.save_clip(kv, body.text)
