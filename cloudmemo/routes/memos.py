"""
CloudMemo Backend - Memo Route Handlers
=========================================

What:  CRUD endpoints for memos.
How:   Validates bodies with Pydantic, delegates to MemoService, returns JSON.
Who:   Called by the editor client (cloudmemo.client.editor).

Every route here sits behind require_session. `{memo_id:int}` only matches
digits, so /memos/abc falls through to the 404 handler instead of failing
validation.

HTTP caching:
    Responses carry Cache-Control: no-store. Server-side caching lives in the
    key-value store and is invalidated on writes; a browser or proxy copy
    would not be.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cloudmemo.database import get_db_session
from cloudmemo.dependencies import require_session
from cloudmemo.schemas.common import ErrorResponse
from cloudmemo.schemas.memo import MemoCreate, MemoResponse, MemoUpdate
from cloudmemo.services.kv_base import KeyValueStore
from cloudmemo.services.kv_store import get_kv_store
from cloudmemo.services.memo_service import memo_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/memos",
    tags=["Memos"],
    dependencies=[Depends(require_session)],
    responses={
        401: {"description": "Missing or expired session", "model": ErrorResponse},
    },
)

NO_STORE = "no-store"


@router.get(
    "",
    response_model=List[MemoResponse],
    summary="List all memos",
    description="Returns every memo ordered by most recently updated first.",
)
async def list_memos(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    kv: KeyValueStore = Depends(get_kv_store),
) -> List[MemoResponse]:
    memos = await memo_service.list_memos(db, kv)
    response.headers["Cache-Control"] = NO_STORE
    return memos


@router.post(
    "",
    response_model=MemoResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload", "model": ErrorResponse}},
    summary="Create a memo",
)
async def create_memo(
    body: MemoCreate,
    db: AsyncSession = Depends(get_db_session),
    kv: KeyValueStore = Depends(get_kv_store),
) -> MemoResponse:
    """
    Create a memo from non-empty content.

    The response is the canonical record: the client replaces its local
    placeholder with it, picking up the assigned id and both timestamps.
    """
    return await memo_service.create_memo(db, kv, body.content)


@router.get(
    "/{memo_id:int}",
    response_model=MemoResponse,
    responses={404: {"description": "Memo not found", "model": ErrorResponse}},
    summary="Get a single memo",
)
async def get_memo(
    memo_id: int,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    kv: KeyValueStore = Depends(get_kv_store),
) -> MemoResponse:
    memo = await memo_service.get_memo(db, kv, memo_id)
    response.headers["Cache-Control"] = NO_STORE
    return memo


@router.put(
    "/{memo_id:int}",
    response_model=MemoResponse,
    responses={
        400: {"description": "Invalid payload", "model": ErrorResponse},
        404: {"description": "Memo not found", "model": ErrorResponse},
    },
    summary="Update a memo",
)
async def update_memo(
    memo_id: int,
    body: MemoUpdate,
    db: AsyncSession = Depends(get_db_session),
    kv: KeyValueStore = Depends(get_kv_store),
) -> MemoResponse:
    """Replace content; created_at is kept, updated_at advances."""
    return await memo_service.update_memo(db, kv, memo_id, body.content)


@router.delete(
    "/{memo_id:int}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Memo not found", "model": ErrorResponse}},
    summary="Delete a memo",
)
async def delete_memo(
    memo_id: int,
    db: AsyncSession = Depends(get_db_session),
    kv: KeyValueStore = Depends(get_kv_store),
) -> Response:
    await memo_service.delete_memo(db, kv, memo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
