"""
CloudMemo Backend - Login Route
=================================

What:  POST /login, the only API route that does not require a session.
"""

import logging

from fastapi import APIRouter, Depends

from cloudmemo.schemas.auth import LoginRequest, LoginResponse
from cloudmemo.schemas.common import ErrorResponse
from cloudmemo.services.auth_service import auth_service
from cloudmemo.services.kv_base import KeyValueStore
from cloudmemo.services.kv_store import get_kv_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Wrong or missing password", "model": ErrorResponse},
        503: {"description": "Session store unavailable", "model": ErrorResponse},
    },
    summary="Exchange the shared password for a session token",
)
async def login(
    body: LoginRequest,
    kv: KeyValueStore = Depends(get_kv_store),
) -> LoginResponse:
    """
    Every successful login mints a fresh token; earlier tokens stay valid
    until their own TTL runs out.
    """
    token = await auth_service.login(kv, body.password)
    return LoginResponse(token=token)
