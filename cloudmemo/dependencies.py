"""
CloudMemo Backend - Shared Route Dependencies
===============================================

What:  The bearer-token guard applied to every API route except login.
How:   FastAPI's HTTPBearer extracts "Authorization: Bearer <token>" (with
       auto_error off, so a missing header reaches us as None and gets the
       application's own 401 body), then AuthService checks the token key.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cloudmemo.exceptions import AuthenticationError
from cloudmemo.services.auth_service import auth_service
from cloudmemo.services.kv_base import KeyValueStore
from cloudmemo.services.kv_store import get_kv_store

bearer_scheme = HTTPBearer(auto_error=False, description="Session token from POST /login")


async def require_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    kv: KeyValueStore = Depends(get_kv_store),
) -> str:
    """
    Reject the request unless it carries a live session token.

    Returns:
        The token, for handlers that want it

    Raises:
        AuthenticationError: Header missing, not Bearer, or token unknown/expired
        KeyValueStoreError: Store unreachable (cannot decide either way)
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    if not await auth_service.is_valid(kv, credentials.credentials):
        raise AuthenticationError(message="Session expired or invalid. Please log in again.")
    return credentials.credentials
