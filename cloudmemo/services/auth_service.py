"""
CloudMemo Backend - Session Authentication Service
====================================================

What:  Exchanges the shared password for an opaque session token and checks
       tokens on every authenticated request.
How:   Tokens live in the key-value store as auth:token:<token> with the
       session TTL. Presence of the key is the whole check; there is no
       per-token scope, refresh or revocation list.
Who:   Called by routes/auth.py (login) and cloudmemo.dependencies (check).

Out of scope for a single-user deployment: rate limiting and lockout on
failed logins.
"""

import hmac
import logging
import secrets
from typing import Optional

from cloudmemo.config import settings
from cloudmemo.exceptions import InvalidCredentialsError
from cloudmemo.services.kv_base import KeyValueStore

logger = logging.getLogger(__name__)

TOKEN_KEY_PREFIX = "auth:token:"


def token_key(token: str) -> str:
    """Key-value store key for a session token."""
    return f"{TOKEN_KEY_PREFIX}{token}"


class AuthService:
    """Password login and bearer token verification."""

    def password_matches(self, password: Optional[str]) -> bool:
        """
        Constant-time comparison against APP_PASSWORD.

        A missing/empty password never matches, and nothing matches while
        APP_PASSWORD is unset.
        """
        if not password or not settings.app_password:
            return False
        return hmac.compare_digest(
            password.encode("utf-8"), settings.app_password.encode("utf-8")
        )

    async def login(self, kv: KeyValueStore, password: Optional[str]) -> str:
        """
        Mint and store a new session token.

        Returns:
            The token (URL-safe, 256 bits of randomness)

        Raises:
            InvalidCredentialsError: Password missing or wrong (→ 401)
            KeyValueStoreError: Token could not be stored (→ 503)
        """
        if not self.password_matches(password):
            logger.warning("Rejected login attempt")
            raise InvalidCredentialsError()

        token = secrets.token_urlsafe(32)
        await kv.set(token_key(token), "1", ttl=settings.session_ttl_seconds)
        logger.info("Session created (ttl=%ds)", settings.session_ttl_seconds)
        return token

    async def is_valid(self, kv: KeyValueStore, token: str) -> bool:
        """True while auth:token:<token> exists in the store."""
        return await kv.get(token_key(token)) is not None


auth_service = AuthService()
