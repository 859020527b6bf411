"""
CloudMemo Backend - Login Schemas
===================================

What:  Request/response models for POST /login.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """
    Body of POST /login.

    password is optional at the schema level: a missing password is a failed
    login (401 invalid_credentials), not a malformed request.
    """
    password: Optional[str] = Field(default=None, description="Shared secret")


class LoginResponse(BaseModel):
    """Opaque bearer token for the Authorization header."""
    token: str = Field(description="Session token, valid until its TTL expires")
