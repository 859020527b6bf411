"""
CloudMemo Backend - Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a message and optional context dict, plus the
       machine-readable `error_code` and HTTP `status_code` the global handlers
       (registered in main.py) put on the wire.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    CloudMemoError (base)
    ├── ValidationError          → 400 invalid_payload
    ├── AuthenticationError      → 401 unauthorized
    │   └── InvalidCredentialsError → 401 invalid_credentials
    ├── NotFoundError            → 404 not_found
    ├── DatabaseError            → 500 server_error
    └── KeyValueStoreError       → 503 service_unavailable

The backend never retries: every failure maps straight to one status code and
one short error code in the response body.
"""

from typing import Any, Dict, Optional


class CloudMemoError(Exception):
    """
    Base exception for all CloudMemo application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    error_code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CloudMemoError):
    """
    Raised when a request body violates the API contract.

    When:    Malformed JSON, missing field, field of the wrong type, empty
             content on create.
    HTTP:    400 Bad Request, `invalid_payload`

    FastAPI's own RequestValidationError is translated to the same response in
    main.py, so clients only ever see one code for schema violations.
    """

    error_code = "invalid_payload"
    status_code = 400

    def __init__(
        self,
        message: str = "Request payload is invalid",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(CloudMemoError):
    """
    Raised when a bearer token is missing, malformed, unknown or expired.

    HTTP:    401 Unauthorized, `unauthorized`

    There is no refresh mechanism: the client must log in again.
    """

    error_code = "unauthorized"
    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(AuthenticationError):
    """Raised by login when the supplied password does not match."""

    error_code = "invalid_credentials"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid password", context=context)


class NotFoundError(CloudMemoError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /memos/{id} with an id that was never assigned or
             was already deleted.
    HTTP:    404 Not Found, `not_found`

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so routes stay free of status-code logic.
    """

    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(CloudMemoError):
    """
    Raised when relational store operations fail unexpectedly.

    HTTP:    500 Internal Server Error, `server_error`

    Security Note:
        The message returned to the client is always generic. SQL text and
        driver messages are logged server-side only.
    """

    error_code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class KeyValueStoreError(CloudMemoError):
    """
    Raised when the key-value store cannot be reached or rejects a command.

    HTTP:    503 Service Unavailable, `service_unavailable`

    Only surfaces where the store is authoritative (session lookup, login,
    clip). Cache reads, fills and invalidations swallow it after logging,
    since the relational store still answers correctly without the cache.
    """

    error_code = "service_unavailable"
    status_code = 503

    def __init__(
        self,
        message: str = "Session store is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
