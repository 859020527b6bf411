"""
CloudMemo Client - Error Taxonomy
===================================

Every failed API call surfaces as exactly one of these, keyed by `code`:

    ApiError (base)
    ├── UnauthorizedError        unauthorized         (401)
    │   └── InvalidCredentialsError  invalid_credentials  (401 on login)
    ├── InvalidPayloadError      invalid_payload      (400)
    ├── NotFoundError            not_found            (404)
    ├── RequestFailedError       request_failed       (any other non-2xx)
    ├── RequestTimeoutError      timeout              (client deadline)
    └── UnreachableError         unreachable          (network failure)

The client never retries a failed request. UnauthorizedError ends the
session; everything else is shown to the user and the draft is kept.
"""

from typing import Optional


class ApiError(Exception):
    """Base class for all client-side API failures."""

    code = "request_failed"

    def __init__(self, message: str = "Request failed", status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnauthorizedError(ApiError):
    code = "unauthorized"

    def __init__(self, message: str = "Not logged in", status_code: Optional[int] = 401):
        super().__init__(message, status_code)


class InvalidCredentialsError(UnauthorizedError):
    code = "invalid_credentials"

    def __init__(self, message: str = "Invalid password", status_code: Optional[int] = 401):
        super().__init__(message, status_code)


class InvalidPayloadError(ApiError):
    code = "invalid_payload"


class NotFoundError(ApiError):
    code = "not_found"


class RequestFailedError(ApiError):
    code = "request_failed"


class RequestTimeoutError(ApiError):
    code = "timeout"


class UnreachableError(ApiError):
    code = "unreachable"
