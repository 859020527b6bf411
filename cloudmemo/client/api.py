"""
CloudMemo Client - HTTP API Client
====================================

What:  Typed async wrapper around the CloudMemo HTTP API.
How:   httpx.AsyncClient with a fixed per-request timeout; responses are
       parsed with the same Pydantic schemas the server emits, and every
       failure is converted into one exception from client.errors.

Failure mapping:
    httpx.TimeoutException      → RequestTimeoutError  (timeout)
    other httpx.TransportError  → UnreachableError     (unreachable)
    400                         → InvalidPayloadError  (invalid_payload)
    401 invalid_credentials     → InvalidCredentialsError
    401 otherwise               → UnauthorizedError    (unauthorized)
    404                         → NotFoundError        (not_found)
    any other non-2xx           → RequestFailedError   (request_failed)

Authenticated calls made without a token raise UnauthorizedError before
anything is sent.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from cloudmemo.client.config import client_settings
from cloudmemo.client.errors import (
    ApiError,
    InvalidCredentialsError,
    InvalidPayloadError,
    NotFoundError,
    RequestFailedError,
    RequestTimeoutError,
    UnauthorizedError,
    UnreachableError,
)
from cloudmemo.client.session import SessionContext
from cloudmemo.schemas.auth import LoginResponse
from cloudmemo.schemas.clip import ClipResponse
from cloudmemo.schemas.memo import MemoListAdapter, MemoResponse

logger = logging.getLogger(__name__)


def _error_from_response(response: httpx.Response) -> ApiError:
    """Build the taxonomy error for a non-2xx response."""
    code = None
    message = None
    try:
        body = response.json()
        if isinstance(body, dict):
            code = body.get("error")
            message = body.get("message")
    except ValueError:
        pass

    status = response.status_code
    message = message or f"HTTP {status}"
    if status == 401:
        if code == InvalidCredentialsError.code:
            return InvalidCredentialsError(message, status)
        return UnauthorizedError(message, status)
    if status == 400:
        return InvalidPayloadError(message, status)
    if status == 404:
        return NotFoundError(message, status)
    return RequestFailedError(message, status)


class ApiClient:
    """
    One instance per session context.

    Usage:
        async with ApiClient(session) as api:
            await api.login("secret")
            memos = await api.list_memos()
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self._http = httpx.AsyncClient(
            base_url=base_url or client_settings.api_base_url,
            timeout=timeout if timeout is not None else client_settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Transport ─────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers = {}
        if authenticated:
            token = self.session.token
            if not token:
                raise UnauthorizedError()
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._http.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out", method, path)
            raise RequestTimeoutError("The server did not answer in time") from e
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise UnreachableError("Could not reach the server") from e

        if response.is_success:
            return response
        raise _error_from_response(response)

    @staticmethod
    def _parse(model: Any, response: httpx.Response) -> Any:
        try:
            return model.model_validate_json(response.content)
        except PydanticValidationError as e:
            raise RequestFailedError(
                "Unexpected response from the server", response.status_code
            ) from e

    # ── Auth ──────────────────────────────────────────────────────────────

    async def login(self, password: str) -> str:
        """Exchange the shared password for a token and start the session."""
        response = await self._request(
            "POST", "/login", json={"password": password}, authenticated=False
        )
        token = self._parse(LoginResponse, response).token
        self.session.begin(token)
        return token

    # ── Memos ─────────────────────────────────────────────────────────────

    async def list_memos(self) -> List[MemoResponse]:
        response = await self._request("GET", "/memos")
        try:
            return MemoListAdapter.validate_json(response.content)
        except PydanticValidationError as e:
            raise RequestFailedError(
                "Unexpected response from the server", response.status_code
            ) from e

    async def get_memo(self, memo_id: int) -> MemoResponse:
        response = await self._request("GET", f"/memos/{memo_id}")
        return self._parse(MemoResponse, response)

    async def create_memo(self, content: str) -> MemoResponse:
        response = await self._request("POST", "/memos", json={"content": content})
        return self._parse(MemoResponse, response)

    async def update_memo(self, memo_id: int, content: str) -> MemoResponse:
        response = await self._request("PUT", f"/memos/{memo_id}", json={"content": content})
        return self._parse(MemoResponse, response)

    async def delete_memo(self, memo_id: int) -> None:
        await self._request("DELETE", f"/memos/{memo_id}")

    # ── Clip ──────────────────────────────────────────────────────────────

    async def get_clip(self) -> ClipResponse:
        response = await self._request("GET", "/clip")
        return self._parse(ClipResponse, response)

    async def save_clip(self, text: str) -> ClipResponse:
        response = await self._request("POST", "/clip", json={"text": text})
        return self._parse(ClipResponse, response)
