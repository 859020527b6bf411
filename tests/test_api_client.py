"""
CloudMemo - API Client Tests
==============================

What:  ApiClient against httpx.MockTransport handlers.

What we test:
    ✅ Login stores the token in the session context
    ✅ Bearer header on authenticated calls; no request at all without a token
    ✅ Status codes and transport failures map onto the error taxonomy
    ✅ Credential stores (memory and file)
"""

import json

import httpx
import pytest

from cloudmemo.client.api import ApiClient
from cloudmemo.client.config import ClientSettings
from cloudmemo.client.errors import (
    InvalidCredentialsError,
    InvalidPayloadError,
    NotFoundError,
    RequestFailedError,
    RequestTimeoutError,
    UnauthorizedError,
    UnreachableError,
)
from cloudmemo.client.session import (
    FileCredentialStore,
    MemoryCredentialStore,
    SessionContext,
)

BASE_URL = "http://memo.test/api"
MEMO = {
    "id": 1,
    "content": "hello",
    "created_at": "2026-01-01T00:00:00Z",
    "updated_at": "2026-01-01T00:00:00Z",
}


def _client(handler, token=None):
    session = SessionContext(MemoryCredentialStore(token))
    return ApiClient(
        session, base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler)
    )


class TestApiClientRequests:

    @pytest.mark.asyncio
    async def test_login_begins_session(self):
        def handler(request):
            assert request.url.path == "/api/login"
            assert "authorization" not in request.headers
            assert json.loads(request.content) == {"password": "pw"}
            return httpx.Response(200, json={"token": "tok"})

        async with _client(handler) as api:
            token = await api.login("pw")

            assert token == "tok"
            assert api.session.token == "tok"
            assert api.session.is_authenticated

    @pytest.mark.asyncio
    async def test_authenticated_call_sends_bearer(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[MEMO])

        async with _client(handler, token="tok") as api:
            memos = await api.list_memos()

        assert memos[0].id == 1
        assert seen[0].url.path == "/api/memos"
        assert seen[0].headers["authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_no_token_means_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=[])

        async with _client(handler) as api:
            with pytest.raises(UnauthorizedError):
                await api.list_memos()

        assert calls == []

    @pytest.mark.asyncio
    async def test_memo_and_clip_calls(self):
        def handler(request):
            path, method = request.url.path, request.method
            if (method, path) == ("POST", "/api/memos"):
                return httpx.Response(201, json={**MEMO, "content": json.loads(request.content)["content"]})
            if (method, path) == ("PUT", "/api/memos/1"):
                return httpx.Response(200, json={**MEMO, "content": "b"})
            if (method, path) == ("GET", "/api/memos/1"):
                return httpx.Response(200, json=MEMO)
            if (method, path) == ("DELETE", "/api/memos/1"):
                return httpx.Response(204)
            if (method, path) == ("GET", "/api/clip"):
                return httpx.Response(200, json={"text": None})
            if (method, path) == ("POST", "/api/clip"):
                return httpx.Response(
                    201, json={"text": "", "created_at": "2026-01-01T00:00:00Z"}
                )
            return httpx.Response(404, json={"error": "not_found"})

        async with _client(handler, token="tok") as api:
            assert (await api.create_memo("a")).content == "a"
            assert (await api.update_memo(1, "b")).content == "b"
            assert (await api.get_memo(1)).id == 1
            assert await api.delete_memo(1) is None
            assert (await api.get_clip()).text is None
            saved = await api.save_clip("")
            assert saved.text == ""
            assert saved.created_at is not None


class TestApiClientErrors:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, body, expected",
        [
            (401, {"error": "invalid_credentials"}, InvalidCredentialsError),
            (401, {"error": "unauthorized"}, UnauthorizedError),
            (400, {"error": "invalid_payload"}, InvalidPayloadError),
            (404, {"error": "not_found"}, NotFoundError),
            (500, {"error": "server_error"}, RequestFailedError),
            (503, {"error": "service_unavailable"}, RequestFailedError),
        ],
    )
    async def test_status_mapping(self, status, body, expected):
        async with _client(lambda request: httpx.Response(status, json=body), token="t") as api:
            with pytest.raises(expected) as exc_info:
                await api.get_memo(1)

        assert exc_info.value.status_code == status
        assert type(exc_info.value) is expected

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        async with _client(lambda request: httpx.Response(502, text="Bad Gateway"), token="t") as api:
            with pytest.raises(RequestFailedError) as exc_info:
                await api.list_memos()

        assert exc_info.value.code == "request_failed"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler, token="t") as api:
            with pytest.raises(RequestTimeoutError) as exc_info:
                await api.get_clip()

        assert exc_info.value.code == "timeout"

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler, token="t") as api:
            with pytest.raises(UnreachableError) as exc_info:
                await api.save_clip("x")

        assert exc_info.value.code == "unreachable"

    @pytest.mark.asyncio
    async def test_unexpected_success_body(self):
        async with _client(lambda request: httpx.Response(200, json={"nope": 1}), token="t") as api:
            with pytest.raises(RequestFailedError):
                await api.get_memo(1)


class TestCredentialStores:

    def test_memory_store(self):
        store = MemoryCredentialStore()
        assert store.read() is None
        store.write("abc")
        assert store.read() == "abc"
        store.clear()
        assert store.read() is None

    def test_file_store_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "token"
        store = FileCredentialStore(path)

        assert store.read() is None
        store.write("abc")
        assert store.read() == "abc"
        assert (path.stat().st_mode & 0o777) == 0o600

        store.clear()
        assert store.read() is None
        store.clear()

    def test_file_store_tightens_existing_file(self, tmp_path):
        path = tmp_path / "token"
        path.write_text("old", encoding="utf-8")
        path.chmod(0o644)

        FileCredentialStore(path).write("new")

        assert path.read_text(encoding="utf-8") == "new"
        assert (path.stat().st_mode & 0o777) == 0o600

    def test_session_from_settings_uses_credential_path(self, tmp_path):
        settings = ClientSettings(credential_path=str(tmp_path / "cm" / "token"))

        session = SessionContext.from_settings(settings)
        session.begin("tok")

        assert (tmp_path / "cm" / "token").read_text(encoding="utf-8") == "tok"
        assert SessionContext.from_settings(settings).token == "tok"

    def test_session_context_restores_saved_token(self, tmp_path):
        store = FileCredentialStore(tmp_path / "token")
        store.write("persisted")

        session = SessionContext(store)
        assert session.token == "persisted"

        session.end()
        assert not session.is_authenticated
        assert store.read() is None

    def test_session_begin_persists(self):
        store = MemoryCredentialStore()
        session = SessionContext(store)

        session.begin("new")

        assert session.token == "new"
        assert store.read() == "new"
