"""
CloudMemo - Memo Endpoint Tests
=================================

What:  End-to-end tests of /api/memos through the real app, a SQLite memos
       table and the in-process key-value store.

What we test:
    ✅ Create → 201 with id and created_at == updated_at
    ✅ Update keeps id and created_at, advances updated_at, beats the cache
    ✅ Delete → 204, then 404; deleting twice → 404
    ✅ List ordered by most recent update, invalidated by every write
    ✅ Ids are not reused after deletion
    ✅ Payload validation → 400 invalid_payload
"""

import asyncio
from datetime import datetime

import pytest

from cloudmemo.schemas.common import ErrorResponse
from cloudmemo.services.memo_service import MEMO_LIST_CACHE_KEY, memo_cache_key


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def _create(client, headers, content):
    response = await client.post("/api/memos", json={"content": content}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestCreateMemo:

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_equal_timestamps(self, test_client, auth_headers):
        memo = await _create(test_client, auth_headers, "a")

        assert isinstance(memo["id"], int)
        assert memo["content"] == "a"
        assert memo["created_at"] == memo["updated_at"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{"content": ""}, {}, {"content": 123}, {"content": None}, {"text": "a"}],
    )
    async def test_invalid_payload(self, test_client, auth_headers, body):
        response = await test_client.post("/api/memos", json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_payload"

        error = ErrorResponse.model_validate(response.json())
        assert error.details
        assert all(set(item) == {"field", "message"} for item in error.details)

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/memos",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_payload"

    @pytest.mark.asyncio
    async def test_ids_are_not_reused(self, test_client, auth_headers):
        first = await _create(test_client, auth_headers, "first")
        deleted = await test_client.delete(f"/api/memos/{first['id']}", headers=auth_headers)
        assert deleted.status_code == 204

        second = await _create(test_client, auth_headers, "second")

        assert second["id"] > first["id"]


class TestUpdateMemo:

    @pytest.mark.asyncio
    async def test_update_scenario(self, test_client, auth_headers, kv):
        created = await _create(test_client, auth_headers, "a")
        memo_id = created["id"]

        # Populate memo:<id> so the follow-up read has something stale to serve
        cached = await test_client.get(f"/api/memos/{memo_id}", headers=auth_headers)
        assert cached.json()["content"] == "a"
        assert await kv.get(memo_cache_key(memo_id)) is not None

        await asyncio.sleep(0.01)
        response = await test_client.put(
            f"/api/memos/{memo_id}", json={"content": "b"}, headers=auth_headers
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["id"] == memo_id
        assert updated["content"] == "b"
        assert updated["created_at"] == created["created_at"]
        assert _ts(updated["updated_at"]) > _ts(created["updated_at"])

        fetched = await test_client.get(f"/api/memos/{memo_id}", headers=auth_headers)
        assert fetched.json()["content"] == "b"
        assert fetched.json()["updated_at"] == updated["updated_at"]

    @pytest.mark.asyncio
    async def test_update_missing_memo(self, test_client, auth_headers):
        response = await test_client.put(
            "/api/memos/999999", json={"content": "b"}, headers=auth_headers
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_update_without_content(self, test_client, auth_headers):
        memo = await _create(test_client, auth_headers, "a")

        response = await test_client.put(
            f"/api/memos/{memo['id']}", json={}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_payload"


class TestDeleteMemo:

    @pytest.mark.asyncio
    async def test_delete_missing_memo(self, test_client, auth_headers):
        response = await test_client.delete("/api/memos/424242", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_delete_then_get(self, test_client, auth_headers, kv):
        memo = await _create(test_client, auth_headers, "to delete")
        await test_client.get(f"/api/memos/{memo['id']}", headers=auth_headers)

        response = await test_client.delete(f"/api/memos/{memo['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert response.content == b""
        assert await kv.get(memo_cache_key(memo["id"])) is None

        gone = await test_client.get(f"/api/memos/{memo['id']}", headers=auth_headers)
        assert gone.status_code == 404

        again = await test_client.delete(f"/api/memos/{memo['id']}", headers=auth_headers)
        assert again.status_code == 404


class TestListMemos:

    @pytest.mark.asyncio
    async def test_newest_update_first(self, test_client, auth_headers):
        a = await _create(test_client, auth_headers, "a")
        await asyncio.sleep(0.01)
        b = await _create(test_client, auth_headers, "b")
        await asyncio.sleep(0.01)
        await test_client.put(f"/api/memos/{a['id']}", json={"content": "a2"}, headers=auth_headers)

        response = await test_client.get("/api/memos", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "no-store"
        assert [memo["id"] for memo in response.json()] == [a["id"], b["id"]]

    @pytest.mark.asyncio
    async def test_list_never_stale_after_writes(self, test_client, auth_headers, kv):
        memo = await _create(test_client, auth_headers, "one")

        await test_client.get("/api/memos", headers=auth_headers)
        assert await kv.get(MEMO_LIST_CACHE_KEY) is not None

        await _create(test_client, auth_headers, "two")
        assert await kv.get(MEMO_LIST_CACHE_KEY) is None
        listed = await test_client.get("/api/memos", headers=auth_headers)
        assert {m["content"] for m in listed.json()} == {"one", "two"}

        await test_client.put(
            f"/api/memos/{memo['id']}", json={"content": "uno"}, headers=auth_headers
        )
        listed = await test_client.get("/api/memos", headers=auth_headers)
        assert {m["content"] for m in listed.json()} == {"uno", "two"}

        await test_client.delete(f"/api/memos/{memo['id']}", headers=auth_headers)
        listed = await test_client.get("/api/memos", headers=auth_headers)
        assert [m["content"] for m in listed.json()] == ["two"]

    @pytest.mark.asyncio
    async def test_cached_list_matches_fresh_list(self, test_client, auth_headers):
        await _create(test_client, auth_headers, "x")

        fresh = await test_client.get("/api/memos", headers=auth_headers)
        cached = await test_client.get("/api/memos", headers=auth_headers)

        assert fresh.json() == cached.json()


class TestRouteMatching:

    @pytest.mark.asyncio
    async def test_non_numeric_id_is_not_found(self, test_client, auth_headers):
        response = await test_client.get("/api/memos/abc", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_memo_routes_require_session(self, test_client):
        response = await test_client.post("/api/memos", json={"content": "x"})

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"
