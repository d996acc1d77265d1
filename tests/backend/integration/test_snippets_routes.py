import asyncio
import uuid
from unittest.mock import patch

import pytest
from tortoise.exceptions import OperationalError

from app.config import settings
from app.services import snippets as snippet_service


pytestmark = pytest.mark.asyncio


async def _create(client, headers, payload):
    resp = await client.post("/api/v1/snippets", headers=headers, json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def test_full_snippet_crud_flow(client, create_user, auth_headers, snippet_payload):
    user, _ = await create_user()
    headers = auth_headers(user)

    created = await _create(client, headers, snippet_payload(code="print(1)", tags=["intro", "intro"]))
    assert created["version"] == 1
    assert created["previousVersions"] == []
    assert created["views"] == 0
    assert created["likes"] == 0
    assert created["likedBy"] == []
    assert created["tags"] == ["intro"]
    assert created["author"] == {"id": str(user.id), "name": user.name, "image": None}

    sid = created["id"]
    detail = await client.get(f"/api/v1/snippets/{sid}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["data"]["snippet"]["title"] == "Hello world"
    assert detail.json()["data"]["comments"] == []

    updated = await client.put(
        f"/api/v1/snippets/{sid}",
        headers=headers,
        json=snippet_payload(code="print(2)", title="Renamed", tags=["intro", "v2"]),
    )
    assert updated.status_code == 200
    data = updated.json()["data"]
    assert data["version"] == 2
    assert data["title"] == "Renamed"
    assert data["tags"] == ["intro", "v2"]
    assert [(v["code"], v["version"]) for v in data["previousVersions"]] == [("print(1)", 1)]

    same_code = await client.put(
        f"/api/v1/snippets/{sid}",
        headers=headers,
        json=snippet_payload(code="print(2)", title="Renamed again"),
    )
    assert same_code.json()["data"]["version"] == 2
    assert len(same_code.json()["data"]["previousVersions"]) == 1

    versions = await client.get(f"/api/v1/snippets/{sid}/versions", headers=headers)
    assert versions.status_code == 200
    assert versions.json()["data"]["version"] == 2
    assert versions.json()["data"]["code"] == "print(2)"

    delete_resp = await client.delete(f"/api/v1/snippets/{sid}", headers=headers)
    assert delete_resp.status_code == 200
    assert delete_resp.json()["data"]["deleted"] is True

    missing_resp = await client.get(f"/api/v1/snippets/{sid}", headers=headers)
    assert missing_resp.status_code == 404
    assert missing_resp.json()["detail"] == "NOT_FOUND"


async def test_create_requires_auth_and_fields(client, create_user, auth_headers, snippet_payload):
    unauth = await client.post("/api/v1/snippets", json=snippet_payload())
    assert unauth.status_code == 401

    user, _ = await create_user()
    headers = auth_headers(user)
    for field in ("title", "code", "language"):
        body = snippet_payload()
        del body[field]
        resp = await client.post("/api/v1/snippets", headers=headers, json=body)
        assert resp.status_code == 400, field
        assert resp.json()["detail"] == "VALIDATION_ERROR"

    blank = await client.post("/api/v1/snippets", headers=headers, json=snippet_payload(code="   "))
    assert blank.status_code == 400

    bad_visibility = await client.post("/api/v1/snippets", headers=headers, json=snippet_payload(visibility="friends"))
    assert bad_visibility.status_code == 400


async def test_update_requires_full_body(client, create_user, auth_headers, snippet_payload):
    user, _ = await create_user()
    headers = auth_headers(user)
    created = await _create(client, headers, snippet_payload())

    empty = await client.put(f"/api/v1/snippets/{created['id']}", headers=headers, json={})
    assert empty.status_code == 400

    partial = await client.put(f"/api/v1/snippets/{created['id']}", headers=headers, json={"code": "x"})
    assert partial.status_code == 400


async def test_ownership_is_enforced(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    intruder, _ = await create_user()
    created = await _create(client, auth_headers(owner), snippet_payload())
    sid = created["id"]

    put_resp = await client.put(f"/api/v1/snippets/{sid}", headers=auth_headers(intruder), json=snippet_payload(code="hacked"))
    assert put_resp.status_code == 403
    assert put_resp.json()["detail"] == "FORBIDDEN"

    del_resp = await client.delete(f"/api/v1/snippets/{sid}", headers=auth_headers(intruder))
    assert del_resp.status_code == 403

    anon_del = await client.delete(f"/api/v1/snippets/{sid}")
    assert anon_del.status_code == 401

    still_there = await client.get(f"/api/v1/snippets/{sid}")
    assert still_there.json()["data"]["snippet"]["code"] == "print('hello')"


async def test_invalid_and_unknown_ids(client, create_user, auth_headers, snippet_payload):
    user, _ = await create_user()
    headers = auth_headers(user)

    bad = await client.get("/api/v1/snippets/not-a-valid-id")
    assert bad.status_code == 400
    assert bad.json()["detail"] == "INVALID_ID"

    unknown = str(uuid.uuid4())
    assert (await client.get(f"/api/v1/snippets/{unknown}")).status_code == 404
    assert (await client.put(f"/api/v1/snippets/{unknown}", headers=headers, json=snippet_payload())).status_code == 404
    assert (await client.delete(f"/api/v1/snippets/{unknown}", headers=headers)).status_code == 404
    assert (await client.delete("/api/v1/snippets/42", headers=headers)).status_code == 400


async def test_private_snippet_never_leaks(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    other, _ = await create_user()
    created = await _create(client, auth_headers(owner), snippet_payload(visibility="private", code="SECRET"))
    sid = created["id"]

    anon = await client.get(f"/api/v1/snippets/{sid}")
    assert anon.status_code == 401
    assert "SECRET" not in anon.text

    stranger = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(other))
    assert stranger.status_code == 403
    assert "SECRET" not in stranger.text

    versions = await client.get(f"/api/v1/snippets/{sid}/versions", headers=auth_headers(other))
    assert versions.status_code == 403

    own = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(owner))
    assert own.status_code == 200
    assert own.json()["data"]["snippet"]["code"] == "SECRET"


async def test_views_count_non_author_reads(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    reader, _ = await create_user()
    sid = (await _create(client, auth_headers(owner), snippet_payload()))["id"]

    first = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(reader))
    assert first.json()["data"]["snippet"]["views"] == 1
    await client.get(f"/api/v1/snippets/{sid}")
    own = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(owner))
    assert own.json()["data"]["snippet"]["views"] == 2

    # The versions endpoint is not a view
    await client.get(f"/api/v1/snippets/{sid}/versions")
    own = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(owner))
    assert own.json()["data"]["snippet"]["views"] == 2


async def test_concurrent_reads_all_count(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    sid = (await _create(client, auth_headers(owner), snippet_payload()))["id"]

    responses = await asyncio.gather(*[client.get(f"/api/v1/snippets/{sid}") for _ in range(10)])
    assert all(r.status_code == 200 for r in responses)

    own = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(owner))
    assert own.json()["data"]["snippet"]["views"] == 10


async def test_delete_removes_comments(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    fan, _ = await create_user()
    sid = (await _create(client, auth_headers(owner), snippet_payload()))["id"]
    for text in ("one", "two", "three"):
        resp = await client.post(f"/api/v1/snippets/{sid}/comments", headers=auth_headers(fan), json={"content": text})
        assert resp.status_code == 201

    delete_resp = await client.delete(f"/api/v1/snippets/{sid}", headers=auth_headers(owner))
    assert delete_resp.json()["data"]["commentsDeleted"] == 3

    comment_resp = await client.post(f"/api/v1/snippets/{sid}/comments", headers=auth_headers(fan), json={"content": "late"})
    assert comment_resp.status_code == 404


async def test_persistence_failure_is_internal_error(client, create_user, auth_headers):
    user, _ = await create_user()

    async def broken(*args, **kwargs):
        raise OperationalError("database is locked")

    with patch.object(snippet_service.Snippet, "get_or_none", new=broken):
        resp = await client.get(f"/api/v1/snippets/{uuid.uuid4()}", headers=auth_headers(user))

    assert resp.status_code == 500
    body = resp.json()
    assert body["detail"] == "INTERNAL_ERROR"
    assert "locked" not in body["message"]


async def test_unexpected_failure_is_internal_error(client, create_user, auth_headers):
    user, _ = await create_user()

    async def broken(*args, **kwargs):
        raise RuntimeError("connection reset by peer")

    with patch.object(snippet_service.Snippet, "get_or_none", new=broken):
        resp = await client.get(f"/api/v1/snippets/{uuid.uuid4()}", headers=auth_headers(user))

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["detail"] == "INTERNAL_ERROR"
    assert "reset" not in body["message"]

    # The app keeps serving after the failure
    assert (await client.get("/healthz")).status_code == 200


async def test_routes_publish_typed_response_models(client):
    schema = (await client.get("/openapi.json")).json()
    components = schema["components"]["schemas"]

    for name in ("SnippetOut", "SnippetListOut", "PaginationOut", "SnippetDetailOut", "CommentOut",
                 "AuthorOut", "VersionSnapshot", "LikeToggleOut", "UserOut", "LoginResponse"):
        assert name in components, name

    ok = schema["paths"]["/api/v1/snippets/{snippet_id}"]["get"]["responses"]["200"]
    ref = ok["content"]["application/json"]["schema"]["$ref"].rsplit("/", 1)[-1]
    assert "SnippetDetailOut" in ref
    assert set(components[ref]["properties"]) == {"success", "data"}


async def test_slow_request_times_out(client, monkeypatch):
    monkeypatch.setattr(settings, "request_timeout_sec", 0.05)

    async def slow_listing(**kwargs):
        await asyncio.sleep(1)

    monkeypatch.setattr("app.services.listing.list_public_snippets", slow_listing)

    resp = await client.get("/api/v1/snippets")

    assert resp.status_code == 504
    assert resp.json()["detail"] == "TIMEOUT"
