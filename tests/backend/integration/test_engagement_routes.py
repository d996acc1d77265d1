import asyncio
import uuid

import pytest


pytestmark = pytest.mark.asyncio


async def _create(client, headers, payload):
    resp = await client.post("/api/v1/snippets", headers=headers, json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


async def test_like_toggle_flow(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    fan, _ = await create_user()
    sid = await _create(client, auth_headers(owner), snippet_payload())

    like = await client.post(f"/api/v1/snippets/{sid}/like", headers=auth_headers(fan))
    assert like.status_code == 200
    assert like.json()["data"] == {"liked": True, "likeCount": 1}

    detail = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(owner))
    snippet = detail.json()["data"]["snippet"]
    assert snippet["likes"] == 1
    assert snippet["likedBy"] == [str(fan.id)]

    unlike = await client.post(f"/api/v1/snippets/{sid}/like", headers=auth_headers(fan))
    assert unlike.json()["data"] == {"liked": False, "likeCount": 0}

    detail = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(owner))
    snippet = detail.json()["data"]["snippet"]
    assert snippet["likes"] == 0
    assert snippet["likedBy"] == []


async def test_like_errors(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    other, _ = await create_user()
    sid = await _create(client, auth_headers(owner), snippet_payload())
    private_id = await _create(client, auth_headers(owner), snippet_payload(visibility="private"))

    assert (await client.post(f"/api/v1/snippets/{sid}/like")).status_code == 401
    assert (await client.post("/api/v1/snippets/bogus/like", headers=auth_headers(other))).status_code == 400
    assert (await client.post(f"/api/v1/snippets/{uuid.uuid4()}/like", headers=auth_headers(other))).status_code == 404
    assert (await client.post(f"/api/v1/snippets/{private_id}/like", headers=auth_headers(other))).status_code == 403


async def test_concurrent_likes_from_many_users(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    sid = await _create(client, auth_headers(owner), snippet_payload())
    fans = [(await create_user())[0] for _ in range(8)]

    responses = await asyncio.gather(*[
        client.post(f"/api/v1/snippets/{sid}/like", headers=auth_headers(fan)) for fan in fans
    ])
    assert all(r.status_code == 200 for r in responses)
    assert all(r.json()["data"]["liked"] is True for r in responses)

    detail = await client.get(f"/api/v1/snippets/{sid}", headers=auth_headers(owner))
    snippet = detail.json()["data"]["snippet"]
    # The stored counter is exact even though the echoed likeCount may lag
    assert snippet["likes"] == 8
    assert sorted(snippet["likedBy"]) == sorted(str(f.id) for f in fans)


async def test_comment_flow(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    commenter, _ = await create_user()
    sid = await _create(client, auth_headers(owner), snippet_payload())

    first = await client.post(f"/api/v1/snippets/{sid}/comments", headers=auth_headers(commenter), json={"content": "First!"})
    assert first.status_code == 201
    comment = first.json()["data"]
    assert comment["content"] == "First!"
    assert comment["snippet"] == sid
    assert comment["author"] == {"id": str(commenter.id), "name": commenter.name, "image": None}

    await client.post(f"/api/v1/snippets/{sid}/comments", headers=auth_headers(owner), json={"content": "Thanks"})

    detail = await client.get(f"/api/v1/snippets/{sid}")
    data = detail.json()["data"]
    assert [c["content"] for c in data["comments"]] == ["Thanks", "First!"]
    assert data["snippet"]["commentCount"] == 2


async def test_comment_validation(client, create_user, auth_headers, snippet_payload):
    owner, _ = await create_user()
    sid = await _create(client, auth_headers(owner), snippet_payload())
    headers = auth_headers(owner)

    assert (await client.post(f"/api/v1/snippets/{sid}/comments", json={"content": "hi"})).status_code == 401
    for body in ({}, {"content": ""}, {"content": "   "}, {"content": "x" * 1001}):
        resp = await client.post(f"/api/v1/snippets/{sid}/comments", headers=headers, json=body)
        assert resp.status_code == 400, body
        assert resp.json()["detail"] == "VALIDATION_ERROR"

    assert (await client.post("/api/v1/snippets/bogus/comments", headers=headers, json={"content": "hi"})).status_code == 400
    missing = await client.post(f"/api/v1/snippets/{uuid.uuid4()}/comments", headers=headers, json={"content": "hi"})
    assert missing.status_code == 404
