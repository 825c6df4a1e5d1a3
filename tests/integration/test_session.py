import uuid
import httpx
import pytest
from creatorflow.api import deps
from creatorflow.api.main import app
from creatorflow.core.identity import IdentityClient

USER_ID = uuid.uuid4()


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/signup"):
        return httpx.Response(200, json={"id": str(USER_ID), "email": "new@example.com"})
    if path.endswith("/token"):
        if b"wrong" in request.content:
            return httpx.Response(400, json={"error_description": "Invalid login credentials"})
        return httpx.Response(200, json={"access_token": "tok", "user": {"id": str(USER_ID), "email": "new@example.com"}})
    if path.endswith("/logout"):
        return httpx.Response(204)
    if path.endswith("/user"):
        return httpx.Response(200, json={"id": str(USER_ID)})
    return httpx.Response(404)


@pytest.fixture(autouse=True)
def _identity_override():
    app.dependency_overrides[deps.get_identity_client] = lambda: IdentityClient(
        "https://id.test", "k", transport=httpx.MockTransport(_handler)
    )
    yield
    app.dependency_overrides.pop(deps.get_identity_client, None)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sign_up_provisions_profile(client):
    resp = await client.post(
        "/api/v1/session/signup", json={"email": "new@example.com", "password": "secret1", "display_name": "Neo"}
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["user_id"] == str(USER_ID)
    me = await client.get("/api/v1/profile/me", headers={"X-User-Id": str(USER_ID)})
    assert me.json()["display_name"] == "Neo"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sign_in_and_rejection(client):
    ok = await client.post("/api/v1/session/signin", json={"email": "new@example.com", "password": "secret1"})
    assert ok.status_code == 200 and ok.json()["access_token"] == "tok"
    bad = await client.post("/api/v1/session/signin", json={"email": "new@example.com", "password": "wrong"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid login credentials"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_sign_out_and_password_need_bearer(client):
    assert (await client.post("/api/v1/session/signout")).status_code == 401
    headers = {"Authorization": "Bearer tok"}
    assert (await client.post("/api/v1/session/signout", headers=headers)).status_code == 204
    changed = await client.put("/api/v1/session/password", json={"password": "another1"}, headers=headers)
    assert changed.status_code == 204
