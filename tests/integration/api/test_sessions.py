"""
Integration tests for the session management API
"""

import pytest
from httpx import AsyncClient
from uuid import uuid4

from tests.fixtures.users import TEST_PASSWORD, create_user
from tests.utils.cookies import call, session_cookie


async def login(client: AsyncClient, email: str = "user@example.com") -> str:
    response = await call(
        client,
        "POST",
        "/auth/login",
        json={"email": email, "password": TEST_PASSWORD},
        headers={"User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Firefox/121.0"},
    )
    assert response.status_code == 200
    return session_cookie(response)


async def current_session_id(client: AsyncClient, cookie: str) -> str:
    response = await call(client, "GET", "/auth/me", cookie=cookie)
    return response.json()["id"]


@pytest.mark.asyncio
async def test_list_sessions(client: AsyncClient, user_id):
    first = await login(client)
    second = await login(client)

    response = await call(client, "GET", "/sessions", cookie=second)

    assert response.status_code == 200
    sessions = response.json()
    assert len(sessions) == 2
    current = [s for s in sessions if s["is_current"]]
    assert len(current) == 1
    assert current[0]["id"] == await current_session_id(client, second)
    assert all("security" in s for s in sessions)
    assert all("token_hash" not in s for s in sessions)
    assert first != second


@pytest.mark.asyncio
async def test_list_sessions_requires_cookie(client: AsyncClient):
    response = await call(client, "GET", "/sessions")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_extend_session_reissues_cookie(client: AsyncClient, user_id):
    cookie = await login(client)

    response = await call(client, "POST", "/sessions/extend", cookie=cookie)

    assert response.status_code == 200
    assert response.json()["is_current"] is True
    assert session_cookie(response)

    # The re-issued cookie binds the same session
    assert await current_session_id(client, session_cookie(response)) == await current_session_id(
        client, cookie
    )


@pytest.mark.asyncio
async def test_extend_without_session(client: AsyncClient):
    response = await call(client, "POST", "/sessions/extend", cookie="garbage")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_revoke_specific_session(client: AsyncClient, user_id):
    keep = await login(client)
    other = await login(client)
    other_id = await current_session_id(client, other)

    response = await call(client, "DELETE", f"/sessions/{other_id}", cookie=keep)

    assert response.status_code == 200
    data = response.json()
    assert data["session_id"] == other_id
    assert data["revoked"] is True
    assert (await call(client, "GET", "/auth/me", cookie=other)).status_code == 401
    assert (await call(client, "GET", "/auth/me", cookie=keep)).status_code == 200

    again = await call(client, "DELETE", f"/sessions/{other_id}", cookie=keep)
    assert again.status_code == 200
    assert again.json()["revoked"] is False


@pytest.mark.asyncio
async def test_revoke_session_of_another_user(client: AsyncClient, db_session, user_id):
    await create_user(db_session, "other@example.com")
    victim = await login(client)
    victim_session_id = await current_session_id(client, victim)
    attacker = await login(client, "other@example.com")

    response = await call(client, "DELETE", f"/sessions/{victim_session_id}", cookie=attacker)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "NOT_OWNER"
    assert (await call(client, "GET", "/auth/me", cookie=victim)).status_code == 200


@pytest.mark.asyncio
async def test_revoke_unknown_session(client: AsyncClient, user_id):
    cookie = await login(client)

    response = await call(client, "DELETE", f"/sessions/{uuid4()}", cookie=cookie)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_revoke_all_keeps_current_by_default(client: AsyncClient, user_id):
    cookies = [await login(client) for _ in range(3)]

    response = await call(client, "POST", "/sessions/revoke-all", cookie=cookies[0])

    assert response.status_code == 200
    assert response.json()["revoked_count"] == 2
    assert (await call(client, "GET", "/auth/me", cookie=cookies[0])).status_code == 200
    assert (await call(client, "GET", "/auth/me", cookie=cookies[1])).status_code == 401

    again = await call(client, "POST", "/sessions/revoke-all", cookie=cookies[0])
    assert again.json()["revoked_count"] == 0


@pytest.mark.asyncio
async def test_revoke_all_including_current(client: AsyncClient, user_id):
    cookies = [await login(client) for _ in range(2)]

    response = await call(
        client, "POST", "/sessions/revoke-all", cookie=cookies[0], json={"keep_current": False}
    )

    assert response.status_code == 200
    assert response.json()["revoked_count"] == 2
    assert (await call(client, "GET", "/auth/me", cookie=cookies[0])).status_code == 401


@pytest.mark.asyncio
async def test_dashboard(client: AsyncClient, user_id):
    cookie = await login(client)
    await login(client)

    response = await call(client, "GET", "/sessions/dashboard", cookie=cookie)

    assert response.status_code == 200
    data = response.json()
    assert data["degraded"] is False
    assert data["overview"]["total"] == 2
    assert data["overview"]["active"] == 2
    assert data["devices"]["device_types"] == {"desktop": 2}
    assert data["locations"]["suspicious_locations"] == 0
    assert data["security"]["login_method_distribution"] == {"password": 2}
