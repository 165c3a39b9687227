# tests/test_auth_api.py
from __future__ import annotations

import pytest

from salesup.core.roles import UserRole
from factories import auth_headers, create_user

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def test_unknown_email_cannot_request_code(client, db):
    r = await client.post("/api/v1/auth/request-code", json={"email": "nobody@example.com"})

    assert r.status_code == 404


async def test_magic_code_round_trip(client, db):
    await create_user(db, "Agent.One@Example.com", first_name="Ana", last_name="Diaz")
    await db.commit()

    r = await client.post("/api/v1/auth/request-code", json={"email": "agent.one@example.com"})
    assert r.status_code == 200
    code = r.json()["code"]

    r = await client.post("/api/v1/auth/verify-code", json={"email": "agent.one@example.com", "code": code})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    body = r.json()
    assert body["email"] == "agent.one@example.com"
    assert body["role"] == "agent"
    assert body["first_name"] == "Ana"
    assert body["last_login_at"] is not None

    # one-time use
    r = await client.post("/api/v1/auth/verify-code", json={"email": "agent.one@example.com", "code": code})
    assert r.status_code == 401


async def test_wrong_code_is_rejected(client, db):
    await create_user(db, "agent@example.com")
    await db.commit()

    await client.post("/api/v1/auth/request-code", json={"email": "agent@example.com"})
    r = await client.post("/api/v1/auth/verify-code", json={"email": "agent@example.com", "code": "000000"})

    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid code"


async def test_inactive_user_cannot_request_code(client, db):
    await create_user(db, "gone@example.com", is_active=False)
    await db.commit()

    r = await client.post("/api/v1/auth/request-code", json={"email": "gone@example.com"})

    assert r.status_code == 404


async def test_garbage_token_is_401(client, db):
    r = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert r.status_code == 401


async def test_update_profile(client, db):
    manager = await create_user(db, "boss@example.com", UserRole.MANAGER)
    await db.commit()

    r = await client.patch(
        "/api/v1/auth/me",
        headers=auth_headers(manager),
        json={"first_name": "  Grace  ", "weekly_reports": False},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["first_name"] == "Grace"
    assert body["role"] == "manager"
    assert body["notifications"] == {"daily_reminders": True, "weekly_reports": False, "goal_alerts": True}


async def test_update_profile_requires_fields(client, db):
    agent = await create_user(db, "agent@example.com")
    await db.commit()

    r = await client.patch("/api/v1/auth/me", headers=auth_headers(agent), json={})

    assert r.status_code == 400
