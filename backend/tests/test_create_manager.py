# tests/test_create_manager.py
from __future__ import annotations

import pytest

from salesup.core.roles import UserRole
from scripts.create_manager import ManagerExistsError, create_manager

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def test_create_manager_normalizes_input(db):
    user = await create_manager(db, email="  Boss@Example.COM ", first_name=" Ada ", last_name="Lovelace")

    assert user.email == "boss@example.com"
    assert user.first_name == "Ada"
    assert user.role == UserRole.MANAGER.value
    assert user.invited_by_user_id is None


async def test_create_manager_refuses_existing_email(db):
    await create_manager(db, email="boss@example.com", first_name="Ada", last_name="Lovelace")

    with pytest.raises(ManagerExistsError):
        await create_manager(db, email="BOSS@example.com", first_name="Other", last_name="Person")


async def test_new_manager_can_sign_in(client, db):
    await create_manager(db, email="boss@example.com", first_name="Ada", last_name="Lovelace")

    r = await client.post("/api/v1/auth/request-code", json={"email": "boss@example.com"})
    assert r.status_code == 200
    code = r.json()["code"]

    r = await client.post("/api/v1/auth/verify-code", json={"email": "boss@example.com", "code": code})
    assert r.status_code == 200

    r = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {r.json()['access_token']}"})
    assert r.json()["role"] == "manager"
