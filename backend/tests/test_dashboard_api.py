# tests/test_dashboard_api.py
from __future__ import annotations

from datetime import timedelta

import pytest

from salesup.core.clock import today, utcnow
from salesup.core.roles import InvitationStatus, UserRole
from salesup.models.invitation import Invitation
from factories import auth_headers, create_entry, create_history, create_user

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def test_agent_dashboard_before_and_after_filling_today(client, db):
    agent = await create_user(db, "agent@example.com")
    await create_entry(db, agent, today() - timedelta(days=1))
    await db.commit()

    r = await client.get("/api/v1/dashboard", headers=auth_headers(agent))
    assert r.status_code == 200
    body = r.json()
    assert body["type"] == "agent"
    assert body["data"]["has_filled_today"] is False
    assert body["data"]["today_entry"] is None
    assert len(body["data"]["recent_entries"]) == 1

    r = await client.post(
        "/api/v1/daily-entries",
        headers=auth_headers(agent),
        json={"date": today().isoformat(), "contracts_count": 6, "upgrades_count": 2, "total_upgrade_value": 250},
    )
    assert r.status_code == 201

    r = await client.get("/api/v1/dashboard", headers=auth_headers(agent))
    data = r.json()["data"]
    assert data["has_filled_today"] is True
    assert data["today_entry"]["contracts_count"] == 6
    assert data["recent_entries"][0]["date"] == today().isoformat()
    assert data["snapshot"]["metrics"]["total_contracts"] == 16


async def test_agent_dashboard_shows_at_most_seven_entries(client, db):
    agent = await create_user(db, "agent@example.com")
    await create_history(db, agent, 10)
    await db.commit()

    r = await client.get("/api/v1/dashboard", headers=auth_headers(agent))

    assert len(r.json()["data"]["recent_entries"]) == 7


async def test_manager_dashboard(client, db):
    manager = await create_user(db, "boss@example.com", UserRole.MANAGER)
    busy = await create_user(db, "busy@example.com", invited_by=manager)
    idle = await create_user(db, "idle@example.com", invited_by=manager, is_active=False)
    outsider = await create_user(db, "outsider@example.com")
    await create_history(db, busy, 5)
    db.add(
        Invitation(
            email="soon@example.com",
            first_name="Soon",
            last_name="Agent",
            status=InvitationStatus.PENDING.value,
            token="pending-token-0123456789",
            expires_at=utcnow() + timedelta(days=7),
            invited_by_user_id=manager.id,
            invited_by_name=manager.full_name,
        )
    )
    await db.commit()

    r = await client.post("/api/v1/performance/recalculate", headers=auth_headers(busy))
    assert r.status_code == 200

    r = await client.get("/api/v1/dashboard", headers=auth_headers(manager))

    assert r.status_code == 200
    body = r.json()
    assert body["type"] == "manager"
    data = body["data"]
    assert data["team_stats"] == {"total_agents": 2, "active_agents": 1, "pending_invitations": 1}

    by_email = {a["email"]: a for a in data["agents"]}
    assert set(by_email) == {"busy@example.com", "idle@example.com"}
    assert outsider.email not in by_email
    assert by_email["busy@example.com"]["metrics"]["total_contracts"] == 50
    assert by_email["idle@example.com"]["metrics"] is None
    assert by_email["idle@example.com"]["id"] == str(idle.id)
    assert [i["email"] for i in data["pending_invitations"]] == ["soon@example.com"]


async def test_dashboard_requires_auth(client, db):
    r = await client.get("/api/v1/dashboard")

    assert r.status_code in (401, 403)
