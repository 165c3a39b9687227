# tests/test_performance_api.py
from __future__ import annotations

import pytest

from salesup.core.roles import UserRole
from factories import auth_headers, create_history, create_user

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _team(db):
    manager = await create_user(db, "boss@example.com", UserRole.MANAGER, first_name="Grace", last_name="Hopper")
    agent = await create_user(db, "agent@example.com", invited_by=manager)
    return manager, agent


async def test_no_entries_means_no_data(client, db):
    agent = await create_user(db, "agent@example.com")
    await db.commit()

    r = await client.get("/api/v1/performance", headers=auth_headers(agent))
    assert r.status_code == 200
    assert r.json()["snapshot"] is None
    assert r.json()["message"]

    r = await client.get("/api/v1/analysis", headers=auth_headers(agent))
    assert r.status_code == 200
    assert r.json()["analysis"] is None
    assert r.json()["message"]

    r = await client.get("/api/v1/performance/weaknesses", headers=auth_headers(agent))
    assert r.json()["weaknesses"] == []


async def test_performance_is_computed_on_the_fly_before_first_save(client, db):
    agent = await create_user(db, "agent@example.com")
    await create_history(db, agent, 30)
    await db.commit()

    r = await client.get("/api/v1/performance", headers=auth_headers(agent))

    snap = r.json()["snapshot"]
    assert snap["calculated_at"] is None
    assert snap["metrics"]["insurance_rate"] == 80.0
    assert snap["metrics"]["consistency_score"] == 100


async def test_recalculate_then_analysis(client, db):
    agent = await create_user(db, "agent@example.com")
    await create_history(db, agent, 30)
    await db.commit()

    r = await client.post("/api/v1/performance/recalculate", headers=auth_headers(agent))
    assert r.status_code == 200
    snap = r.json()["snapshot"]
    assert snap["calculated_at"] is not None
    assert snap["metrics"]["total_contracts"] == 300

    r = await client.get("/api/v1/analysis", headers=auth_headers(agent))
    analysis = r.json()["analysis"]
    assert analysis is not None
    assert analysis["insights"][0]["id"]
    assert "insurance-excellent" in [i["id"] for i in analysis["insights"]]
    assert len(analysis["next_goals"]) <= 3
    assert analysis["trend"] == "stable"


async def test_post_analysis_with_focus_area(client, db):
    agent = await create_user(db, "agent@example.com")
    await create_history(db, agent, 10, upgrades=1, upgrade_value=50)
    await db.commit()
    await client.post("/api/v1/performance/recalculate", headers=auth_headers(agent))

    r = await client.post(
        "/api/v1/analysis",
        headers=auth_headers(agent),
        json={"focus_area": "upgrades", "days": 7},
    )

    assert r.status_code == 200
    insights = r.json()["analysis"]["insights"]
    assert insights
    assert {i["category"] for i in insights} == {"upgrades"}


async def test_post_analysis_rejects_unknown_focus(client, db):
    agent = await create_user(db, "agent@example.com")
    await db.commit()

    r = await client.post("/api/v1/analysis", headers=auth_headers(agent), json={"focus_area": "vibes"})

    assert r.status_code == 422


async def test_weaknesses_endpoint(client, db):
    agent = await create_user(db, "agent@example.com")
    await create_history(db, agent, 5, contracts=5, upgrades=1, upgrade_value=20, insurance=1)
    await db.commit()
    await client.post("/api/v1/performance/recalculate", headers=auth_headers(agent))

    r = await client.get("/api/v1/performance/weaknesses", headers=auth_headers(agent))

    body = r.json()
    assert r.status_code == 200
    assert body["weaknesses"][:2] == ["insurance_rate", "upgrade_rate"]
    assert len(body["weaknesses"]) <= 5
    assert len(body["recommendations"]) <= 6
    assert body["metrics"]["insurance_rate"] == 20.0


async def test_manager_sees_invited_agent(client, db):
    manager, agent = await _team(db)
    await create_history(db, agent, 3)
    await db.commit()

    r = await client.get("/api/v1/performance", headers=auth_headers(manager), params={"agent_id": str(agent.id)})

    assert r.status_code == 200
    assert r.json()["snapshot"]["agent_id"] == str(agent.id)


async def test_manager_cannot_see_other_teams(client, db):
    manager, _ = await _team(db)
    outsider = await create_user(db, "outsider@example.com")
    await db.commit()

    r = await client.get("/api/v1/analysis", headers=auth_headers(manager), params={"agent_id": str(outsider.id)})

    assert r.status_code == 403


async def test_manager_must_name_an_agent(client, db):
    manager, _ = await _team(db)
    await db.commit()

    r = await client.get("/api/v1/performance", headers=auth_headers(manager))

    assert r.status_code == 400


async def test_agent_cannot_view_peer(client, db):
    _, agent = await _team(db)
    peer = await create_user(db, "peer@example.com")
    await db.commit()

    r = await client.get("/api/v1/performance", headers=auth_headers(agent), params={"agent_id": str(peer.id)})

    assert r.status_code == 403
