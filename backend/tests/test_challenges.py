import pytest
from conftest import make_challenge


@pytest.mark.asyncio
async def test_list_and_filter(client, session):
    await make_challenge(session, title="Plant a Tree", week=1, category="Biodiversity")
    await make_challenge(session, title="Beach Cleanup", week=2, category="Waste")
    await make_challenge(session, title="Retired one", week=2, category="Waste", is_active=False)

    r = await client.get("/api/challenges")
    assert r.status_code == 200
    rows = r.json()["challenges"]
    assert len(rows) == 3
    assert rows[0]["week"] == 1
    assert {"id", "title", "points", "isActive", "createdAt"} <= set(rows[0])

    r = await client.get("/api/challenges", params={"week": 2})
    assert {c["title"] for c in r.json()["challenges"]} == {"Beach Cleanup", "Retired one"}
    r = await client.get("/api/challenges", params={"category": "Waste", "isActive": "true"})
    assert [c["title"] for c in r.json()["challenges"]] == ["Beach Cleanup"]
    r = await client.get("/api/challenges", params={"week": 0})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_get_one(client, session):
    ch = await make_challenge(session)
    r = await client.get(f"/api/challenges/{ch.id}")
    assert r.status_code == 200
    assert r.json()["challenge"]["title"] == "Plant a Tree"
    r = await client.get("/api/challenges/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"detail": "Challenge not found", "error_code": "NOT_FOUND"}


@pytest.mark.asyncio
async def test_admin_creates_and_updates(client, admin_headers):
    payload = {
        "title": "Switch Off Week",
        "description": "Turn off unused lights for a week",
        "points": 25,
        "category": "Energy",
        "week": 3,
        "startDate": "2026-10-19T00:00:00Z",
        "endDate": "2026-10-26T00:00:00Z",
    }
    r = await client.post("/api/challenges", json=payload)
    assert r.status_code == 401

    r = await client.post("/api/challenges", json=payload, headers=admin_headers)
    assert r.status_code == 201, r.text
    ch = r.json()["challenge"]
    assert ch["points"] == 25
    assert ch["isActive"] is True

    r = await client.put(f"/api/challenges/{ch['id']}", json={"points": 30, "isActive": False}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["challenge"]["points"] == 30
    assert r.json()["challenge"]["isActive"] is False

    r = await client.put(f"/api/challenges/{ch['id']}", json={"endDate": "2026-10-01T00:00:00Z"}, headers=admin_headers)
    assert r.status_code == 400
    r = await client.put(f"/api/challenges/{ch['id']}", json={"title": None}, headers=admin_headers)
    assert r.status_code == 400
    r = await client.put("/api/challenges/missing", json={"points": 5}, headers=admin_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_create_validation(client, admin_headers):
    base = {"title": "Compost", "description": "Start a compost bin", "category": "Waste"}
    r = await client.post("/api/challenges", json={**base, "points": 0}, headers=admin_headers)
    assert r.status_code == 422
    r = await client.post(
        "/api/challenges",
        json={**base, "startDate": "2026-10-20T00:00:00Z", "endDate": "2026-10-19T00:00:00Z"},
        headers=admin_headers,
    )
    assert r.status_code == 422
