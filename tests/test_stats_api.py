"""Stats summary tests — counts, breakdowns, completion rate."""

import pytest


@pytest.mark.asyncio
async def test_stats_with_no_tasks(client, auth_headers):
    """Zero tasks → completionRate 0, not a division error."""
    r = await client.get("/api/tasks/stats/summary", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {
        "totalTasks": 0,
        "completionRate": 0,
        "statusBreakdown": [],
        "priorityBreakdown": [],
    }


@pytest.mark.asyncio
async def test_stats_breakdowns(client, auth_headers):
    for fields in (
        {"title": "t1", "status": "completed", "priority": "high"},
        {"title": "t2", "status": "pending"},
        {"title": "t3", "status": "in-progress", "priority": "high"},
    ):
        r = await client.post("/api/tasks", json=fields, headers=auth_headers)
        assert r.status_code == 201

    r = await client.get("/api/tasks/stats/summary", headers=auth_headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["totalTasks"] == 3
    assert stats["completionRate"] == 33

    by_status = {row["_id"]: row["count"] for row in stats["statusBreakdown"]}
    assert by_status == {"completed": 1, "pending": 1, "in-progress": 1}

    by_priority = {row["_id"]: row["count"] for row in stats["priorityBreakdown"]}
    assert by_priority == {"high": 2, "medium": 1}


@pytest.mark.asyncio
async def test_completion_rate_rounds_half_up(client, auth_headers):
    """1 of 8 completed is 12.5% → 13."""
    await client.post("/api/tasks", json={"title": "done", "status": "completed"},
                      headers=auth_headers)
    for i in range(7):
        await client.post("/api/tasks", json={"title": f"open {i}"}, headers=auth_headers)

    r = await client.get("/api/tasks/stats/summary", headers=auth_headers)
    assert r.json()["totalTasks"] == 8
    assert r.json()["completionRate"] == 13


@pytest.mark.asyncio
async def test_register_create_complete_scenario(client):
    """register → create → complete → stats shows 100%."""
    r = await client.post(
        "/api/auth/register",
        json={"username": "john", "email": "john@example.com", "password": "password"},
    )
    assert r.status_code == 201
    headers = {"Authorization": f"Bearer {r.json()['token']}"}

    r = await client.post("/api/tasks", json={"title": "Test"}, headers=headers)
    assert r.status_code == 201
    task = r.json()
    assert task["status"] == "pending"
    assert task["priority"] == "medium"

    r = await client.put(
        f"/api/tasks/{task['_id']}", json={"status": "completed"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["status"] == "completed"

    r = await client.get("/api/tasks/stats/summary", headers=headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["totalTasks"] == 1
    assert stats["completionRate"] == 100
    assert stats["statusBreakdown"] == [{"_id": "completed", "count": 1}]
