#!/usr/bin/env python3
"""
TaskTrack Quickstart — full task lifecycle in one script.

Registers a user → creates tasks → filters and sorts → completes one →
reads the stats summary → cleans up.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:5001
"""

from _common import create_client


def main():
    client = create_client()

    # ── Create tasks ──────────────────────────────────────────────
    print("\n1. Creating tasks...")
    seeds = [
        {"title": "Write quarterly report", "priority": "high", "dueDate": "2030-03-31T17:00:00Z"},
        {"title": "Book dentist appointment", "priority": "low"},
        {"title": "Review pull requests", "status": "in-progress"},
    ]
    tasks = []
    for seed in seeds:
        resp = client.post("/tasks", json=seed)
        assert resp.status_code == 201, f"Failed: {resp.text}"
        task = resp.json()
        tasks.append(task)
        print(f"   [{task['status']:<11}] {task['priority']:<6} {task['title']}")

    # ── Filter and sort ───────────────────────────────────────────
    print("\n2. Pending tasks, most urgent first:")
    resp = client.get("/tasks", params={"status": "pending", "sortBy": "priority", "sortOrder": "desc"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    for task in resp.json():
        print(f"   {task['priority']:<6} {task['title']}")

    # ── Complete one ──────────────────────────────────────────────
    report = tasks[0]
    print(f"\n3. Completing '{report['title']}'...")
    resp = client.put(f"/tasks/{report['_id']}", json={"status": "completed"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   → {resp.json()['status']}")

    # ── Clear a due date ──────────────────────────────────────────
    print("\n4. Clearing its due date (explicit null)...")
    resp = client.put(f"/tasks/{report['_id']}", json={"dueDate": None})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   dueDate: {resp.json()['dueDate']}")

    # ── Stats ─────────────────────────────────────────────────────
    print("\n5. Stats summary:")
    stats = client.get("/tasks/stats/summary").json()
    print(f"   Total:      {stats['totalTasks']}")
    print(f"   Completion: {stats['completionRate']}%")
    for entry in stats["statusBreakdown"]:
        print(f"   status   {entry['_id']:<11} {entry['count']}")
    for entry in stats["priorityBreakdown"]:
        print(f"   priority {entry['_id']:<11} {entry['count']}")

    # ── Clean up ──────────────────────────────────────────────────
    print("\n6. Deleting tasks...")
    for task in tasks:
        resp = client.delete(f"/tasks/{task['_id']}")
        assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   {len(tasks)} tasks deleted.")

    print("\n✓ Quickstart finished.")


if __name__ == "__main__":
    main()
