from __future__ import annotations

from datetime import timedelta

from fastapi.testclient import TestClient

from mentor_buddy.models.common import utcnow
from tests.conftest import auth, make_buddy, make_manager, make_mentor


def _create(client: TestClient, user, buddy, **extra):
    body = {"title": "Build a todo app", "buddyId": str(buddy.id)}
    body.update(extra)
    return client.post("/api/tasks", headers=auth(user), json=body)


def test_mentor_creates_task_for_buddy(client: TestClient) -> None:
    mentor, mentor_user = make_mentor()
    buddy, _ = make_buddy(mentor=mentor)

    resp = _create(client, mentor_user, buddy, priority="high")
    assert resp.status_code == 201
    task = resp.json()
    assert task["mentorId"] == str(mentor.id)
    assert task["priority"] == "high"
    assert task["status"] == "pending"
    assert task["createdBy"] == str(mentor_user.id)


def test_create_task_errors(client: TestClient) -> None:
    manager = make_manager()
    _mentor, mentor_user = make_mentor()
    buddy, buddy_user = make_buddy()

    assert _create(client, buddy_user, buddy).status_code == 403
    assert _create(client, manager, buddy).status_code == 422
    assert _create(client, mentor_user, buddy, priority="urgent").status_code == 422


def test_buddy_sees_only_own_tasks(client: TestClient) -> None:
    mentor, mentor_user = make_mentor()
    buddy, buddy_user = make_buddy(mentor=mentor)
    other, other_user = make_buddy(email="other@example.com", mentor=mentor)
    mine = _create(client, mentor_user, buddy).json()
    _create(client, mentor_user, other, title="Other work")

    listed = client.get("/api/tasks", headers=auth(buddy_user)).json()
    assert [t["id"] for t in listed] == [mine["id"]]
    # a buddyId filter cannot widen a buddy's view
    widened = client.get(f"/api/tasks?buddyId={other.id}", headers=auth(buddy_user)).json()
    assert [t["id"] for t in widened] == [mine["id"]]

    assert client.get(f"/api/tasks/{mine['id']}", headers=auth(other_user)).status_code == 403
    assert len(client.get("/api/tasks", headers=auth(mentor_user)).json()) == 2


def test_status_update_by_buddy_and_edit_rules(client: TestClient) -> None:
    mentor, mentor_user = make_mentor()
    buddy, buddy_user = make_buddy(mentor=mentor)
    task = _create(client, mentor_user, buddy).json()
    url = f"/api/tasks/{task['id']}"

    done = client.patch(url, headers=auth(buddy_user), json={"status": "completed"})
    assert done.status_code == 200
    assert done.json()["completedAt"] is not None

    assert client.patch(url, headers=auth(buddy_user), json={"title": "Mine"}).status_code == 403
    assert client.delete(url, headers=auth(buddy_user)).status_code == 403

    edited = client.patch(url, headers=auth(mentor_user), json={"title": "Todo app v2"})
    assert edited.json()["title"] == "Todo app v2"
    assert client.delete(url, headers=auth(mentor_user)).status_code == 204
    assert client.get(url, headers=auth(mentor_user)).status_code == 404


def test_overdue_tasks_surface_on_read(client: TestClient) -> None:
    mentor, mentor_user = make_mentor()
    buddy, _ = make_buddy(mentor=mentor)
    due = (utcnow() - timedelta(days=1)).isoformat()
    task = _create(client, mentor_user, buddy, dueDate=due).json()

    resp = client.get(f"/api/tasks/{task['id']}", headers=auth(mentor_user))
    assert resp.json()["status"] == "overdue"
    overdue = client.get("/api/tasks?status=overdue", headers=auth(mentor_user)).json()
    assert [t["id"] for t in overdue] == [task["id"]]


def test_buddy_submits_task_work(client: TestClient) -> None:
    mentor, mentor_user = make_mentor()
    buddy, buddy_user = make_buddy(mentor=mentor)
    task = _create(client, mentor_user, buddy).json()

    resp = client.post(
        "/api/submissions",
        headers=auth(buddy_user),
        json={"taskId": task["id"], "githubLink": "https://github.com/bea/todo"},
    )
    assert resp.status_code == 201
    assert resp.json()["buddyId"] == str(buddy.id)

    denied = client.post(
        "/api/submissions", headers=auth(mentor_user), json={"taskId": task["id"]}
    )
    assert denied.status_code == 403

    history = client.get(f"/api/tasks/{task['id']}/submissions", headers=auth(buddy_user))
    assert [s["githubLink"] for s in history.json()] == ["https://github.com/bea/todo"]


def test_buddy_tasks_endpoint(client: TestClient) -> None:
    mentor, mentor_user = make_mentor()
    buddy, buddy_user = make_buddy(mentor=mentor)
    _create(client, mentor_user, buddy)
    resp = client.get(f"/api/buddies/{buddy.id}/tasks", headers=auth(buddy_user))
    assert resp.status_code == 200
    assert len(resp.json()) == 1
