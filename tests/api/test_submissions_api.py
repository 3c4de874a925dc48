from __future__ import annotations

import pytest

from mentor_buddy.services import enrollment_service
from tests.conftest import GITHUB, auth, make_buddy, make_manager, make_mentor, seed_curriculum


@pytest.fixture
def world():
    mentor, mentor_user = make_mentor()
    seeded = seed_curriculum(weeks=2, tasks_per_week=1, require_github=True)
    buddy, buddy_user = make_buddy(mentor=mentor)
    assignment = enrollment_service.list_assignments(buddy.id)[0].assignment
    return {
        "mentor_user": mentor_user,
        "buddy": buddy,
        "buddy_user": buddy_user,
        "assignment_id": str(assignment.id),
        "seeded": seeded,
    }


def _submit(client, world, description="First pass", resources=None):
    return client.post(
        f"/api/task-assignments/{world['assignment_id']}/submit",
        json={
            "description": description,
            "notes": "see repo",
            "resources": [GITHUB] if resources is None else resources,
        },
        headers=auth(world["buddy_user"]),
    )


def test_assignment_detail_includes_template(client, world) -> None:
    r = client.get(
        f"/api/task-assignments/{world['assignment_id']}", headers=auth(world["buddy_user"])
    )
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "not_started"
    assert body["weekNumber"] == 1
    assert body["taskTemplate"]["title"] == "Task 1.1"


def test_start_then_submit(client, world) -> None:
    r = client.post(
        f"/api/task-assignments/{world['assignment_id']}/start",
        headers=auth(world["buddy_user"]),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "in_progress"

    r = _submit(client, world)
    assert r.status_code == 201
    body = r.json()
    assert body["version"] == 1
    assert body["reviewStatus"] == "pending"
    assert body["resources"][0]["displayOrder"] == 0

    r = client.get(
        f"/api/task-assignments/{world['assignment_id']}", headers=auth(world["buddy_user"])
    )
    assert r.json()["status"] == "submitted"
    assert r.json()["submissionCount"] == 1


def test_submit_errors(client, world) -> None:
    assert _submit(client, world, resources=[]).status_code == 422
    pdf = {"type": "pdf", "label": "Doc", "url": "https://x/doc.pdf"}
    r = _submit(client, world, resources=[pdf])
    assert r.status_code == 422
    assert "github" in r.json()["detail"]

    r = client.post(
        f"/api/task-assignments/{world['assignment_id']}/submit",
        json={"description": "x", "resources": [GITHUB]},
        headers=auth(world["mentor_user"]),
    )
    assert r.status_code == 403

    assert _submit(client, world).status_code == 201
    r = _submit(client, world, description="again")
    assert r.status_code == 409


def test_start_twice_is_conflict(client, world) -> None:
    url = f"/api/task-assignments/{world['assignment_id']}/start"
    assert client.post(url, headers=auth(world["buddy_user"])).status_code == 200
    assert client.post(url, headers=auth(world["buddy_user"])).status_code == 409


def test_revision_cycle_over_http(client, world) -> None:
    first = _submit(client, world).json()
    mentor = auth(world["mentor_user"])

    r = client.post(f"/api/submissions/{first['id']}/start-review", headers=mentor)
    assert r.status_code == 200
    assert r.json()["reviewStatus"] == "under_review"

    r = client.post(
        f"/api/submissions/{first['id']}/request-revision",
        json={"message": "Add tests"},
        headers=mentor,
    )
    assert r.status_code == 200
    assert r.json()["reviewStatus"] == "needs_revision"

    second = _submit(client, world, description="With tests")
    assert second.status_code == 201
    assert second.json()["version"] == 2

    r = client.post(f"/api/submissions/{first['id']}/approve", json={}, headers=mentor)
    assert r.status_code == 409

    r = client.post(
        f"/api/submissions/{second.json()['id']}/approve",
        json={"grade": "A", "message": "Nice"},
        headers=mentor,
    )
    assert r.status_code == 200
    assert r.json()["reviewStatus"] == "approved"
    assert r.json()["grade"] == "A"

    r = client.get(
        f"/api/task-assignments/{world['assignment_id']}/submissions",
        headers=auth(world["buddy_user"]),
    )
    assert [s["version"] for s in r.json()] == [2, 1]

    r = client.get(
        f"/api/task-assignments/{world['assignment_id']}", headers=mentor
    )
    assert r.json()["status"] == "completed"


def test_request_revision_needs_message(client, world) -> None:
    sub = _submit(client, world).json()
    r = client.post(
        f"/api/submissions/{sub['id']}/request-revision",
        json={"message": "  "},
        headers=auth(world["mentor_user"]),
    )
    assert r.status_code == 422


def test_reject_and_grade(client, world) -> None:
    sub = _submit(client, world).json()
    mentor = auth(world["mentor_user"])

    r = client.post(f"/api/submissions/{sub['id']}/grade", json={"grade": "B"}, headers=mentor)
    assert r.status_code == 409

    r = client.post(f"/api/submissions/{sub['id']}/reject", json={}, headers=mentor)
    assert r.status_code == 200
    assert r.json()["reviewStatus"] == "rejected"

    r = client.post(f"/api/submissions/{sub['id']}/grade", json={"grade": "C"}, headers=mentor)
    assert r.status_code == 200
    assert r.json()["grade"] == "C"


def test_other_mentor_cannot_review(client, world) -> None:
    sub = _submit(client, world).json()
    _, stranger = make_mentor(email="other@example.com", name="Olga Other")
    r = client.post(f"/api/submissions/{sub['id']}/approve", json={}, headers=auth(stranger))
    assert r.status_code == 403
    r = client.get(f"/api/submissions/{sub['id']}", headers=auth(stranger))
    assert r.status_code == 403

    manager = make_manager()
    r = client.post(f"/api/submissions/{sub['id']}/approve", json={}, headers=auth(manager))
    assert r.status_code == 200


def test_pending_submission_edit_and_delete(client, world) -> None:
    sub = _submit(client, world).json()
    buddy = auth(world["buddy_user"])

    r = client.patch(
        f"/api/submissions/{sub['id']}", json={"description": "Updated"}, headers=buddy
    )
    assert r.status_code == 200
    assert r.json()["description"] == "Updated"
    assert len(r.json()["resources"]) == 1

    r = client.delete(f"/api/submissions/{sub['id']}", headers=buddy)
    assert r.status_code == 204
    assert client.get(f"/api/submissions/{sub['id']}", headers=buddy).status_code == 404

    r = client.get(f"/api/task-assignments/{world['assignment_id']}", headers=buddy)
    assert r.json()["status"] == "in_progress"


def test_reviewed_submission_is_read_only(client, world) -> None:
    sub = _submit(client, world).json()
    client.post(
        f"/api/submissions/{sub['id']}/approve", json={}, headers=auth(world["mentor_user"])
    )
    buddy = auth(world["buddy_user"])
    r = client.patch(f"/api/submissions/{sub['id']}", json={"description": "x"}, headers=buddy)
    assert r.status_code == 409
    assert client.delete(f"/api/submissions/{sub['id']}", headers=buddy).status_code == 409


def test_feedback_threads(client, world) -> None:
    sub = _submit(client, world).json()
    mentor = auth(world["mentor_user"])
    buddy = auth(world["buddy_user"])

    r = client.post(
        f"/api/submissions/{sub['id']}/feedback",
        json={"message": "Why a class here?", "feedbackType": "question"},
        headers=mentor,
    )
    assert r.status_code == 201
    root = r.json()
    assert root["authorRole"] == "mentor"

    r = client.post(
        f"/api/submissions/{sub['id']}/feedback",
        json={"message": "State lives there", "parentFeedbackId": root["id"]},
        headers=buddy,
    )
    assert r.status_code == 201
    reply = r.json()
    assert reply["feedbackType"] == "reply"

    r = client.post(
        f"/api/submissions/{sub['id']}/feedback",
        json={"message": "Makes sense", "parentFeedbackId": reply["id"]},
        headers=mentor,
    )
    assert r.json()["parentFeedbackId"] == root["id"]

    r = client.get(f"/api/submissions/{sub['id']}/feedback", headers=buddy)
    assert r.status_code == 200
    threads = r.json()
    assert len(threads) == 1
    assert [f["message"] for f in threads[0]["replies"]] == ["State lives there", "Makes sense"]


def test_feedback_validation(client, world) -> None:
    sub = _submit(client, world).json()
    mentor = auth(world["mentor_user"])
    url = f"/api/submissions/{sub['id']}/feedback"
    assert client.post(url, json={"message": " "}, headers=mentor).status_code == 422
    r = client.post(url, json={"message": "hi", "feedbackType": "rant"}, headers=mentor)
    assert r.status_code == 422
    r = client.post(
        url,
        json={"message": "hi", "parentFeedbackId": world["assignment_id"]},
        headers=mentor,
    )
    assert r.status_code == 404


def test_feedback_edit_and_delete_rules(client, world) -> None:
    sub = _submit(client, world).json()
    mentor = auth(world["mentor_user"])
    buddy = auth(world["buddy_user"])
    root = client.post(
        f"/api/submissions/{sub['id']}/feedback", json={"message": "Looks good"}, headers=mentor
    ).json()

    r = client.patch(f"/api/feedback/{root['id']}", json={"message": "edited"}, headers=buddy)
    assert r.status_code == 403
    r = client.patch(f"/api/feedback/{root['id']}", json={"message": "edited"}, headers=mentor)
    assert r.status_code == 200
    assert r.json()["message"] == "edited"

    assert client.delete(f"/api/feedback/{root['id']}", headers=buddy).status_code == 403
    manager = auth(make_manager())
    assert client.delete(f"/api/feedback/{root['id']}", headers=manager).status_code == 204
    r = client.get(f"/api/submissions/{sub['id']}/feedback", headers=mentor)
    assert r.json() == []


def test_review_message_is_recorded_as_feedback(client, world) -> None:
    sub = _submit(client, world).json()
    mentor = auth(world["mentor_user"])
    client.post(
        f"/api/submissions/{sub['id']}/request-revision",
        json={"message": "Split the component"},
        headers=mentor,
    )
    r = client.get(f"/api/submissions/{sub['id']}/feedback", headers=mentor)
    assert [(f["feedbackType"], f["message"]) for f in r.json()] == [
        ("revision_request", "Split the component")
    ]


def test_unknown_ids_are_404(client, world) -> None:
    buddy = auth(world["buddy_user"])
    missing = "00000000-0000-0000-0000-000000000000"
    assert client.get(f"/api/task-assignments/{missing}", headers=buddy).status_code == 404
    assert client.get(f"/api/submissions/{missing}", headers=buddy).status_code == 404
    r = client.patch(f"/api/feedback/{missing}", json={"message": "x"}, headers=buddy)
    assert r.status_code == 404


def test_requires_authentication(client, world) -> None:
    r = client.get(f"/api/task-assignments/{world['assignment_id']}")
    assert r.status_code == 401
