from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from uuid import UUID

from mentor_buddy.repos import store
from mentor_buddy.services import enrollment_service
from tests.conftest import GITHUB, auth, make_buddy, make_manager, make_mentor, seed_curriculum


def _submit(client, buddy, buddy_user, index: int = 0) -> dict:
    assignment = enrollment_service.list_assignments(buddy.id)[index].assignment
    r = client.post(
        f"/api/task-assignments/{assignment.id}/submit",
        json={"description": "Done", "resources": [GITHUB]},
        headers=auth(buddy_user),
    )
    assert r.status_code == 201
    return r.json()


def _age(submission_id: str, days: int) -> None:
    submission = store.submission_repo.get(UUID(submission_id))
    store.submission_repo.update(
        replace(submission, submitted_at=submission.submitted_at - timedelta(days=days))
    )


def test_review_queue_buckets(client) -> None:
    mentor, mentor_user = make_mentor()
    seed_curriculum(weeks=2)
    ana, ana_user = make_buddy(email="ana@example.com", name="Ana", mentor=mentor)
    ben, ben_user = make_buddy(email="ben@example.com", name="Ben", mentor=mentor)

    old = _submit(client, ana, ana_user)
    _age(old["id"], 5)
    fresh = _submit(client, ben, ben_user)

    r = client.get(f"/api/mentors/{mentor.id}/review-queue", headers=auth(mentor_user))
    assert r.status_code == 200
    body = r.json()
    assert [i["submissionId"] for i in body["all"]] == [old["id"], fresh["id"]]
    assert [i["buddyName"] for i in body["urgent"]] == ["Ana"]
    assert body["urgent"][0]["daysWaiting"] == 5
    assert [i["submissionId"] for i in body["recent"]] == [fresh["id"]]
    assert body["all"][1]["taskTitle"] == "Task 1.1"
    assert body["all"][1]["weekTitle"] == "Week 1"
    assert body["all"][1]["resourceCount"] == 1

    r = client.get(
        f"/api/mentors/{mentor.id}/review-queue",
        params={"sortBy": "newest", "buddyId": str(ana.id)},
        headers=auth(mentor_user),
    )
    assert [i["submissionId"] for i in r.json()["all"]] == [old["id"]]

    r = client.get(
        f"/api/mentors/{mentor.id}/review-queue",
        params={"weekNumber": 2},
        headers=auth(mentor_user),
    )
    assert r.json()["all"] == []


def test_review_queue_rejects_bad_sort(client) -> None:
    mentor, mentor_user = make_mentor()
    r = client.get(
        f"/api/mentors/{mentor.id}/review-queue",
        params={"sortBy": "random"},
        headers=auth(mentor_user),
    )
    assert r.status_code == 422


def test_review_queue_access(client) -> None:
    mentor, _ = make_mentor()
    _, other_user = make_mentor(email="other@example.com", name="Olga Other")
    _, buddy_user = make_buddy(mentor=mentor)
    url = f"/api/mentors/{mentor.id}/review-queue"

    assert client.get(url, headers=auth(other_user)).status_code == 403
    assert client.get(url, headers=auth(buddy_user)).status_code == 403
    manager = auth(make_manager())
    assert client.get(url, headers=manager).status_code == 200
    missing = "00000000-0000-0000-0000-000000000000"
    r = client.get(f"/api/mentors/{missing}/review-queue", headers=manager)
    assert r.status_code == 404


def test_mentor_dashboard(client) -> None:
    mentor, mentor_user = make_mentor()
    seed_curriculum(weeks=2)
    buddy, buddy_user = make_buddy(mentor=mentor)
    make_buddy(email="idle@example.com", name="Ida Idle", mentor=mentor)
    sub = _submit(client, buddy, buddy_user)
    _age(sub["id"], 3)

    r = client.get(f"/api/mentors/{mentor.id}/dashboard", headers=auth(mentor_user))
    assert r.status_code == 200
    body = r.json()
    assert body["totalBuddies"] == 2
    assert body["activeBuddies"] == 2
    assert body["pendingReviews"] == 1
    assert body["urgentReviews"] == 1
    assert [s["id"] for s in body["recentSubmissions"]] == [sub["id"]]
    progress = {row["buddyName"]: row for row in body["buddyProgress"]}
    assert progress["Bea Buddy"]["currentWeek"] == 1
    assert progress["Ida Idle"]["progress"] == 0
