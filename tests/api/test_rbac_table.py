"""Table-driven RBAC tests.

Each row describes: endpoint, method, role, expected HTTP status.  Bodies
are deliberately minimal; rows that expect 2xx or 4xx-after-auth only need
the guard to let the caller through.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth, make_buddy, make_manager, make_mentor

_MENTOR_BODY = {"name": "New Mentor", "email": "new-mentor@example.com"}
_BUDDY_BODY = {"name": "New Buddy", "email": "new-buddy@example.com"}
_CURRICULUM_BODY = {"name": "QA Track", "domainRole": "qa", "totalWeeks": 2}
_RESOURCE_BODY = {"title": "Docs", "url": "https://docs.example.com"}
_TOPIC_BODY = {"name": "Flexbox", "category": "css", "domainRole": "frontend"}
_USER_BODY = {"name": "Una User", "email": "una@example.com", "role": "mentor"}

_RBAC_CASES = [
    # (endpoint, method, role, body, expected_status)
    ("/api/users", "GET", "manager", None, 200),
    ("/api/users", "GET", "mentor", None, 403),
    ("/api/users", "GET", "buddy", None, 403),
    ("/api/users", "GET", None, None, 401),
    ("/api/users", "POST", "manager", _USER_BODY, 201),
    ("/api/users", "POST", "mentor", _USER_BODY, 403),
    ("/api/mentors", "GET", "manager", None, 200),
    ("/api/mentors", "GET", "mentor", None, 200),
    ("/api/mentors", "GET", "buddy", None, 403),
    ("/api/mentors", "POST", "manager", _MENTOR_BODY, 201),
    ("/api/mentors", "POST", "mentor", _MENTOR_BODY, 403),
    ("/api/mentors", "POST", None, _MENTOR_BODY, 401),
    ("/api/buddies", "GET", "mentor", None, 200),
    ("/api/buddies", "GET", "buddy", None, 403),
    ("/api/buddies", "POST", "manager", _BUDDY_BODY, 201),
    ("/api/buddies", "POST", "mentor", _BUDDY_BODY, 403),
    ("/api/buddies", "POST", "buddy", _BUDDY_BODY, 403),
    ("/api/tasks", "GET", "buddy", None, 200),
    ("/api/tasks", "GET", None, None, 401),
    ("/api/resources", "GET", "buddy", None, 200),
    ("/api/resources", "POST", "mentor", _RESOURCE_BODY, 201),
    ("/api/resources", "POST", "buddy", _RESOURCE_BODY, 403),
    ("/api/topics", "GET", "buddy", None, 200),
    ("/api/topics", "POST", "manager", _TOPIC_BODY, 201),
    ("/api/topics", "POST", "mentor", _TOPIC_BODY, 403),
    ("/api/curriculums", "GET", "buddy", None, 200),
    ("/api/curriculums", "GET", None, None, 401),
    ("/api/curriculums", "POST", "manager", _CURRICULUM_BODY, 201),
    ("/api/curriculums", "POST", "mentor", _CURRICULUM_BODY, 403),
    ("/api/curriculums", "POST", "buddy", _CURRICULUM_BODY, 403),
    ("/api/dashboard/stats", "GET", "manager", None, 200),
    ("/api/dashboard/stats", "GET", "mentor", None, 200),
    ("/api/dashboard/stats", "GET", "buddy", None, 403),
    ("/api/dashboard/activity", "GET", "buddy", None, 403),
    ("/api/auth/me", "GET", "buddy", None, 200),
    ("/api/auth/me", "GET", None, None, 401),
    ("/api/settings/export", "GET", "buddy", None, 200),
    ("/api/settings/export", "GET", "mentor", None, 200),
    ("/api/settings/export", "GET", None, None, 401),
]


def _case_id(case: tuple) -> str:
    endpoint, method, role, _body, expected = case
    return f"{method} {endpoint} [{role or 'anon'}] -> {expected}"


def _user_for(role: str | None):
    if role == "manager":
        return make_manager(email="rbac-manager@example.com")
    if role == "mentor":
        return make_mentor(email="rbac-mentor@example.com")[1]
    if role == "buddy":
        return make_buddy(email="rbac-buddy@example.com")[1]
    return None


@pytest.mark.parametrize(
    "endpoint,method,role,body,expected",
    _RBAC_CASES,
    ids=[_case_id(c) for c in _RBAC_CASES],
)
def test_rbac(
    client: TestClient,
    endpoint: str,
    method: str,
    role: str | None,
    body: dict | None,
    expected: int,
) -> None:
    headers = auth(_user_for(role))
    resp = client.request(method, endpoint, headers=headers, json=body)
    assert resp.status_code == expected, resp.text


def test_forbidden_detail_is_generic(client: TestClient) -> None:
    buddy = make_buddy()[1]
    resp = client.get("/api/users", headers=auth(buddy))
    assert resp.json() == {"detail": "Insufficient permissions"}


def test_role_change_applies_to_existing_tokens(client: TestClient) -> None:
    manager = make_manager()
    _mentor, mentor_user = make_mentor()
    headers = auth(mentor_user)
    assert client.get("/api/users", headers=headers).status_code == 403

    resp = client.patch(
        f"/api/users/{mentor_user.id}", headers=auth(manager), json={"role": "manager"}
    )
    assert resp.status_code == 200
    assert client.get("/api/users", headers=headers).status_code == 200
