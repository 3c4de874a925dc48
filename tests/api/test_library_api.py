from __future__ import annotations

from fastapi.testclient import TestClient

from mentor_buddy.services import library_service, people_service
from tests.conftest import PASSWORD, auth, make_buddy, make_mentor


def _resource(**overrides) -> dict:
    body = {
        "title": "Flexbox Froggy",
        "url": "https://flexboxfroggy.com",
        "type": "tutorial",
        "category": "css",
        "difficulty": "beginner",
        "author": "Codepip",
        "tags": ["css", "layout"],
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


def test_resource_crud(client: TestClient, manager) -> None:
    h = auth(manager)
    r = client.post("/api/resources", json=_resource(), headers=h)
    assert r.status_code == 201
    created = r.json()
    assert created["tags"] == ["css", "layout"]

    r = client.patch(
        f"/api/resources/{created['id']}", json={"difficulty": "intermediate"}, headers=h
    )
    assert r.status_code == 200
    assert r.json()["difficulty"] == "intermediate"
    assert r.json()["title"] == "Flexbox Froggy"

    assert client.get(f"/api/resources/{created['id']}", headers=h).status_code == 200
    assert client.delete(f"/api/resources/{created['id']}", headers=h).status_code == 204
    assert client.get(f"/api/resources/{created['id']}", headers=h).status_code == 404


def test_resource_filters(client: TestClient, manager) -> None:
    h = auth(manager)
    client.post("/api/resources", json=_resource(), headers=h)
    client.post(
        "/api/resources",
        json=_resource(
            title="React Docs",
            url="https://react.dev",
            type="docs",
            category="react",
            author="Meta",
            tags=["react"],
        ),
        headers=h,
    )

    def titles(**params) -> list[str]:
        r = client.get("/api/resources", params=params, headers=h)
        assert r.status_code == 200
        return [x["title"] for x in r.json()]

    assert titles(type="docs") == ["React Docs"]
    assert titles(category="css") == ["Flexbox Froggy"]
    assert titles(search="meta") == ["React Docs"]
    assert titles(tags="layout") == ["Flexbox Froggy"]
    assert len(titles()) == 2
    assert len(titles(page=1, limit=1)) == 1


def test_resource_permissions(client: TestClient, manager) -> None:
    _, mentor_user = make_mentor()
    _, buddy_user = make_buddy()
    r = client.post("/api/resources", json=_resource(), headers=auth(mentor_user))
    assert r.status_code == 201
    rid = r.json()["id"]

    assert client.get("/api/resources", headers=auth(buddy_user)).status_code == 200
    r = client.post("/api/resources", json=_resource(), headers=auth(buddy_user))
    assert r.status_code == 403
    r = client.patch(f"/api/resources/{rid}", json={"title": "x"}, headers=auth(mentor_user))
    assert r.status_code == 403
    assert client.delete(f"/api/resources/{rid}", headers=auth(mentor_user)).status_code == 403


def test_resource_validation(client: TestClient, manager) -> None:
    r = client.post("/api/resources", json=_resource(title="  "), headers=auth(manager))
    assert r.status_code == 422


# ---------------------------------------------------------------------------
# Topics and checklists
# ---------------------------------------------------------------------------


def test_topic_crud(client: TestClient, manager) -> None:
    h = auth(manager)
    r = client.post(
        "/api/topics",
        json={"name": "Flexbox", "category": "css", "domainRole": "frontend"},
        headers=h,
    )
    assert r.status_code == 201
    topic = r.json()
    client.post("/api/topics", json={"name": "SQL joins", "domainRole": "backend"}, headers=h)

    r = client.get("/api/topics", params={"domainRole": "frontend"}, headers=h)
    assert [t["name"] for t in r.json()] == ["Flexbox"]

    r = client.patch(f"/api/topics/{topic['id']}", json={"name": "Flexbox basics"}, headers=h)
    assert r.json()["name"] == "Flexbox basics"
    assert r.json()["domainRole"] == "frontend"

    r = client.post("/api/topics", json={"name": "x", "domainRole": "chef"}, headers=h)
    assert r.status_code == 422

    assert client.delete(f"/api/topics/{topic['id']}", headers=h).status_code == 204
    assert client.get(f"/api/topics/{topic['id']}", headers=h).status_code == 404


def test_topic_writes_need_permission(client: TestClient) -> None:
    _, mentor_user = make_mentor()
    r = client.post(
        "/api/topics",
        json={"name": "Flexbox", "domainRole": "frontend"},
        headers=auth(mentor_user),
    )
    assert r.status_code == 403


def test_buddy_checklist(client: TestClient) -> None:
    mentor, mentor_user = make_mentor()
    flexbox = library_service.create_topic(name="Flexbox", category="css", domain_role="frontend")
    grid = library_service.create_topic(name="Grid", category="css", domain_role="frontend")
    buddy = people_service.create_buddy(
        name="Bea Buddy",
        email="bea@example.com",
        password=PASSWORD,
        domain_role="frontend",
        assigned_mentor_id=mentor.id,
        topic_ids=[flexbox.id, grid.id],
    )
    buddy_user = people_service.get_user(buddy.user_id)

    r = client.get(f"/api/buddies/{buddy.id}/topics", headers=auth(buddy_user))
    assert r.status_code == 200
    body = r.json()
    assert body["percentage"] == 0
    assert {t["topicName"] for t in body["topics"]} == {"Flexbox", "Grid"}

    first = body["topics"][0]["id"]
    r = client.patch(f"/api/buddy-topics/{first}", json={"checked": True}, headers=auth(buddy_user))
    assert r.status_code == 200
    assert r.json()["checked"] is True
    assert r.json()["completedAt"] is not None

    r = client.get(f"/api/buddies/{buddy.id}/topics", headers=auth(mentor_user))
    assert r.json()["percentage"] == 50

    _, other_user = make_mentor(email="other@example.com", name="Olga Other")
    uncheck = {"checked": False}
    r = client.patch(f"/api/buddy-topics/{first}", json=uncheck, headers=auth(other_user))
    assert r.status_code == 403
    r = client.patch(f"/api/buddy-topics/{first}", json=uncheck, headers=auth(mentor_user))
    assert r.json()["completedAt"] is None


def test_progress_by_catalogue_topic(client: TestClient) -> None:
    mentor, mentor_user = make_mentor()
    flexbox = library_service.create_topic(name="Flexbox", category="css", domain_role="frontend")
    grid = library_service.create_topic(name="Grid", category="css", domain_role="frontend")
    buddy = people_service.create_buddy(
        name="Bea Buddy",
        email="bea@example.com",
        password=PASSWORD,
        domain_role="frontend",
        assigned_mentor_id=mentor.id,
        topic_ids=[flexbox.id],
    )

    url = f"/api/buddies/{buddy.id}/progress/{flexbox.id}"
    r = client.patch(url, json={"checked": True}, headers=auth(mentor_user))
    assert r.status_code == 200
    assert r.json()["topicName"] == "Flexbox"
    assert r.json()["checked"] is True
    r = client.get(f"/api/buddies/{buddy.id}/topics", headers=auth(mentor_user))
    assert r.json()["percentage"] == 100

    # catalogue topic that is not on this buddy's checklist
    r = client.patch(
        f"/api/buddies/{buddy.id}/progress/{grid.id}",
        json={"checked": True},
        headers=auth(mentor_user),
    )
    assert r.status_code == 404

    _, other_user = make_mentor(email="other@example.com", name="Olga Other")
    r = client.patch(url, json={"checked": False}, headers=auth(other_user))
    assert r.status_code == 403


# ---------------------------------------------------------------------------
# Portfolios
# ---------------------------------------------------------------------------


def test_portfolio_lifecycle(client: TestClient, manager) -> None:
    buddy, buddy_user = make_buddy()
    h = auth(buddy_user)
    r = client.post(
        f"/api/buddies/{buddy.id}/portfolio",
        json={
            "title": "Todo app",
            "description": "React + Vite",
            "technologies": ["react", "vite"],
            "links": [{"label": "Repo", "url": "https://github.com/bea/todo", "type": "github"}],
        },
        headers=h,
    )
    assert r.status_code == 201
    portfolio = r.json()
    assert portfolio["links"][0]["type"] == "github"

    r = client.patch(
        f"/api/portfolios/{portfolio['id']}", json={"technologies": ["react"]}, headers=h
    )
    assert r.status_code == 200
    assert r.json()["technologies"] == ["react"]
    assert r.json()["title"] == "Todo app"

    r = client.get(f"/api/buddies/{buddy.id}/portfolios", headers=auth(manager))
    assert [p["title"] for p in r.json()] == ["Todo app"]

    r = client.delete(f"/api/portfolios/{portfolio['id']}", headers=auth(manager))
    assert r.status_code == 204
    assert client.get(f"/api/buddies/{buddy.id}/portfolios", headers=h).json() == []


def test_portfolio_ownership(client: TestClient, manager) -> None:
    buddy, buddy_user = make_buddy()
    _, other_user = make_buddy(email="other@example.com", name="Otto")
    r = client.post(
        f"/api/buddies/{buddy.id}/portfolio", json={"title": "Mine"}, headers=auth(other_user)
    )
    assert r.status_code == 403
    r = client.post(
        f"/api/buddies/{buddy.id}/portfolio", json={"title": " "}, headers=auth(buddy_user)
    )
    assert r.status_code == 422
    r = client.post(
        f"/api/buddies/{buddy.id}/portfolio", json={"title": "Mine"}, headers=auth(manager)
    )
    assert r.status_code == 403
