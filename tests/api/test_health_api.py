from __future__ import annotations

from fastapi.testclient import TestClient

from mentor_buddy.db import engine as db_engine
from mentor_buddy.db import redis as db_redis


def test_health_without_backing_services(client: TestClient) -> None:
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["checks"] == {"database": "not_configured", "redis": "not_configured"}
    assert "timestamp" in body


def test_health_needs_no_token(client: TestClient) -> None:
    r = client.get("/api/health", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 200


def test_metrics_exposition(client: TestClient) -> None:
    client.get("/api/health")
    r = client.get("/metrics")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")


class _DownRedis:
    async def ping(self) -> None:
        raise ConnectionError("connection refused")


def test_health_reports_degraded_backing_service(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(db_redis, "redis_pool", _DownRedis())
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "degraded"
    assert body["checks"] == {"database": "not_configured", "redis": "degraded"}


def test_health_reports_reachable_database(client: TestClient, monkeypatch) -> None:
    async def ok() -> None:
        return None

    monkeypatch.setattr(db_engine, "engine", object())
    monkeypatch.setattr(db_engine, "ping_database", ok)
    body = client.get("/api/health").json()
    assert body["checks"]["database"] == "ok"
    assert body["status"] == "ok"
