from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from mentor_buddy.api import cron
from mentor_buddy.services import keep_alive_service


@pytest.fixture
def secret(monkeypatch) -> str:
    value = "s3cret"
    monkeypatch.setattr(
        cron,
        "SETTINGS",
        replace(cron.SETTINGS, cron_secret=value, backend_url="https://api.example.com"),
    )
    return value


@pytest.fixture
def pings(monkeypatch) -> list[str]:
    calls: list[str] = []

    async def fake_ping(url: str) -> dict:
        calls.append(url)
        return {"success": True, "message": "Backend is alive", "status": 200}

    monkeypatch.setattr(keep_alive_service, "ping_backend", fake_ping)
    return calls


def test_keep_alive_rejects_missing_or_wrong_secret(client: TestClient, secret, pings) -> None:
    r = client.get("/api/cron/keep-alive")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}

    r = client.get("/api/cron/keep-alive", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert pings == []


def test_keep_alive_pings_backend(client: TestClient, secret, pings) -> None:
    r = client.get("/api/cron/keep-alive", headers={"Authorization": f"Bearer {secret}"})
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert pings == ["https://api.example.com"]


def test_keep_alive_disabled_without_configured_secret(
    client: TestClient, monkeypatch, pings
) -> None:
    monkeypatch.setattr(cron, "SETTINGS", replace(cron.SETTINGS, cron_secret=None))
    r = client.get("/api/cron/keep-alive", headers={"Authorization": "Bearer "})
    assert r.status_code == 401


def test_keep_alive_answers_200_for_malformed_backend_url(
    client: TestClient, monkeypatch
) -> None:
    monkeypatch.setattr(
        cron,
        "SETTINGS",
        replace(cron.SETTINGS, cron_secret="s3cret", backend_url="http://[::1"),
    )
    r = client.get("/api/cron/keep-alive", headers={"Authorization": "Bearer s3cret"})
    assert r.status_code == 200
    assert r.json()["success"] is False
    assert r.json()["message"] == "Failed to reach backend"
