from __future__ import annotations

from fastapi.testclient import TestClient

from orbit.main import app


def test_health_endpoint() -> None:
    assert TestClient(app).get("/healthz").json() == {"status": "ok"}


def test_database_health_endpoint_success(store_db) -> None:
    client = TestClient(app)
    client.post("/api/log", json={"date": "2026-10-18", "log": {}})

    response = client.get("/healthz/database")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["logs"] == 1
    assert "pool" in payload


def test_database_health_endpoint_failure(monkeypatch) -> None:
    client = TestClient(app)

    def raise_runtime_error():
        raise RuntimeError("missing database url")

    monkeypatch.setattr("orbit.main.get_engine", raise_runtime_error)
    response = client.get("/healthz/database")
    assert response.status_code == 503
    assert response.json()["detail"] == "missing database url"
