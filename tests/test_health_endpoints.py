from fastapi.testclient import TestClient

import main
from main import create_app
from settings import settings


def _client() -> TestClient:
    return TestClient(create_app(), raise_server_exceptions=False)


def test_health(monkeypatch):
    monkeypatch.setattr(settings, "ENV", "staging", raising=False)

    r = _client().get("/health")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["ok"] is True
    assert data["env"] == "staging"
    assert data["version"] == settings.APP_VERSION


def test_healthz_reports_missing_database(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", "", raising=False)

    r = _client().get("/healthz")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["ok"] is True
    assert data["db_ok"] is False
    assert data["db_error"] == "DATABASE_URL is not set"


def test_request_id_is_echoed():
    r = _client().get("/health", headers={"X-Request-Id": "req-123"})
    assert r.headers["X-Request-Id"] == "req-123"


def test_lifespan_validates_on_startup_and_cleans_up_on_shutdown(monkeypatch):
    events = []
    monkeypatch.setattr(main, "validate_bridge_startup", lambda: events.append("validate"))
    monkeypatch.setattr(main, "reset_bridge_payout_service", lambda: events.append("reset_service"))
    monkeypatch.setattr(main, "close_pool", lambda: events.append("close_pool"))

    with TestClient(create_app()) as client:
        assert events == ["validate"]
        r = client.get("/health")
        assert r.status_code == 200

    assert events == ["validate", "reset_service", "close_pool"]
