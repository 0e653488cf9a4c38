from fastapi.testclient import TestClient

from main import create_app
from settings import settings

ADMIN_HEADERS = {"X-Admin-Token": "admin-secret"}


def _client(monkeypatch) -> TestClient:
    monkeypatch.setattr(settings, "ADMIN_API_TOKEN", "admin-secret", raising=False)
    return TestClient(create_app(), raise_server_exceptions=False)


def test_bridge_readiness_admin_only(monkeypatch):
    client = _client(monkeypatch)

    r = client.get("/v1/admin/bridge-readiness")
    assert r.status_code == 401, r.text

    r = client.get("/v1/admin/bridge-readiness", headers={"X-Admin-Token": "nope"})
    assert r.status_code == 403, r.text


def test_bridge_readiness_lists_missing_keys(monkeypatch):
    client = _client(monkeypatch)
    monkeypatch.setattr(settings, "SEND_BRIDGE_PAYOUT_API_KEY", "", raising=False)
    monkeypatch.setattr(settings, "BRIDGE_API_KEY", "", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_TRANSFER_DESTINATION_JSON", "", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_DESTINATION_PAYMENT_RAIL", "prefunded", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID", "", raising=False)

    r = client.get("/v1/admin/bridge-readiness", headers=ADMIN_HEADERS)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["ready"] is False
    assert "SEND_BRIDGE_PAYOUT_API_KEY" in data["missing"]
    assert "SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID" in data["missing"]


def test_bridge_readiness_when_configured(monkeypatch):
    client = _client(monkeypatch)
    monkeypatch.setattr(settings, "SEND_BRIDGE_PAYOUT_API_KEY", "sk-live", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_PAYOUT_ENABLED_REGIONS", "US,CA", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_TRANSFER_SOURCE_JSON", "", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_SOURCE_PAYMENT_RAIL", "ethereum", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID", "pf_1", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_REQUIRE_RECIPIENT_ONBOARDING", "false", raising=False)
    monkeypatch.setattr(settings, "SEND_BRIDGE_RECIPIENT_DEBIT_DESTINATION_PAYMENT_RAIL", "debit_card", raising=False)

    r = client.get("/v1/admin/bridge-readiness", headers=ADMIN_HEADERS)
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["ready"] is True
    assert data["missing"] == []
    assert data["enabled_regions"] == ["CA", "US"]
    assert data["methods"]["DEBIT"]["destination_rail"] == "debit_card"
    assert data["methods"]["DEBIT"]["external_account_rails"] == ["debit_card"]
