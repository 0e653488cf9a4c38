# tests/conftest.py

import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

import pytest

from app.bridge.config import resolve_bridge_config
from app.bridge.http import ApiResult
from app.bridge.models import RecipientRecord, TransferSnapshot
from services import metrics
from settings import Settings


# ---------------------------
# Config
# ---------------------------

def make_settings(**env: Any) -> Settings:
    # never read the developer's .env inside tests
    return Settings(_env_file=None, **env)


def make_cfg(**env: Any):
    return resolve_bridge_config(make_settings(**env))


BASE_ENV = {
    "SEND_BRIDGE_PAYOUT_API_KEY": "sk-test",
    "SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID": "pf_1",
    "SEND_BRIDGE_SOURCE_FROM_ADDRESS": "0xtreasury",
}


@pytest.fixture
def cfg_factory():
    def _factory(**overrides: Any):
        env = dict(BASE_ENV)
        env.update(overrides)
        return make_cfg(**env)

    return _factory


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


# ---------------------------
# Fakes
# ---------------------------

class FakeBridgeHttp:
    """
    Stands in for BridgeHttpClient. Responses are scripted per (METHOD, path);
    a list is consumed in order, a single ApiResult is returned every time.
    Unscripted calls answer 404.
    """

    def __init__(self, responses: Optional[Dict[Tuple[str, str], Any]] = None):
        self.responses: Dict[Tuple[str, str], Any] = dict(responses or {})
        self.calls: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def on(self, method: str, path: str, result: Any) -> "FakeBridgeHttp":
        self.responses[(method.upper(), path)] = result
        return self

    def request(self, path, method="GET", *, body=None, headers=None, params=None, timeout_s=None):
        method = method.upper()
        with self._lock:
            self.calls.append(
                {
                    "path": path,
                    "method": method,
                    "body": body,
                    "headers": dict(headers or {}),
                    "params": dict(params or {}),
                    "timeout_s": timeout_s,
                }
            )
            scripted = self.responses.get((method, path))
            if isinstance(scripted, list):
                scripted = scripted.pop(0) if scripted else None

        if scripted is None:
            return ApiResult(ok=False, status=404, message="Not found")
        return scripted

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [c["path"] for c in self.calls if method is None or c["method"] == method.upper()]

    def close(self) -> None:
        pass


class InMemoryRecipientStore:
    def __init__(self, records: Optional[List[RecipientRecord]] = None):
        self.records: Dict[Tuple[str, str], RecipientRecord] = {}
        self.writes: List[RecipientRecord] = []
        for r in records or []:
            self.records[(r.contact_hash, r.hint_hash)] = r

    def get_recipient_by_hashes(self, contact_hash: str, hint_hash: str) -> Optional[RecipientRecord]:
        return self.records.get((contact_hash, hint_hash))

    def upsert_recipient(self, record: RecipientRecord) -> None:
        key = (record.contact_hash, record.hint_hash)
        existing = self.records.get(key)
        if existing is not None:
            # same URL semantics as the SQL upsert
            record = replace(
                record,
                last_onboarding_url=record.last_onboarding_url or existing.last_onboarding_url,
                last_kyc_url=record.last_kyc_url or existing.last_kyc_url,
                last_tos_url=record.last_tos_url or existing.last_tos_url,
            )
        self.records[key] = record
        self.writes.append(record)


def ok(data: Any = None, status: int = 200) -> ApiResult:
    return ApiResult(ok=True, status=status, data=data)


def err(status: int, message: str = "failed", data: Any = None, transport_error: bool = False) -> ApiResult:
    return ApiResult(ok=False, status=status, data=data, message=message, transport_error=transport_error)


@pytest.fixture
def fake_http() -> FakeBridgeHttp:
    return FakeBridgeHttp()


@pytest.fixture
def store() -> InMemoryRecipientStore:
    return InMemoryRecipientStore()


@pytest.fixture
def transfer() -> TransferSnapshot:
    return TransferSnapshot(
        id=42,
        transfer_id="0xabc123",
        sender_wallet="0xsender",
        principal_usdc="1500000",
        sponsor_fee_usdc="25000",
        total_locked_usdc="1525000",
        region="US",
        chain_id=8453,
        expires_at="2026-10-25T00:00:00+00:00",
        recipient_contact_hash="contact-hash",
        recipient_hint_hash="hint-hash",
    )
