# app/bridge/rails.py
from __future__ import annotations

import re
from typing import Any, Iterable

from app.bridge.models import DispatchMethod, ExternalAccountRecord

_NON_TOKEN_RE = re.compile(r"[^a-z0-9]+")

DEBIT_MARKERS = ("debit", "card", "visa", "mastercard", "master_card", "maestro")
BANK_MARKERS = ("ach", "bank", "sepa", "wire", "swift", "fps", "pix")

# Bridge does not expose one canonical rail field; every known shape is probed.
RAIL_FIELDS = (
    "payment_rail",
    "paymentRail",
    "rail",
    "payment_rails",
    "supported_payment_rails",
    "rails",
    "payment_method",
    "paymentMethod",
    "payment_methods",
    "type",
    "account_type",
    "accountType",
    "network",
)

INACTIVE_STATUSES = {"INACTIVE", "DISABLED", "ARCHIVED", "CLOSED", "REMOVED"}


def normalize_rail_token(value: str) -> str:
    return _NON_TOKEN_RE.sub("_", (value or "").strip().lower())


def parse_rail_csv(raw: str | None) -> frozenset[str]:
    if not raw:
        return frozenset()
    return frozenset(t for t in (normalize_rail_token(v) for v in raw.split(",")) if t)


def is_likely_debit_rail(rail: str) -> bool:
    token = normalize_rail_token(rail)
    return any(marker in token for marker in DEBIT_MARKERS)


def is_likely_bank_rail(rail: str) -> bool:
    token = normalize_rail_token(rail)
    return any(marker in token for marker in BANK_MARKERS)


def _collect_tokens(value: Any, target: set[str]) -> None:
    if not value:
        return
    if isinstance(value, str):
        token = normalize_rail_token(value)
        if token:
            target.add(token)
        return
    if isinstance(value, (list, tuple, set)):
        for entry in value:
            _collect_tokens(entry, target)
        return
    if isinstance(value, dict):
        for entry in value.values():
            _collect_tokens(entry, target)


def account_rail_tokens(account: ExternalAccountRecord) -> set[str]:
    tokens: set[str] = set()
    for name in RAIL_FIELDS:
        _collect_tokens(account.get(name), tokens)
    return tokens


def matches(
    account: ExternalAccountRecord,
    method: DispatchMethod,
    expected_rails: Iterable[str] = (),
) -> bool:
    """
    True when the external account can receive a payout for `method`.

    Explicit rail hints win over the lexical heuristics. An account exposing
    no rail data at all is accepted either way.
    """
    account_rails = account_rail_tokens(account)
    if not account_rails:
        return True

    expected = {normalize_rail_token(r) for r in expected_rails if r}
    expected.discard("")
    if expected:
        return not account_rails.isdisjoint(expected)

    looks_right = is_likely_debit_rail if method == DispatchMethod.DEBIT else is_likely_bank_rail
    return any(looks_right(rail) for rail in account_rails)


def is_external_account_active(account: ExternalAccountRecord) -> bool:
    account_id = account.get("id")
    if not isinstance(account_id, str) or not account_id.strip():
        return False
    if account.get("disabled") is True:
        return False

    status = str(account.get("status") or account.get("state") or "").strip().upper()
    if not status:
        return True
    return status not in INACTIVE_STATUSES
