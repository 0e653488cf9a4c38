# app/bridge/status.py
from __future__ import annotations

from typing import Any

from app.bridge.models import DispatchStatus

_SUCCESS = {"SUCCEEDED", "COMPLETED", "SETTLED", "PAYMENT_PROCESSED"}
_PROCESSING = {
    "PENDING",
    "PROCESSING",
    "QUEUED",
    "IN_PROGRESS",
    "AWAITING_FUNDS",
    "AWAITING_PAYMENT",
    "SUBMITTED",
}
_FAILED = {"ERROR", "REJECTED", "FAILED", "CANCELED", "CANCELLED", "EXPIRED", "RETURNED"}


def map_bridge_state(value: Any) -> DispatchStatus:
    """
    Map a Bridge transfer state to the internal dispatch status.

    Unknown states stay PROCESSING so they are re-polled, never read as
    settled or failed.
    """
    raw = value.strip().upper() if isinstance(value, str) else ""

    if raw in DispatchStatus.__members__:
        return DispatchStatus(raw)
    if raw in _SUCCESS:
        return DispatchStatus.SUCCESS
    if raw in _PROCESSING:
        return DispatchStatus.PROCESSING
    if raw in _FAILED:
        return DispatchStatus.FAILED
    return DispatchStatus.PROCESSING
