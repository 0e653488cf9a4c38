import pytest

from app.bridge.models import DispatchStatus
from app.bridge.status import map_bridge_state


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("SUCCESS", DispatchStatus.SUCCESS),
        ("FALLBACK_REQUIRED", DispatchStatus.FALLBACK_REQUIRED),
        ("completed", DispatchStatus.SUCCESS),
        ("payment_processed", DispatchStatus.SUCCESS),
        ("Settled", DispatchStatus.SUCCESS),
        ("awaiting_funds", DispatchStatus.PROCESSING),
        ("in_progress", DispatchStatus.PROCESSING),
        ("PROCESSING", DispatchStatus.PROCESSING),
        ("returned", DispatchStatus.FAILED),
        ("canceled", DispatchStatus.FAILED),
        ("FAILED", DispatchStatus.FAILED),
    ],
)
def test_known_states(raw, expected):
    assert map_bridge_state(raw) == expected


@pytest.mark.parametrize("raw", ["funds_received_maybe", "", None, 42, {"state": "completed"}])
def test_unknown_states_stay_processing(raw):
    assert map_bridge_state(raw) == DispatchStatus.PROCESSING
