import logging

import pytest

from app.bridge.validate import missing_bridge_config, validate_bridge_startup
from tests.conftest import make_cfg


def test_missing_config_lists_env_keys():
    cfg = make_cfg(
        SEND_BRIDGE_PAYOUT_ENABLED_REGIONS=" , ",
        SEND_BRIDGE_SOURCE_PAYMENT_RAIL="bridge_wallet",
        SEND_BRIDGE_REQUIRE_RECIPIENT_ONBOARDING="true",
    )

    assert missing_bridge_config(cfg) == [
        "SEND_BRIDGE_PAYOUT_API_KEY",
        "SEND_BRIDGE_PAYOUT_ENABLED_REGIONS",
        "SEND_BRIDGE_SOURCE_BRIDGE_WALLET_ID",
        "SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID",
        "SEND_BRIDGE_ONBOARDING_REDIRECT_URI",
    ]


def test_override_json_satisfies_templates():
    cfg = make_cfg(
        SEND_BRIDGE_PAYOUT_API_KEY="sk",
        SEND_BRIDGE_TRANSFER_DESTINATION_JSON='{"payment_rail": "ach", "currency": "usd"}',
    )
    assert missing_bridge_config(cfg) == []


def test_lenient_mode_only_logs(caplog):
    caplog.set_level(logging.INFO, logger="offramp")
    missing = validate_bridge_startup(make_cfg())

    assert "SEND_BRIDGE_PAYOUT_API_KEY" in missing
    assert "bridge startup check" in caplog.text


def test_strict_mode_raises():
    cfg = make_cfg(BRIDGE_STRICT_STARTUP_VALIDATION=True)

    with pytest.raises(RuntimeError) as exc:
        validate_bridge_startup(cfg)
    assert "SEND_BRIDGE_PAYOUT_API_KEY" in str(exc.value)


def test_strict_mode_passes_when_configured():
    cfg = make_cfg(
        BRIDGE_STRICT_STARTUP_VALIDATION=True,
        SEND_BRIDGE_PAYOUT_API_KEY="sk",
        SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID="pf_1",
    )
    assert validate_bridge_startup(cfg) == []
