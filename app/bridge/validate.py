# app/bridge/validate.py
from __future__ import annotations

import logging
from typing import Optional

from app.bridge.config import BridgeConfig, resolve_bridge_config

logger = logging.getLogger("offramp")


def missing_bridge_config(cfg: BridgeConfig) -> list[str]:
    """Env keys an operator still has to set before payouts can execute."""
    missing: list[str] = []

    if not cfg.api_key:
        missing.append("SEND_BRIDGE_PAYOUT_API_KEY")

    if not cfg.enabled_regions:
        missing.append("SEND_BRIDGE_PAYOUT_ENABLED_REGIONS")

    src = cfg.source
    if src.override is None and src.payment_rail == "bridge_wallet" and not src.bridge_wallet_id:
        missing.append("SEND_BRIDGE_SOURCE_BRIDGE_WALLET_ID")

    dst = cfg.destination
    if dst.override is None and dst.payment_rail == "prefunded" and not dst.prefunded_account_id:
        missing.append("SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID")

    if cfg.require_recipient_onboarding and not cfg.onboarding_redirect_uri:
        missing.append("SEND_BRIDGE_ONBOARDING_REDIRECT_URI")

    return missing


def validate_bridge_startup(cfg: Optional[BridgeConfig] = None) -> list[str]:
    cfg = cfg or resolve_bridge_config()
    missing = missing_bridge_config(cfg)

    logger.info(
        "bridge startup check: strict=%s regions=%s onboarding=%s debit_rail=%s missing=%s",
        cfg.strict_startup_validation,
        ",".join(sorted(cfg.enabled_regions)) or "<none>",
        cfg.require_recipient_onboarding,
        cfg.debit.destination_rail or "<none>",
        ",".join(missing) or "<none>",
    )

    if missing and cfg.strict_startup_validation:
        raise RuntimeError(
            "Bridge startup validation failed. Missing required env vars: " + ", ".join(missing)
        )
    return missing
