# app/bridge/config.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from app.bridge.models import DispatchMethod
from app.bridge.rails import is_likely_debit_rail, normalize_rail_token, parse_rail_csv
from settings import Settings, settings as default_settings

DEFAULT_API_BASE_URL = "https://api.bridge.xyz/v0"
DEFAULT_TIMEOUT_MS = 15000
DEFAULT_LOOKUP_LIMIT = 10
DEFAULT_FULL_NAME = "Recipient User"


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _parse_positive_int(raw: Optional[str], fallback: int) -> int:
    try:
        parsed = int(_clean(raw))
    except ValueError:
        return fallback
    return parsed if parsed > 0 else fallback


def _parse_bool(raw: Optional[str], fallback: bool) -> bool:
    value = _clean(raw).lower()
    if not value:
        return fallback
    return value == "true"


def _parse_json_object(raw: Optional[str]) -> Optional[dict[str, Any]]:
    value = _clean(raw)
    if not value:
        return None
    try:
        parsed = json.loads(value)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _parse_regions(raw: Optional[str]) -> frozenset[str]:
    return frozenset(v.strip().upper() for v in (raw or "").split(",") if v.strip())


def _api_base_url(raw: Optional[str]) -> str:
    base = (_clean(raw) or DEFAULT_API_BASE_URL).rstrip("/")
    if base.endswith("/v0"):
        return base
    return f"{base}/v0"


def _dispatch_url(s: Settings) -> str:
    direct = _clean(s.SEND_BRIDGE_PAYOUT_EXECUTE_URL)
    if direct:
        return direct

    # the dispatch path hangs off the raw base, not the /v0-normalized one
    base = (_clean(s.BRIDGE_API_BASE_URL) or DEFAULT_API_BASE_URL).rstrip("/")
    path = _clean(s.SEND_BRIDGE_PAYOUT_PATH) or "/transfers"
    if not path.startswith("/"):
        return f"{base}/{path}"
    return f"{base}{path}"


def _onboarding_redirect_uri(s: Settings) -> Optional[str]:
    explicit = _clean(s.SEND_BRIDGE_ONBOARDING_REDIRECT_URI) or _clean(s.BRIDGE_ONBOARDING_REDIRECT_URI)
    if explicit:
        return explicit
    claim_url = _clean(s.SEND_CLAIM_APP_URL)
    if claim_url:
        return f"{claim_url.rstrip('/')}/claim"
    return None


@dataclass(frozen=True)
class MethodRailConfig:
    destination_rail: str
    destination_currency: str
    external_account_rails: frozenset[str]


def _method_rail_config(s: Settings, method: DispatchMethod) -> MethodRailConfig:
    if method == DispatchMethod.DEBIT:
        explicit_rail = _clean(s.SEND_BRIDGE_RECIPIENT_DEBIT_DESTINATION_PAYMENT_RAIL)
        explicit_currency = _clean(s.SEND_BRIDGE_RECIPIENT_DEBIT_DESTINATION_CURRENCY).lower()
        rail_hints = parse_rail_csv(s.SEND_BRIDGE_RECIPIENT_DEBIT_EXTERNAL_ACCOUNT_RAILS)
    else:
        explicit_rail = _clean(s.SEND_BRIDGE_RECIPIENT_BANK_DESTINATION_PAYMENT_RAIL)
        explicit_currency = _clean(s.SEND_BRIDGE_RECIPIENT_BANK_DESTINATION_CURRENCY).lower()
        rail_hints = parse_rail_csv(s.SEND_BRIDGE_RECIPIENT_BANK_EXTERNAL_ACCOUNT_RAILS)

    rail = explicit_rail
    if not rail:
        shared = _clean(s.SEND_BRIDGE_RECIPIENT_DESTINATION_PAYMENT_RAIL)
        # never reuse a bank rail for a debit-card payout
        if shared and (method != DispatchMethod.DEBIT or is_likely_debit_rail(shared)):
            rail = shared

    currency = explicit_currency or _clean(s.SEND_BRIDGE_RECIPIENT_DESTINATION_CURRENCY).lower() or "usd"

    if not rail_hints and rail:
        rail_hints = frozenset({normalize_rail_token(rail)})

    return MethodRailConfig(
        destination_rail=rail,
        destination_currency=currency,
        external_account_rails=rail_hints,
    )


@dataclass(frozen=True)
class SourceTemplate:
    override: Optional[dict[str, Any]]
    payment_rail: str
    currency: str
    from_address: str
    bridge_wallet_id: str


@dataclass(frozen=True)
class DestinationTemplate:
    override: Optional[dict[str, Any]]
    payment_rail: str
    currency: str
    prefunded_account_id: str
    to_address: str
    external_account_id: str


@dataclass(frozen=True)
class BridgeConfig:
    provider_name: str
    api_base_url: str
    dispatch_url: str
    api_key: str
    api_key_header: str
    api_timeout_s: float
    dispatch_timeout_s: float
    enabled_regions: frozenset[str]
    bank_eta: str
    require_recipient_onboarding: bool
    customer_type: str  # "individual" | "business"
    onboarding_redirect_uri: Optional[str]
    external_account_lookup_limit: int
    prefer_recipient_on_behalf_of: bool
    on_behalf_of: str
    default_full_name: str
    debit: MethodRailConfig
    bank: MethodRailConfig
    source: SourceTemplate
    destination: DestinationTemplate
    strict_startup_validation: bool = False

    def for_method(self, method: DispatchMethod) -> MethodRailConfig:
        return self.debit if method == DispatchMethod.DEBIT else self.bank

    def region_enabled(self, region: str) -> bool:
        return (region or "").strip().upper() in self.enabled_regions


def resolve_bridge_config(s: Optional[Settings] = None) -> BridgeConfig:
    """
    Build the immutable Bridge config from settings.

    Never raises: missing or malformed values resolve to defaults or empty
    fields, and the components report them as failure codes at call time.
    """
    s = s or default_settings

    customer_type = _clean(s.SEND_BRIDGE_RECIPIENT_CUSTOMER_TYPE).lower()
    api_timeout_ms = _parse_positive_int(s.BRIDGE_API_TIMEOUT_MS, DEFAULT_TIMEOUT_MS)
    dispatch_timeout_ms = _parse_positive_int(s.SEND_BRIDGE_PAYOUT_TIMEOUT_MS, DEFAULT_TIMEOUT_MS)

    return BridgeConfig(
        provider_name=_clean(s.SEND_BRIDGE_PAYOUT_PROVIDER_NAME) or "bridge",
        api_base_url=_api_base_url(s.BRIDGE_API_BASE_URL),
        dispatch_url=_dispatch_url(s),
        api_key=_clean(s.SEND_BRIDGE_PAYOUT_API_KEY) or _clean(s.BRIDGE_API_KEY),
        api_key_header=_clean(s.SEND_BRIDGE_PAYOUT_API_KEY_HEADER) or "Api-Key",
        api_timeout_s=api_timeout_ms / 1000.0,
        dispatch_timeout_s=dispatch_timeout_ms / 1000.0,
        enabled_regions=_parse_regions(s.SEND_BRIDGE_PAYOUT_ENABLED_REGIONS or "US"),
        bank_eta=_clean(s.SEND_BRIDGE_BANK_ETA) or "1-3 business days",
        require_recipient_onboarding=_parse_bool(s.SEND_BRIDGE_REQUIRE_RECIPIENT_ONBOARDING, False),
        customer_type="business" if customer_type == "business" else "individual",
        onboarding_redirect_uri=_onboarding_redirect_uri(s),
        external_account_lookup_limit=_parse_positive_int(
            s.SEND_BRIDGE_EXTERNAL_ACCOUNT_LOOKUP_LIMIT, DEFAULT_LOOKUP_LIMIT
        ),
        prefer_recipient_on_behalf_of=_parse_bool(s.SEND_BRIDGE_USE_RECIPIENT_ON_BEHALF_OF, True),
        on_behalf_of=_clean(s.SEND_BRIDGE_ON_BEHALF_OF),
        default_full_name=_clean(s.SEND_BRIDGE_RECIPIENT_DEFAULT_FULL_NAME) or DEFAULT_FULL_NAME,
        debit=_method_rail_config(s, DispatchMethod.DEBIT),
        bank=_method_rail_config(s, DispatchMethod.BANK),
        source=SourceTemplate(
            override=_parse_json_object(s.SEND_BRIDGE_TRANSFER_SOURCE_JSON),
            payment_rail=_clean(s.SEND_BRIDGE_SOURCE_PAYMENT_RAIL) or "ethereum",
            currency=_clean(s.SEND_BRIDGE_SOURCE_CURRENCY).lower() or "usdc",
            from_address=_clean(s.SEND_BRIDGE_SOURCE_FROM_ADDRESS) or _clean(s.SEND_PAYOUT_TREASURY),
            bridge_wallet_id=_clean(s.SEND_BRIDGE_SOURCE_BRIDGE_WALLET_ID),
        ),
        destination=DestinationTemplate(
            override=_parse_json_object(s.SEND_BRIDGE_TRANSFER_DESTINATION_JSON),
            payment_rail=_clean(s.SEND_BRIDGE_DESTINATION_PAYMENT_RAIL) or "prefunded",
            currency=_clean(s.SEND_BRIDGE_DESTINATION_CURRENCY).lower() or "usd",
            prefunded_account_id=_clean(s.SEND_BRIDGE_DESTINATION_PREFUNDED_ACCOUNT_ID),
            to_address=_clean(s.SEND_BRIDGE_DESTINATION_ADDRESS),
            external_account_id=_clean(s.SEND_BRIDGE_DESTINATION_EXTERNAL_ACCOUNT_ID),
        ),
        strict_startup_validation=bool(s.BRIDGE_STRICT_STARTUP_VALIDATION),
    )
