# app/bridge/service.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from app.bridge.config import BridgeConfig, resolve_bridge_config
from app.bridge.destination import DestinationBuilder, SourceBuilder
from app.bridge.dispatch import DispatchOrchestrator
from app.bridge.eligibility import RecipientEligibilityResolver
from app.bridge.http import BridgeHttpClient
from app.bridge.models import (
    DispatchMethod,
    DispatchRequest,
    DispatchResponse,
    EligibilityResult,
    RecipientContext,
    TransferSnapshot,
)
from app.recipients.store import RecipientStore


def _pick(row: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in row and row[k] is not None:
            return row[k]
    return default


def _require(row: Mapping[str, Any], *keys: str) -> Any:
    value = _pick(row, *keys)
    if value is None:
        raise ValueError(f"transfer row is missing {keys[0]}")
    return value


def from_transfer_record(row: Mapping[str, Any]) -> TransferSnapshot:
    """
    Project a stored transfer row (snake_case or camelCase keys) onto a
    TransferSnapshot. Amount columns may come back as ints or Decimals.

    Raises ValueError when the row lacks the recipient hashes that key the
    recipient store.
    """
    expires_at = _pick(row, "expires_at", "expiresAt", default="")
    if isinstance(expires_at, datetime):
        expires_at = expires_at.isoformat()

    return TransferSnapshot(
        id=int(_pick(row, "id")),
        transfer_id=str(_pick(row, "transfer_id", "transferId")),
        sender_wallet=str(_pick(row, "sender_wallet", "senderWallet", default="")),
        principal_usdc=str(_pick(row, "principal_usdc", "principalUsdc", default="0")),
        sponsor_fee_usdc=str(_pick(row, "sponsor_fee_usdc", "sponsorFeeUsdc", default="0")),
        total_locked_usdc=str(_pick(row, "total_locked_usdc", "totalLockedUsdc", default="0")),
        region=str(_pick(row, "region", default="")),
        chain_id=int(_pick(row, "chain_id", "chainId", default=0)),
        expires_at=str(expires_at),
        recipient_contact_hash=str(_require(row, "recipient_contact_hash", "recipientContactHash")),
        recipient_hint_hash=str(_require(row, "recipient_hint_hash", "recipientHintHash")),
    )


class BridgePayoutService:
    """Entry point for the send flow: eligibility, then precheck/execute dispatch."""

    def __init__(
        self,
        cfg: BridgeConfig,
        store: RecipientStore,
        http: Optional[BridgeHttpClient] = None,
    ):
        self.cfg = cfg
        self.http = http or BridgeHttpClient.from_config(cfg)
        self.eligibility = RecipientEligibilityResolver(cfg, self.http, store)
        self.orchestrator = DispatchOrchestrator(
            cfg,
            self.http,
            destinations=DestinationBuilder(cfg),
            sources=SourceBuilder(cfg),
        )

    def ensure_recipient_eligibility(
        self,
        transfer: TransferSnapshot,
        method: DispatchMethod,
        recipient_context: Optional[RecipientContext] = None,
    ) -> EligibilityResult:
        return self.eligibility.ensure_recipient_eligibility(transfer, method, recipient_context)

    def dispatch(self, request: DispatchRequest) -> DispatchResponse:
        return self.orchestrator.dispatch(request)

    def close(self) -> None:
        self.http.close()


_SERVICE: Optional[BridgePayoutService] = None


def get_bridge_payout_service() -> BridgePayoutService:
    global _SERVICE
    if _SERVICE is not None:
        return _SERVICE

    from app.recipients.repository import PostgresRecipientStore

    _SERVICE = BridgePayoutService(resolve_bridge_config(), PostgresRecipientStore())
    return _SERVICE


def reset_bridge_payout_service() -> None:
    global _SERVICE
    if _SERVICE is not None:
        _SERVICE.close()
    _SERVICE = None
