# app/bridge/destination.py
from __future__ import annotations

from typing import Any, Optional

from app.bridge.config import BridgeConfig
from app.bridge.models import DispatchMethod

PREFUNDED_RAIL = "prefunded"
BRIDGE_WALLET_RAIL = "bridge_wallet"


class DestinationBuilder:
    """
    Builds the `destination` object of a Bridge transfer.

    `build` returns None when the method cannot be dispatched with the
    current configuration; callers treat that as a config failure.
    """

    def __init__(self, cfg: BridgeConfig):
        self.cfg = cfg

    def _default_destination(self) -> Optional[dict[str, Any]]:
        tpl = self.cfg.destination
        if tpl.override is not None:
            return dict(tpl.override)

        if not tpl.payment_rail or not tpl.currency:
            return None

        destination: dict[str, Any] = {
            "payment_rail": tpl.payment_rail,
            "currency": tpl.currency,
        }
        if tpl.payment_rail == PREFUNDED_RAIL:
            if not tpl.prefunded_account_id:
                return None
            destination["prefunded_account_id"] = tpl.prefunded_account_id
        if tpl.to_address:
            destination["to_address"] = tpl.to_address
        if tpl.external_account_id:
            destination["external_account_id"] = tpl.external_account_id
        return destination

    def build(
        self,
        method: DispatchMethod,
        recipient_external_account_id: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        rails = self.cfg.for_method(method)

        if recipient_external_account_id and method == DispatchMethod.DEBIT and not rails.destination_rail:
            return None

        destination = self._default_destination()
        if destination is None:
            return None

        if recipient_external_account_id:
            if rails.destination_rail:
                destination["payment_rail"] = rails.destination_rail
            if rails.destination_currency:
                destination["currency"] = rails.destination_currency
            # a transfer targets either the prefunded pool or a named account
            destination.pop("prefunded_account_id", None)
            destination["external_account_id"] = recipient_external_account_id

        return destination


class SourceBuilder:
    def __init__(self, cfg: BridgeConfig):
        self.cfg = cfg

    def build(self) -> Optional[dict[str, Any]]:
        tpl = self.cfg.source
        if tpl.override is not None:
            return dict(tpl.override)

        if not tpl.payment_rail or not tpl.currency:
            return None

        if tpl.payment_rail == BRIDGE_WALLET_RAIL:
            if not tpl.bridge_wallet_id:
                return None
            return {
                "payment_rail": tpl.payment_rail,
                "currency": tpl.currency,
                "bridge_wallet_id": tpl.bridge_wallet_id,
            }

        source: dict[str, Any] = {
            "payment_rail": tpl.payment_rail,
            "currency": tpl.currency,
        }
        if tpl.from_address:
            source["from_address"] = tpl.from_address
        return source
