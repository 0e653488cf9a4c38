# app/bridge/dispatch.py
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from app.bridge.config import BridgeConfig
from app.bridge.destination import DestinationBuilder, SourceBuilder
from app.bridge.http import BridgeHttpClient, message_from_error
from app.bridge.models import (
    DispatchMethod,
    DispatchPhase,
    DispatchRequest,
    DispatchResponse,
    DispatchStatus,
)
from app.bridge.status import map_bridge_state
from services.metrics import increment_dispatch

logger = logging.getLogger("offramp.bridge")

USDC_MICROS = 1_000_000


def format_usdc_micros(micros_value: str) -> str:
    """'1500000' -> '1.5'. Raises ValueError on non-integer input."""
    micros = int(str(micros_value).strip())
    sign = "-" if micros < 0 else ""
    whole, fraction = divmod(abs(micros), USDC_MICROS)
    frac = str(fraction).rjust(6, "0").rstrip("0")
    return f"{sign}{whole}.{frac}" if frac else f"{sign}{whole}"


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class DispatchOrchestrator:
    def __init__(
        self,
        cfg: BridgeConfig,
        http: BridgeHttpClient,
        destinations: Optional[DestinationBuilder] = None,
        sources: Optional[SourceBuilder] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cfg = cfg
        self.http = http
        self.destinations = destinations or DestinationBuilder(cfg)
        self.sources = sources or SourceBuilder(cfg)
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _response(self, status: DispatchStatus, **kwargs) -> DispatchResponse:
        kwargs.setdefault("provider", self.cfg.provider_name)
        return DispatchResponse(status=status, **kwargs)

    def _failed(self, code: str, reason: str) -> DispatchResponse:
        return self._response(DispatchStatus.FAILED, failure_code=code, failure_reason=reason)

    def _fallback(self, code: str, reason: str) -> DispatchResponse:
        return self._response(
            DispatchStatus.FALLBACK_REQUIRED,
            failure_code=code,
            failure_reason=reason,
            fallback_method=DispatchMethod.BANK,
        )

    def dispatch(self, request: DispatchRequest) -> DispatchResponse:
        phase = DispatchPhase(request.phase)
        method = DispatchMethod(request.method)

        res = self._dispatch(phase, method, request)

        increment_dispatch(phase.value, method.value, res.status.value)
        logger.info(
            "bridge dispatch transfer_id=%s phase=%s method=%s status=%s failure_code=%s provider_ref=%s",
            request.transfer.transfer_id,
            phase.value,
            method.value,
            res.status.value,
            res.failure_code,
            res.provider_reference,
        )
        return res

    def _dispatch(self, phase: DispatchPhase, method: DispatchMethod, request: DispatchRequest) -> DispatchResponse:
        region = (request.transfer.region or "").strip().upper()
        if not self.cfg.region_enabled(region):
            return self._failed("BRIDGE_REGION_UNSUPPORTED", f"Bridge payout is not enabled in {region}")

        if phase == DispatchPhase.PRECHECK:
            return self.precheck(method, request)
        return self.execute(method, request)

    # -----------------------
    # Precheck: no provider calls
    # -----------------------

    def precheck(self, method: DispatchMethod, request: DispatchRequest) -> DispatchResponse:
        if method == DispatchMethod.DEBIT and not self.cfg.debit.destination_rail:
            return self._fallback(
                "BRIDGE_DEBIT_RAIL_UNCONFIGURED",
                "Debit payout rail is not configured. Set SEND_BRIDGE_RECIPIENT_DEBIT_DESTINATION_PAYMENT_RAIL.",
            )

        if self.cfg.require_recipient_onboarding and not request.recipient_external_account_id:
            if method == DispatchMethod.DEBIT:
                return self._fallback(
                    "BRIDGE_DEBIT_EXTERNAL_ACCOUNT_MISSING",
                    "Recipient has no eligible debit payout account on file.",
                )
            return self._failed(
                "BRIDGE_BANK_EXTERNAL_ACCOUNT_MISSING",
                "Recipient has no eligible bank payout account on file.",
            )

        destination = self.destinations.build(method, request.recipient_external_account_id)
        if destination is None:
            if method == DispatchMethod.DEBIT:
                return self._fallback(
                    "BRIDGE_DEBIT_DESTINATION_CONFIG_MISSING",
                    "Debit destination config is missing or invalid.",
                )
            return self._failed(
                "BRIDGE_BANK_DESTINATION_CONFIG_MISSING",
                "Bank destination config is missing or invalid.",
            )

        return self._response(DispatchStatus.SUCCESS)

    # -----------------------
    # Execute: one transfer call
    # -----------------------

    def _on_behalf_of(self, request: DispatchRequest) -> str:
        if self.cfg.prefer_recipient_on_behalf_of and request.recipient_customer_id:
            return request.recipient_customer_id
        return self.cfg.on_behalf_of

    def build_transfer_body(
        self,
        method: DispatchMethod,
        request: DispatchRequest,
        *,
        amount: str,
        source: dict[str, Any],
        destination: dict[str, Any],
        client_reference_id: str,
    ) -> dict[str, Any]:
        transfer = request.transfer
        body: dict[str, Any] = {"amount": amount}

        on_behalf_of = self._on_behalf_of(request)
        if on_behalf_of:
            body["on_behalf_of"] = on_behalf_of

        body.update(
            {
                "source": source,
                "destination": destination,
                "client_reference_id": client_reference_id,
                "metadata": {
                    "send_transfer_row_id": transfer.id,
                    "send_transfer_id": transfer.transfer_id,
                    "send_method": method.value,
                    "send_chain_id": transfer.chain_id,
                    "send_treasury_tx_hash": request.treasury_tx_hash or "",
                    "send_bridge_customer_id": request.recipient_customer_id or "",
                    "send_bridge_external_account_id": request.recipient_external_account_id or "",
                },
            }
        )
        return body

    def execute(self, method: DispatchMethod, request: DispatchRequest) -> DispatchResponse:
        if not self.cfg.api_key:
            return self._failed("BRIDGE_API_KEY_MISSING", "Bridge API key is not configured")

        source = self.sources.build()
        destination = self.destinations.build(method, request.recipient_external_account_id)
        if source is None or destination is None:
            return self._failed(
                "BRIDGE_TRANSFER_CONFIG_MISSING",
                "Bridge source/destination config is missing. Set SEND_BRIDGE_TRANSFER_SOURCE_JSON and "
                "SEND_BRIDGE_TRANSFER_DESTINATION_JSON or configure source/destination env defaults.",
            )

        try:
            amount = format_usdc_micros(request.transfer.principal_usdc)
        except ValueError:
            amount = ""
        if not amount or amount.startswith("-") or amount == "0":
            return self._failed(
                "BRIDGE_INVALID_AMOUNT",
                f"Transfer principal is not a positive amount: {request.transfer.principal_usdc!r}",
            )

        client_reference_id = (
            request.client_reference_id
            or f"send_{request.transfer.transfer_id}_{method.value.lower()}_{self._now_ms()}"
        )
        body = self.build_transfer_body(
            method,
            request,
            amount=amount,
            source=source,
            destination=destination,
            client_reference_id=client_reference_id,
        )

        result = self.http.request(
            self.cfg.dispatch_url,
            "POST",
            body=body,
            headers={"Idempotency-Key": client_reference_id},
            timeout_s=self.cfg.dispatch_timeout_s,
        )

        if result.transport_error:
            return self._failed("BRIDGE_DISPATCH_ERROR", result.message or "Bridge dispatch failed")

        if not result.ok:
            return self._failed(
                f"BRIDGE_HTTP_{result.status}",
                message_from_error(result.data, f"Bridge dispatch failed ({result.status})"),
            )

        data = result.data if isinstance(result.data, dict) else {}
        return self.map_transfer_response(data, request)

    def map_transfer_response(self, data: dict[str, Any], request: DispatchRequest) -> DispatchResponse:
        status = map_bridge_state(data.get("state") or data.get("status"))

        provider_reference = (
            _str_or_none(data.get("providerReference"))
            or _str_or_none(data.get("reference"))
            or _str_or_none(data.get("id"))
            or _str_or_none(data.get("transfer_id"))
            or f"bridge_{request.transfer.id}_{self._now_ms()}"
        )

        return self._response(
            status,
            provider=_str_or_none(data.get("provider")) or self.cfg.provider_name,
            provider_reference=provider_reference,
            failure_code=_str_or_none(data.get("failureCode")),
            failure_reason=_str_or_none(data.get("failureReason")),
            fallback_method=DispatchMethod.BANK if data.get("fallbackMethod") == "BANK" else None,
            eta=_str_or_none(data.get("eta")) or self.cfg.bank_eta,
        )
