# app/bridge/eligibility.py
from __future__ import annotations

import logging
import re
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional
from urllib.parse import quote

from app.bridge.config import BridgeConfig
from app.bridge.http import ApiResult, BridgeHttpClient
from app.bridge.models import (
    AccountLookup,
    DispatchMethod,
    EligibilityResult,
    EligibilityStatus,
    HostedLinks,
    OnboardingStatus,
    RecipientContext,
    RecipientRecord,
    TransferSnapshot,
)
from app.bridge.rails import is_external_account_active, matches
from app.recipients.store import RecipientStore
from services.metrics import increment_eligibility
from services.redaction import mask_email

logger = logging.getLogger("offramp.bridge")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", re.IGNORECASE)


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or ""))


def normalize_email(ctx: RecipientContext) -> Optional[str]:
    explicit = (ctx.email or "").strip().lower()
    if explicit and is_valid_email(explicit):
        return explicit

    if ctx.recipient_type == "email":
        from_contact = (ctx.recipient_contact or "").strip().lower()
        if is_valid_email(from_contact):
            return from_contact

    return None


def normalize_full_name(name: Optional[str], default: str) -> str:
    trimmed = (name or "").strip()
    return trimmed if len(trimmed) >= 2 else default


def clean_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _data_list(result: ApiResult) -> Optional[list[Any]]:
    if not result.ok or not isinstance(result.data, dict):
        return None
    items = result.data.get("data")
    return items if isinstance(items, list) else None


class RecipientEligibilityResolver:
    """
    Resolves whether a recipient can be paid out through Bridge.

    Walks customer lookup/creation, external-account discovery and hosted
    onboarding links, writing progress to the recipient store once per
    resolved state.
    """

    def __init__(self, cfg: BridgeConfig, http: BridgeHttpClient, store: RecipientStore):
        self.cfg = cfg
        self.http = http
        self.store = store

    def _result(self, status: EligibilityStatus, **kwargs) -> EligibilityResult:
        return EligibilityResult(status=status, provider=self.cfg.provider_name, **kwargs)

    def _failed(self, code: str, reason: str, **kwargs) -> EligibilityResult:
        return self._result(EligibilityStatus.FAILED, failure_code=code, failure_reason=reason, **kwargs)

    def ensure_recipient_eligibility(
        self,
        transfer: TransferSnapshot,
        method: DispatchMethod,
        recipient_context: Optional[RecipientContext] = None,
    ) -> EligibilityResult:
        result = self._resolve(transfer, DispatchMethod(method), recipient_context)
        increment_eligibility(DispatchMethod(method).value, result.status.value, result.failure_code)
        logger.info(
            "bridge eligibility transfer_id=%s method=%s status=%s failure_code=%s customer_id=%s",
            transfer.transfer_id,
            DispatchMethod(method).value,
            result.status.value,
            result.failure_code,
            result.customer_id,
        )
        return result

    def _resolve(
        self,
        transfer: TransferSnapshot,
        method: DispatchMethod,
        ctx: Optional[RecipientContext],
    ) -> EligibilityResult:
        if not self.cfg.require_recipient_onboarding:
            return self._result(EligibilityStatus.SUCCESS)

        if not self.cfg.api_key:
            return self._failed("BRIDGE_API_KEY_MISSING", "Bridge API key is not configured")

        if ctx is None:
            return self._failed(
                "BRIDGE_RECIPIENT_CONTEXT_REQUIRED",
                "Recipient context is required for Bridge onboarding",
            )

        if not (transfer.recipient_contact_hash or "").strip():
            return self._failed(
                "BRIDGE_RECIPIENT_KEY_REQUIRED",
                "Transfer has no recipient contact hash to key Bridge onboarding on",
            )

        email = normalize_email(ctx)
        if not email:
            return self._result(
                EligibilityStatus.ACTION_REQUIRED,
                failure_code="BRIDGE_RECIPIENT_EMAIL_REQUIRED",
                failure_reason="A valid email is required to complete Bridge onboarding",
                required_fields=("email",),
            )

        full_name = normalize_full_name(ctx.full_name, self.cfg.default_full_name)

        persisted = self.store.get_recipient_by_hashes(
            transfer.recipient_contact_hash,
            transfer.recipient_hint_hash,
        )
        if (
            persisted is not None
            and persisted.is_ready
            and persisted.customer_id
            and persisted.external_account_id
            and persisted.external_account_method == method.value
        ):
            return self._result(
                EligibilityStatus.SUCCESS,
                customer_id=persisted.customer_id,
                external_account_id=persisted.external_account_id,
            )

        customer_id = persisted.customer_id if persisted else None
        external_account_id = persisted.external_account_id if persisted else None

        if not customer_id:
            existing = self.find_customer_by_email(email)
            if existing:
                customer_id = clean_str(existing.get("customer_id"))

        lookup = AccountLookup()
        if customer_id:
            lookup = self.find_eligible_external_account(customer_id, method, external_account_id)
            external_account_id = lookup.external_account_id

        if customer_id and external_account_id:
            self._save(
                transfer,
                customer_id=customer_id,
                external_account_id=external_account_id,
                external_account_method=method.value,
                onboarding_status=OnboardingStatus.READY,
            )
            return self._result(
                EligibilityStatus.SUCCESS,
                customer_id=customer_id,
                external_account_id=external_account_id,
            )

        if customer_id and lookup.has_active_accounts:
            # the recipient already onboarded, just not with a usable rail
            self._save(
                transfer,
                customer_id=customer_id,
                external_account_id=None,
                external_account_method=None,
                onboarding_status=OnboardingStatus.READY,
            )
            if method == DispatchMethod.DEBIT:
                return self._failed(
                    "BRIDGE_DEBIT_EXTERNAL_ACCOUNT_INELIGIBLE",
                    "Recipient does not have an eligible debit payout account. Use bank payout instead.",
                    customer_id=customer_id,
                )
            return self._failed(
                "BRIDGE_BANK_EXTERNAL_ACCOUNT_INELIGIBLE",
                "Recipient does not have an eligible bank payout account.",
                customer_id=customer_id,
            )

        if not customer_id:
            created = self.create_customer(full_name=full_name, email=email)
            if not created.ok:
                return self._failed("BRIDGE_KYC_LINK_CREATE_FAILED", created.message or "Bridge request failed")
            data = created.data if isinstance(created.data, dict) else {}
            customer_id = clean_str(data.get("customer_id"))
            tos_url = clean_str(data.get("tos_link"))
            kyc_url = clean_str(data.get("kyc_link"))
            links = HostedLinks(onboarding_url=tos_url or kyc_url, kyc_url=kyc_url, tos_url=tos_url)
        else:
            links, error = self.fetch_hosted_onboarding_links(customer_id)
            if links is None:
                return self._failed("BRIDGE_HOSTED_LINK_FETCH_FAILED", error or "Unable to retrieve Bridge onboarding links")

        self._save(
            transfer,
            customer_id=customer_id,
            external_account_id=external_account_id,
            external_account_method=method.value if external_account_id else None,
            onboarding_status=OnboardingStatus.PENDING_ONBOARDING,
            last_onboarding_url=links.onboarding_url,
            last_kyc_url=links.kyc_url,
            last_tos_url=links.tos_url,
        )

        if not links.onboarding_url:
            return self._failed("BRIDGE_ONBOARDING_LINK_UNAVAILABLE", "Bridge did not return an onboarding URL")

        logger.info("bridge onboarding required transfer_id=%s email=%s", transfer.transfer_id, mask_email(email))
        return self._result(
            EligibilityStatus.ACTION_REQUIRED,
            customer_id=customer_id,
            external_account_id=external_account_id,
            onboarding_url=links.onboarding_url,
            kyc_url=links.kyc_url,
            tos_url=links.tos_url,
            failure_code="BRIDGE_ONBOARDING_REQUIRED",
            failure_reason="Recipient must complete Bridge onboarding to receive fiat payout",
            required_fields=("full_name",) if full_name == self.cfg.default_full_name else (),
        )

    def _save(self, transfer: TransferSnapshot, **fields) -> None:
        self.store.upsert_recipient(
            RecipientRecord(
                contact_hash=transfer.recipient_contact_hash,
                hint_hash=transfer.recipient_hint_hash,
                **fields,
            )
        )

    # -----------------------
    # Bridge lookups
    # -----------------------

    def find_customer_by_email(self, email: str) -> Optional[dict[str, Any]]:
        result = self.http.request("/kyc_links", "GET", params={"email": email, "limit": 1})
        items = _data_list(result)
        if not items or not isinstance(items[0], dict):
            return None
        return items[0]

    def create_customer(self, *, full_name: str, email: str) -> ApiResult:
        body: dict[str, Any] = {
            "full_name": full_name,
            "email": email,
            "type": self.cfg.customer_type,
        }
        if self.cfg.onboarding_redirect_uri:
            body["redirect_uri"] = self.cfg.onboarding_redirect_uri
        return self.http.request(
            "/kyc_links",
            "POST",
            body=body,
            headers={"Idempotency-Key": str(uuid.uuid4())},
        )

    def fetch_hosted_onboarding_links(self, customer_id: str) -> tuple[Optional[HostedLinks], Optional[str]]:
        """
        Fetch the TOS and KYC links concurrently.

        Both calls are always made; one success is enough.
        """
        cid = quote(customer_id, safe="")
        kyc_params = {"redirect_uri": self.cfg.onboarding_redirect_uri} if self.cfg.onboarding_redirect_uri else None

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="bridge-links") as pool:
            tos_future = pool.submit(self.http.request, f"/customers/{cid}/tos_acceptance_link", "GET")
            kyc_future = pool.submit(self.http.request, f"/customers/{cid}/kyc_link", "GET", params=kyc_params)
            tos_result = tos_future.result()
            kyc_result = kyc_future.result()

        if not tos_result.ok and not kyc_result.ok:
            return None, tos_result.message or kyc_result.message

        tos_url = clean_str(tos_result.data.get("url")) if tos_result.ok and isinstance(tos_result.data, dict) else None
        kyc_url = clean_str(kyc_result.data.get("url")) if kyc_result.ok and isinstance(kyc_result.data, dict) else None
        return HostedLinks(onboarding_url=tos_url or kyc_url, kyc_url=kyc_url, tos_url=tos_url), None

    def find_eligible_external_account(
        self,
        customer_id: str,
        method: DispatchMethod,
        preferred_account_id: Optional[str] = None,
    ) -> AccountLookup:
        result = self.http.request(
            f"/customers/{quote(customer_id, safe='')}/external_accounts",
            "GET",
            params={"limit": self.cfg.external_account_lookup_limit},
        )
        items = _data_list(result)
        if items is None:
            return AccountLookup()

        active = [a for a in items if isinstance(a, dict) and is_external_account_active(a)]
        if not active:
            return AccountLookup()

        expected_rails = self.cfg.for_method(method).external_account_rails

        # previously recorded account first, then provider order
        candidates = sorted(active, key=lambda a: 0 if preferred_account_id and a.get("id") == preferred_account_id else 1)
        for account in candidates:
            if matches(account, method, expected_rails):
                return AccountLookup(external_account_id=account["id"], has_active_accounts=True)

        return AccountLookup(has_active_accounts=True)
