# app/bridge/models.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Optional


class DispatchPhase(str, Enum):
    PRECHECK = "precheck"
    EXECUTE = "execute"


class DispatchMethod(str, Enum):
    DEBIT = "DEBIT"
    BANK = "BANK"


class DispatchStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PROCESSING = "PROCESSING"
    FALLBACK_REQUIRED = "FALLBACK_REQUIRED"
    FAILED = "FAILED"


class EligibilityStatus(str, Enum):
    SUCCESS = "SUCCESS"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    FAILED = "FAILED"


class OnboardingStatus(str, Enum):
    READY = "READY"
    PENDING_ONBOARDING = "PENDING_ONBOARDING"


RecipientType = Literal["email", "phone"]
RequiredField = Literal["email", "full_name"]

# Provider-owned, loosely typed; never cached past the call that fetched it.
ExternalAccountRecord = dict[str, Any]


@dataclass(frozen=True)
class TransferSnapshot:
    id: int
    transfer_id: str
    sender_wallet: str
    principal_usdc: str  # integer micros
    sponsor_fee_usdc: str
    total_locked_usdc: str
    region: str
    chain_id: int
    expires_at: str
    # recipient store key, supplied by the caller; this package never derives them
    recipient_contact_hash: str
    recipient_hint_hash: str


@dataclass(frozen=True)
class RecipientContext:
    recipient_type: RecipientType
    recipient_contact: str
    full_name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class RecipientRecord:
    contact_hash: str
    hint_hash: str
    customer_id: Optional[str] = None
    external_account_id: Optional[str] = None
    external_account_method: Optional[str] = None
    onboarding_status: OnboardingStatus = OnboardingStatus.PENDING_ONBOARDING
    last_onboarding_url: Optional[str] = None
    last_kyc_url: Optional[str] = None
    last_tos_url: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.onboarding_status == OnboardingStatus.READY


@dataclass(frozen=True)
class EligibilityResult:
    status: EligibilityStatus
    provider: str
    customer_id: Optional[str] = None
    external_account_id: Optional[str] = None
    onboarding_url: Optional[str] = None
    kyc_url: Optional[str] = None
    tos_url: Optional[str] = None
    failure_code: Optional[str] = None
    failure_reason: Optional[str] = None
    required_fields: tuple[RequiredField, ...] = ()


@dataclass(frozen=True)
class DispatchRequest:
    phase: DispatchPhase
    method: DispatchMethod
    transfer: TransferSnapshot
    treasury_tx_hash: Optional[str] = None
    recipient_customer_id: Optional[str] = None
    recipient_external_account_id: Optional[str] = None
    # reuse across caller retries so the provider can dedupe
    client_reference_id: Optional[str] = None


@dataclass(frozen=True)
class DispatchResponse:
    status: DispatchStatus
    provider: str
    provider_reference: Optional[str] = None
    failure_code: Optional[str] = None
    failure_reason: Optional[str] = None
    fallback_method: Optional[DispatchMethod] = None
    eta: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (DispatchStatus.SUCCESS, DispatchStatus.PROCESSING)

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"status": self.status.value, "provider": self.provider}
        for key in ("provider_reference", "failure_code", "failure_reason", "eta"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.fallback_method is not None:
            out["fallback_method"] = self.fallback_method.value
        return out


@dataclass(frozen=True)
class AccountLookup:
    external_account_id: Optional[str] = None
    has_active_accounts: bool = False


@dataclass(frozen=True)
class HostedLinks:
    onboarding_url: Optional[str] = None
    kyc_url: Optional[str] = None
    tos_url: Optional[str] = None
