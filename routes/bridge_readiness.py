from __future__ import annotations

from fastapi import APIRouter, Depends

from app.bridge.config import resolve_bridge_config
from app.bridge.validate import missing_bridge_config
from deps.admin import require_admin
from settings import settings


router = APIRouter(prefix="/v1/admin", tags=["admin", "bridge"])


@router.get("/bridge-readiness")
def bridge_readiness(_admin=Depends(require_admin)):
    cfg = resolve_bridge_config(settings)
    missing = missing_bridge_config(cfg)

    def _method_row(rails):
        return {
            "destination_rail": rails.destination_rail or None,
            "destination_currency": rails.destination_currency,
            "external_account_rails": sorted(rails.external_account_rails),
        }

    return {
        "provider": cfg.provider_name,
        "ready": not missing,
        "missing": missing,
        "api_base_url": cfg.api_base_url,
        "dispatch_url": cfg.dispatch_url,
        "enabled_regions": sorted(cfg.enabled_regions),
        "require_recipient_onboarding": cfg.require_recipient_onboarding,
        "strict_startup_validation": cfg.strict_startup_validation,
        "methods": {
            "DEBIT": _method_row(cfg.debit),
            "BANK": _method_row(cfg.bank),
        },
    }
