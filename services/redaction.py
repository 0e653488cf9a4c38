from __future__ import annotations

import re
from typing import Any


_EMAIL_RE = re.compile(r"\b([A-Za-z0-9._%+-])([A-Za-z0-9._%+-]*)(@[A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")
_PHONE_RE = re.compile(r"\+\d{6,15}")

_SENSITIVE_KEY_MARKERS = (
    "api_key",
    "api-key",
    "apikey",
    "authorization",
    "secret",
    "token",
)


def _mask_email(match: re.Match) -> str:
    return f"{match.group(1)}***{match.group(3)}"


def _mask_phone(value: str) -> str:
    if len(value) <= 8:
        return value
    return f"{value[:6]}****{value[-2:]}"


def mask_email(value: str | None) -> str:
    if not value:
        return ""
    return _EMAIL_RE.sub(_mask_email, value)


def redact_text(value: str) -> str:
    masked = _EMAIL_RE.sub(_mask_email, value)
    return _PHONE_RE.sub(lambda m: _mask_phone(m.group(0)), masked)


def _is_sensitive_key(key: str) -> bool:
    key_l = (key or "").lower()
    return any(marker in key_l for marker in _SENSITIVE_KEY_MARKERS)


def redact_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, dict):
        return redact_dict(value)
    if isinstance(value, list):
        return [redact_value(v) for v in value]
    return value


def redact_dict(payload: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in payload.items():
        if _is_sensitive_key(k):
            out[k] = "[REDACTED]"
        else:
            out[k] = redact_value(v)
    return out
