# app/bridge/http.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from services.metrics import increment_bridge_http_request
from services.redaction import redact_dict

logger = logging.getLogger("offramp.bridge")

TIMEOUT_MESSAGE = "Bridge request timed out"


@dataclass(frozen=True)
class ApiResult:
    ok: bool
    status: int
    data: Any = None
    message: Optional[str] = None
    # timeout / connection failure, as opposed to a provider answer
    transport_error: bool = False


def parse_body(raw: str) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _non_blank(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def message_from_error(payload: Any, fallback: str) -> str:
    """Pull a readable message out of the usual provider error shapes."""
    if _non_blank(payload):
        return payload
    if isinstance(payload, dict):
        msg = _non_blank(payload.get("message")) or _non_blank(payload.get("error"))
        if msg:
            return msg
        nested = payload.get("error")
        if isinstance(nested, dict):
            msg = _non_blank(nested.get("message"))
            if msg:
                return msg
    return fallback


class BridgeHttpClient:
    """
    Authenticated JSON calls to the Bridge API.

    Every outcome comes back as an ApiResult; transport exceptions never
    leave this class. There is no retry loop here.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        api_key_header: str = "Api-Key",
        timeout_s: float = 15.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.api_key_header = api_key_header
        self.timeout_s = timeout_s
        self._client = client or httpx.Client(timeout=timeout_s)

    @classmethod
    def from_config(cls, cfg, *, client: Optional[httpx.Client] = None) -> "BridgeHttpClient":
        return cls(
            base_url=cfg.api_base_url,
            api_key=cfg.api_key,
            api_key_header=cfg.api_key_header,
            timeout_s=cfg.api_timeout_s,
            client=client,
        )

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def _headers(self, extra: Optional[dict[str, str]], has_body: bool) -> dict[str, str]:
        headers = dict(extra or {})
        headers["Accept"] = "application/json"
        headers[self.api_key_header] = self.api_key
        if has_body and not any(k.lower() == "content-type" for k in headers):
            headers["Content-Type"] = "application/json"
        return headers

    def request(
        self,
        path: str,
        method: str = "GET",
        *,
        body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        timeout_s: Optional[float] = None,
    ) -> ApiResult:
        url = self._url(path)
        method = method.upper()
        content = json.dumps(body) if body is not None else None
        if body is not None:
            logger.debug("bridge request method=%s path=%s body=%s", method, path, redact_dict(body))

        try:
            r = self._client.request(
                method,
                url,
                headers=self._headers(headers, content is not None),
                params=params,
                content=content,
                timeout=timeout_s if timeout_s is not None else self.timeout_s,
            )
        except httpx.TimeoutException:
            logger.warning("bridge request timed out method=%s path=%s", method, path)
            increment_bridge_http_request(method, 504)
            return ApiResult(ok=False, status=504, message=TIMEOUT_MESSAGE, transport_error=True)
        except httpx.HTTPError as exc:
            logger.warning("bridge request error method=%s path=%s err=%s", method, path, exc)
            increment_bridge_http_request(method, 502)
            return ApiResult(
                ok=False,
                status=502,
                message=str(exc) or "Bridge request failed",
                transport_error=True,
            )
        except httpx.InvalidURL as exc:
            # not an HTTPError subclass; a misconfigured endpoint URL lands here
            logger.warning("bridge request invalid url method=%s path=%s err=%s", method, path, exc)
            increment_bridge_http_request(method, 502)
            return ApiResult(ok=False, status=502, message=str(exc), transport_error=True)

        increment_bridge_http_request(method, r.status_code)
        payload = parse_body(r.text)
        if not r.is_success:
            logger.info("bridge request failed method=%s path=%s status=%s", method, path, r.status_code)
            return ApiResult(
                ok=False,
                status=r.status_code,
                data=payload,
                message=message_from_error(payload, f"Bridge request failed ({r.status_code})"),
            )

        return ApiResult(ok=True, status=r.status_code, data=payload)

    def close(self) -> None:
        self._client.close()
