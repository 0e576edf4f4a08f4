# storefront/api.py

"""
MARKETPLACE API CLIENT (STOREFRONT SIDE)

Thin JSON-over-HTTP client for the marketplace API.

Every response body is the versioned envelope:
    {"version": 1, "success": true,  "data": ...}
    {"version": 1, "success": false, "code": "...", "message": "...", "errors": ...}

Rules:
- success -> `data` is returned
- success false (any HTTP status) -> ApiError with the server's message as-is
- no response at all (DNS, refused, timeout) or a body that is not the
  envelope -> NetworkError
- no retries
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

logger = logging.getLogger(__name__)

ENVELOPE_VERSION = 1


class NetworkError(Exception):
    """The server could not be reached or answered with something unreadable."""


class ApiError(Exception):
    """The server answered with a failure envelope."""

    def __init__(self, *, code: str, message: str, status: int, errors=None):
        self.code = code
        self.message = message
        self.status = status
        self.errors = errors or {}
        super().__init__(message)


def _json_default(value):
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _parse_envelope(raw: str, *, status: int) -> dict[str, Any]:
    try:
        parsed = json.loads(raw or "")
    except ValueError as exc:
        raise NetworkError(f"Non-JSON response (HTTP {status}).") from exc

    if not isinstance(parsed, dict) or "success" not in parsed:
        raise NetworkError(f"Unexpected response shape (HTTP {status}).")
    if parsed.get("version") != ENVELOPE_VERSION:
        raise NetworkError(f"Unsupported envelope version: {parsed.get('version')!r}")
    return parsed


class MarketplaceApiClient:
    def __init__(self, base_url: str, *, token: str | None = None, timeout: int = 15):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _request(self, method: str, path: str, *, body: dict | None = None, query: dict | None = None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        if query:
            url = f"{url}?{urlencode({k: v for k, v in query.items() if v is not None})}"

        data = None
        if body is not None:
            data = json.dumps(body, ensure_ascii=False, default=_json_default).encode("utf-8")

        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        req = Request(url, data=data, headers=headers, method=method)

        try:
            with urlopen(req, timeout=self.timeout) as resp:
                status = resp.status
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            status = e.code
            try:
                raw = e.read().decode("utf-8", errors="replace")
            except OSError:
                raw = ""
        except (URLError, OSError) as e:
            logger.warning("API unreachable", extra={"url": url, "error": str(e)})
            raise NetworkError(str(e)) from e

        envelope = _parse_envelope(raw, status=status)
        if not envelope["success"]:
            raise ApiError(
                code=str(envelope.get("code") or "error"),
                message=str(envelope.get("message") or ""),
                status=status,
                errors=envelope.get("errors"),
            )
        return envelope.get("data")

    # ---------------- endpoints ----------------

    def list_products(self, *, q: str | None = None, farmer: str | None = None) -> list:
        return self._request("GET", "/api/products/", query={"q": q, "farmer": farmer})

    def me(self) -> dict:
        return self._request("GET", "/api/auth/me/")

    def check_coupon(self, code: str, cart_total) -> dict:
        return self._request(
            "POST",
            "/api/coupons/check/",
            body={"code": code, "cartTotal": str(cart_total)},
        )

    def place_order(self, payload: dict) -> dict:
        return self._request("POST", "/api/orders/", body=payload)
