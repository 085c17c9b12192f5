# services/booking_api.py
# Thin adapter for the booking backend (Laravel API).
#
# Configure via env:
#   BOOKING_API_URL      = base url, e.g. https://api.example.com/api
#   BOOKING_API_TOKEN    = Bearer token (Sanctum)
#   BACKEND_TIMEOUT_SEC  = per-request timeout
import logging
from typing import Any, Dict, Optional

import httpx

import config

# httpx logs full request urls at INFO, query strings included (emails)
logging.getLogger("httpx").setLevel(logging.WARNING)


class BackendError(RuntimeError):
    """Backend is not configured, or answered with an unexpected payload."""


class BookingAPI:
    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else config.BOOKING_API_URL).rstrip("/")
        self.token = token if token is not None else config.BOOKING_API_TOKEN
        self.timeout = httpx.Timeout(
            timeout if timeout is not None else config.BACKEND_TIMEOUT_SEC,
            connect=config.BACKEND_CONNECT_TIMEOUT_SEC,
        )
        # tests pass httpx.MockTransport here
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        h = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    async def _request(self, method: str, path: str, *, params=None, json=None) -> Any:
        if not self.base_url:
            raise BackendError("BOOKING_API_URL is not set")

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as http:
            r = await http.request(method, f"{self.base_url}{path}", headers=self._headers(), params=params, json=json)
            r.raise_for_status()
            return r.json()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("POST", path, json=json)


# what a handler converts into {success: false}; json decode errors are ValueError
BACKEND_ERRORS = (httpx.HTTPError, BackendError, ValueError)


def describe_error(e: Exception) -> str:
    """Log-safe error summary: status and path, never the query string or body."""
    if isinstance(e, httpx.HTTPStatusError):
        req = e.request
        return f"HTTP {e.response.status_code} from {req.method} {req.url.path}"
    if isinstance(e, httpx.RequestError):
        try:
            req = e.request
            return f"{type(e).__name__} on {req.method} {req.url.path}: {e}"
        except RuntimeError:
            # .request is unset when the error was raised outside a send()
            return f"{type(e).__name__}: {e}"
    return f"{type(e).__name__}: {e}"
