"""Async REST client for the patient portal backend.

Attaches the in-memory bearer token to every call and turns transport
failures and non-2xx responses into :class:`ApiError`.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, Mapping
import httpx
from .errors import ApiError, NETWORK_ERROR, TIMEOUT
from .models import PortalModel
from .token_store import AuthTokenStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiClient:
    def __init__(self, base_url: str, token_store: AuthTokenStore, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_store = token_store
        self.timeout = timeout

    def _build_headers(self, overrides: Mapping[str, str] | None) -> httpx.Headers:
        headers = httpx.Headers(overrides or {})
        if "content-type" not in headers:
            headers["Content-Type"] = "application/json"
        token = self.token_store.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(self, method: str, url: str, headers: httpx.Headers, body: Any) -> httpx.Response:
        async with httpx.AsyncClient(http2=True, timeout=self.timeout) as client:
            return await client.request(method, url, headers=headers, json=body)

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Perform one call against ``base_url + endpoint`` and return the decoded JSON body.

        Returns ``{}`` for a successful response without a JSON content type.
        """
        if isinstance(body, PortalModel):
            body = body.to_payload()
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, endpoint)

        try:
            # bound the whole exchange, not just each socket operation
            resp = await asyncio.wait_for(
                self._send(method, url, self._build_headers(headers), body),
                timeout=self.timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise ApiError("Request timed out. Please try again.", 0, TIMEOUT) from exc
        except httpx.NetworkError as exc:
            raise ApiError(
                "Unable to connect to the server. Please check your internet connection.",
                0,
                NETWORK_ERROR,
            ) from exc

        if not resp.is_success:
            raise self._error_from_response(endpoint, resp)

        content_type = resp.headers.get("content-type")
        if not content_type or "application/json" not in content_type:
            return {}
        return resp.json()

    def _error_from_response(self, endpoint: str, resp: httpx.Response) -> ApiError:
        message = f"HTTP {resp.status_code}: {resp.reason_phrase}"
        code = None
        try:
            data = resp.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            message = data.get("message") or data.get("error") or message
            if data.get("code") is not None:
                code = str(data["code"])

        if resp.status_code == 401:
            # token is no longer valid; listeners send the user back to login
            self.token_store.clear()

        logger.warning("API error endpoint=%s status=%s code=%s", endpoint, resp.status_code, code)
        return ApiError(str(message), resp.status_code, code)

    async def get(self, endpoint: str, headers: Mapping[str, str] | None = None) -> Any:
        return await self.request(endpoint, headers=headers)

    async def post(self, endpoint: str, body: Any = None, headers: Mapping[str, str] | None = None) -> Any:
        return await self.request(endpoint, method="POST", body=body, headers=headers)
