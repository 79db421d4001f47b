# client/api.py
"""
Async HTTP client for the Fresh Breeze Basket API.

Every request carries the bearer token and the tenant subdomain held by the
shared ``TenantContext``; success envelopes are unwrapped to their ``data``.
"""

from typing import Any, Optional

import httpx

from core.logging_config import logger
from core.tenant import TenantContext

TENANT_HEADER = "X-Tenant-Subdomain"


class ApiClientError(Exception):
    """Raised for transport failures and error envelopes."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient:
    def __init__(
        self,
        base_url: str,
        context: TenantContext,
        timeout: float = 15,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.context = context
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def headers(self) -> dict:
        headers = {}
        if self.context.token:
            headers["Authorization"] = f"Bearer {self.context.token}"
        if self.context.tenant_subdomain:
            headers[TENANT_HEADER] = self.context.tenant_subdomain
        return headers

    # ---------------------------------------------------------
    # Raw request / envelope handling
    # ---------------------------------------------------------
    async def request_body(self, method: str, path: str, **kwargs) -> dict:
        """Full response body; error envelopes raise ApiClientError."""
        headers = {**self.headers(), **kwargs.pop("headers", {})}
        try:
            client = await self._get_client()
            response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException:
            raise ApiClientError(f"Request to {path} timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            raise ApiClientError(f"Cannot reach API at {self.base_url}: {e}")

        try:
            body = response.json()
        except ValueError:
            raise ApiClientError(f"Unexpected response from {path}", response.status_code)

        if response.is_error or (isinstance(body, dict) and body.get("success") is False):
            error = body.get("error") if isinstance(body, dict) else None
            message = (error or {}).get("message") or f"Request failed with status {response.status_code}"
            raise ApiClientError(message, response.status_code)

        return body

    async def request(self, method: str, path: str, **kwargs) -> Any:
        body = await self.request_body(method, path, **kwargs)
        return body.get("data") if isinstance(body, dict) and "data" in body else body

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    # ---------------------------------------------------------
    # Tenant lookup (TenantResolver callable)
    # ---------------------------------------------------------
    async def company_by_slug(self, slug: str) -> Optional[dict]:
        try:
            return await self.request_body("GET", f"/companies/by-slug/{slug}")
        except ApiClientError as e:
            logger.warning(f"[Tenant] Lookup for {slug} failed: {e.message}")
            return None
