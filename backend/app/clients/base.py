# backend/app/clients/base.py

import logging
from typing import Any, Optional

import httpx

from app.core.exceptions import ExternalAPIException

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """Base class for clients of third-party HTTP APIs."""

    service_name = "api"

    def __init__(self, base_url: str = "", timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _ensure_client(self) -> None:
        """Ensure HTTP client exists (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                follow_redirects=True,
            )

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client (creates if needed)."""
        self._ensure_client()
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request; failures become ExternalAPIException. No retries."""
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            message = self.error_message(e.response)
            logger.warning(
                f"{self.service_name} request failed: {e.response.status_code} - {message}"
            )
            raise ExternalAPIException(
                detail=message, status_code=e.response.status_code
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"{self.service_name} request error for {url}: {e}")
            raise ExternalAPIException(
                detail=str(e) or "Upstream request failed", status_code=502
            ) from e

    @staticmethod
    def error_message(response: httpx.Response) -> str:
        """Best-effort error text from an upstream error response."""
        try:
            data = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(data, dict):
            for key in ("message", "error_description", "error"):
                if isinstance(data.get(key), str) and data[key]:
                    return data[key]
        return response.text or response.reason_phrase
