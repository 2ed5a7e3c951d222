# backend/app/clients/upcitemdb.py

import logging
from typing import Optional

from pydantic import ValidationError

from app.clients.base import BaseAPIClient
from app.config import Settings
from app.core.exceptions import ExternalAPIException
from app.schemas.lookup import UpstreamLookupResponse

logger = logging.getLogger(__name__)


class BarcodeLookupClient(BaseAPIClient):
    """Client for the UPCitemdb lookup endpoint."""

    service_name = "upcitemdb"

    def __init__(self, lookup_url: str, api_key: Optional[str] = None, timeout: float = 30.0):
        super().__init__(base_url=lookup_url, timeout=timeout)
        self.api_key = api_key

    @classmethod
    def from_settings(cls, settings: Settings) -> "BarcodeLookupClient":
        return cls(
            lookup_url=settings.barcode_api_url,
            api_key=settings.barcode_api_key,
            timeout=settings.barcode_api_timeout,
        )

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"user_key": self.api_key, "key_type": "3scale"}

    async def lookup(self, barcode: str) -> UpstreamLookupResponse:
        """Look up a UPC/EAN/ISBN barcode."""
        response = await self.request(
            "GET", self.base_url, params={"upc": barcode}, headers=self._headers()
        )
        try:
            return UpstreamLookupResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unreadable lookup response for {barcode}: {e}")
            raise ExternalAPIException(
                detail="Malformed response from barcode lookup API", status_code=502
            ) from e
