# backend/app/clients/paypal.py

import base64
import logging
import time
from decimal import Decimal
from typing import Any, Optional

from app.clients.base import BaseAPIClient
from app.config import Settings
from app.schemas.donation import OrderCreate

logger = logging.getLogger(__name__)


class PayPalClient(BaseAPIClient):
    """Minimal PayPal REST client for donation orders."""

    service_name = "paypal"

    def __init__(self, base_url: str, client_id: str, client_secret: str, timeout: float = 30.0):
        super().__init__(base_url=base_url, timeout=timeout)
        self.client_id = client_id
        self.client_secret = client_secret
        self.access_token: Optional[str] = None
        self.token_expires_at: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "PayPalClient":
        return cls(
            base_url=settings.paypal_base_url,
            client_id=settings.paypal_client_id,
            client_secret=settings.paypal_client_secret,
        )

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _get_basic_auth_header(self) -> str:
        credentials = f"{self.client_id}:{self.client_secret}"
        return base64.b64encode(credentials.encode()).decode()

    async def get_access_token(self) -> str:
        """Get OAuth access token, reusing it until shortly before expiry."""
        if self.access_token and self.token_expires_at and time.time() < self.token_expires_at:
            return self.access_token

        response = await self.request(
            "POST",
            f"{self.base_url}/v1/oauth2/token",
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Authorization": f"Basic {self._get_basic_auth_header()}",
            },
            data={"grant_type": "client_credentials"},
        )
        token_data = response.json()
        self.access_token = token_data["access_token"]
        # Refresh five minutes early
        self.token_expires_at = time.time() + int(token_data.get("expires_in", 0)) - 300
        return self.access_token

    async def _auth_headers(self) -> dict[str, str]:
        access_token = await self.get_access_token()
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    async def generate_client_token(self) -> str:
        response = await self.request(
            "POST",
            f"{self.base_url}/v1/identity/generate-token",
            headers=await self._auth_headers(),
        )
        return response.json()["client_token"]

    async def create_order(self, order: OrderCreate) -> dict[str, Any]:
        payload = {
            "intent": order.intent,
            "purchase_units": [
                {
                    "amount": {
                        "currency_code": order.currency,
                        "value": str(order.amount.quantize(Decimal("0.01"))),
                    }
                }
            ],
        }
        response = await self.request(
            "POST",
            f"{self.base_url}/v2/checkout/orders",
            headers=await self._auth_headers(),
            json=payload,
        )
        data = response.json()
        logger.info(f"Created PayPal order {data.get('id')}")
        return data

    async def capture_order(self, order_id: str) -> dict[str, Any]:
        response = await self.request(
            "POST",
            f"{self.base_url}/v2/checkout/orders/{order_id}/capture",
            headers=await self._auth_headers(),
        )
        data = response.json()
        logger.info(f"Captured PayPal order {order_id}: {data.get('status')}")
        return data
