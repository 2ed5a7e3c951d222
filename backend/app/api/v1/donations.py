# backend/app/api/v1/donations.py

from typing import Any

from fastapi import APIRouter, Depends

from app.api.deps import get_paypal_client
from app.clients.paypal import PayPalClient
from app.core.exceptions import ServiceUnavailableException
from app.schemas.donation import ClientTokenResponse, OrderCreate

router = APIRouter()


def require_paypal(paypal_client: PayPalClient = Depends(get_paypal_client)) -> PayPalClient:
    if not paypal_client.configured:
        raise ServiceUnavailableException("PayPal is not configured")
    return paypal_client


@router.get("/paypal/setup", response_model=ClientTokenResponse)
async def paypal_setup(paypal_client: PayPalClient = Depends(require_paypal)) -> ClientTokenResponse:
    """Client token for the PayPal JS SDK."""
    return ClientTokenResponse(client_token=await paypal_client.generate_client_token())


@router.post("/order")
async def create_order(
        order: OrderCreate,
        paypal_client: PayPalClient = Depends(require_paypal),
) -> dict[str, Any]:
    return await paypal_client.create_order(order)


@router.post("/order/{order_id}/capture")
async def capture_order(
        order_id: str,
        paypal_client: PayPalClient = Depends(require_paypal),
) -> dict[str, Any]:
    return await paypal_client.capture_order(order_id)
