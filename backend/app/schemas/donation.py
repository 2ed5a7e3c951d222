# backend/app/schemas/donation.py

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from .product import CamelModel


class OrderCreate(BaseModel):
    """Donation order request."""

    intent: str = "CAPTURE"
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @field_validator("intent")
    @classmethod
    def validate_intent(cls, v: str) -> str:
        intent = v.upper()
        if intent not in ("CAPTURE", "AUTHORIZE"):
            raise ValueError("Intent must be CAPTURE or AUTHORIZE")
        return intent

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class ClientTokenResponse(CamelModel):
    client_token: str
