# backend/app/schemas/product.py

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys for the mobile client."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StoreOffer(CamelModel):
    """Price of a product at one store."""

    id: int
    name: str
    price: str
    currency: str = "USD"
    in_stock: Optional[int] = 1
    is_best_price: bool = False
    updated_at: datetime
    logo: Optional[str] = None
    link: Optional[str] = None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: str) -> str:
        """Price must be a finite decimal in text form."""
        try:
            value = Decimal(v)
        except (InvalidOperation, TypeError):
            raise ValueError(f"Price '{v}' is not a decimal number")
        if not value.is_finite():
            raise ValueError(f"Price '{v}' is not a finite number")
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def default_currency(cls, v: Optional[str]) -> str:
        return v or "USD"

    @property
    def numeric_price(self) -> Decimal:
        return Decimal(self.price)


class ProductResponse(CamelModel):
    """Product with its per-store offers, as returned by a lookup."""

    barcode: str = Field(min_length=1)
    title: str
    brand: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    model: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    lowest_recorded_price: Optional[float] = None
    highest_recorded_price: Optional[float] = None
    stores: list[StoreOffer] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_single_best_price(self) -> "ProductResponse":
        flagged = [store for store in self.stores if store.is_best_price]
        if len(flagged) > 1:
            raise ValueError("Only one store can be marked as best price")
        return self

    @property
    def best_offer(self) -> Optional[StoreOffer]:
        for store in self.stores:
            if store.is_best_price:
                return store
        return None

    def snapshot(self) -> dict:
        """JSON-ready copy for denormalized storage."""
        return self.model_dump(mode="json", by_alias=True)
