# backend/app/schemas/lookup.py

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class UpstreamSchema(BaseModel):
    """Tolerant base for UPCitemdb payloads: unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


class UpstreamOffer(UpstreamSchema):
    """One merchant offer inside an UPCitemdb item."""

    merchant: Optional[str] = None
    domain: Optional[str] = None
    title: Optional[str] = None
    currency: Optional[str] = None
    list_price: Optional[Any] = None
    price: Optional[Any] = None
    shipping: Optional[str] = None
    condition: Optional[str] = None
    availability: Optional[str] = None
    link: Optional[str] = None
    image: Optional[str] = None
    updated_t: Optional[int] = None


class UpstreamItem(UpstreamSchema):
    """A product matched by UPCitemdb."""

    ean: Optional[str] = None
    upc: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    category: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    lowest_recorded_price: Optional[float] = None
    highest_recorded_price: Optional[float] = None
    offers: list[UpstreamOffer] = Field(default_factory=list)


class UpstreamLookupResponse(UpstreamSchema):
    """Envelope of an UPCitemdb lookup response."""

    code: Optional[str] = None
    total: int = 0
    # items are validated one at a time by the lookup service
    items: list[Any] = Field(default_factory=list)
