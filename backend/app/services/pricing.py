# backend/app/services/pricing.py

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.schemas.product import StoreOffer

CENTS = Decimal("0.01")
OUT_OF_STOCK_MARKERS = ("out of stock", "unavailable", "sold out")


def parse_price(value: Any) -> Optional[Decimal]:
    """Parse an upstream price (number or text) into a two-place Decimal."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        price = Decimal(text)
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price.quantize(CENTS)


def format_price(price: Decimal) -> str:
    return str(price.quantize(CENTS))


def stock_flag(availability: Optional[str]) -> int:
    """Map upstream availability text to 1 (in stock) or 0."""
    if not availability:
        return 1
    text = availability.strip().lower()
    return 0 if any(marker in text for marker in OUT_OF_STOCK_MARKERS) else 1


def mark_best_price(stores: list[StoreOffer]) -> list[StoreOffer]:
    """Flag the cheapest offer; the first one wins on ties."""
    best_index = None
    best_price = None
    for index, store in enumerate(stores):
        store.is_best_price = False
        price = store.numeric_price
        if best_price is None or price < best_price:
            best_price = price
            best_index = index
    if best_index is not None:
        stores[best_index].is_best_price = True
    return stores
