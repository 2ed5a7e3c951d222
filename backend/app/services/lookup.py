# backend/app/services/lookup.py

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import ValidationError

from app.clients.upcitemdb import BarcodeLookupClient
from app.core.exceptions import LookupValidationException, ProductNotFoundException
from app.schemas.history import ScanHistoryCreate
from app.schemas.lookup import UpstreamItem, UpstreamOffer
from app.schemas.product import ProductResponse, StoreOffer
from app.services.pricing import format_price, mark_best_price, parse_price, stock_flag
from app.storage.base import Storage

logger = logging.getLogger(__name__)


def offer_timestamp(updated_t: Optional[int]) -> datetime:
    """Convert an upstream Unix timestamp; missing or bad values mean now."""
    if updated_t:
        try:
            return datetime.fromtimestamp(updated_t, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Ignoring invalid offer timestamp {updated_t}")
    return datetime.now(timezone.utc)


def normalize_offers(offers: list[UpstreamOffer]) -> list[dict[str, Any]]:
    """Map upstream offers to store records with ordinal ids."""
    stores = []
    for offer in offers:
        price = parse_price(offer.price)
        if price is None:
            logger.warning(f"Dropping offer from {offer.merchant!r} without a usable price: {offer.price!r}")
            continue
        stores.append(
            {
                "id": len(stores) + 1,
                "name": offer.merchant or offer.domain,
                "price": format_price(price),
                "currency": offer.currency or "USD",
                "in_stock": stock_flag(offer.availability),
                "is_best_price": False,
                "updated_at": offer_timestamp(offer.updated_t),
                "link": offer.link,
            }
        )
    return stores


def build_product_response(barcode: str, raw_item: Union[UpstreamItem, dict[str, Any]]) -> ProductResponse:
    """Assemble and validate a ProductResponse from the first matching item.

    Raises LookupValidationException when the item or the result does not fit
    the schema.
    """
    try:
        item = UpstreamItem.model_validate(raw_item)
    except ValidationError as e:
        logger.error(f"Lookup item for {barcode} failed validation: {e}")
        raise LookupValidationException(
            details=e.errors(include_url=False, include_context=False, include_input=False)
        ) from e

    data = {
        "barcode": barcode,
        "title": item.title,
        "brand": item.brand or None,
        "category": item.category or None,
        "description": item.description or None,
        "model": item.model or None,
        "images": item.images,
        "lowest_recorded_price": item.lowest_recorded_price,
        "highest_recorded_price": item.highest_recorded_price,
        "stores": normalize_offers(item.offers),
    }
    try:
        stores = [StoreOffer.model_validate(store) for store in data["stores"]]
        data["stores"] = mark_best_price(stores)
        return ProductResponse.model_validate(data)
    except ValidationError as e:
        logger.error(f"Lookup data for {barcode} failed validation: {e}")
        raise LookupValidationException(
            details=e.errors(include_url=False, include_context=False, include_input=False)
        ) from e


class LookupService:
    """Barcode lookup: cache, upstream API, normalization, persistence, history."""

    def __init__(self, storage: Storage, client: BarcodeLookupClient):
        self.storage = storage
        self.client = client

    async def lookup(self, barcode: str, user_id: Optional[str] = None) -> ProductResponse:
        """Resolve a barcode to a product with per-store prices."""
        cached = await self.storage.get_product_by_barcode(barcode)
        if cached:
            logger.info(f"Cache hit for barcode {barcode}")
            return cached

        logger.info(f"Cache miss for barcode {barcode}, querying lookup API")
        result = await self.client.lookup(barcode)
        if not result.items:
            raise ProductNotFoundException()

        product = build_product_response(barcode, result.items[0])

        await self.storage.save_product(product)
        await self.storage.save_scan_history(
            ScanHistoryCreate(barcode=barcode, product_data=product, user_id=user_id)
        )
        return product
