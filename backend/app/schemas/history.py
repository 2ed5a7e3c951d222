# backend/app/schemas/history.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .product import CamelModel, ProductResponse


class ScanHistoryCreate(BaseModel):
    """Scan history creation schema."""

    barcode: str
    product_data: ProductResponse
    user_id: Optional[str] = None
    is_favorite: bool = False


class ScanHistoryRead(CamelModel):
    """Scan history read schema."""

    id: int
    barcode: str
    product_data: ProductResponse
    scanned_at: datetime
    user_id: Optional[str] = None
    is_favorite: bool = False
