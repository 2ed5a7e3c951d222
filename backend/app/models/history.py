# backend/app/models/history.py

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint, func
from sqlmodel import Field, SQLModel

from .product import utcnow


class ScanHistory(SQLModel, table=True):
    """Scan history entry holding a denormalized product snapshot."""

    __tablename__ = "scan_history"

    id: Optional[int] = Field(default=None, primary_key=True)
    barcode: str = Field(index=True)
    product_data: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True, ondelete="CASCADE")
    is_favorite: bool = Field(default=False)
    scanned_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), index=True),
    )

    def __repr__(self) -> str:
        return f"ScanHistory(id={self.id}, barcode={self.barcode}, user_id={self.user_id})"


class SavedProduct(SQLModel, table=True):
    """Favorite product, keyed by (user, barcode)."""

    __tablename__ = "saved_products"
    __table_args__ = (UniqueConstraint("user_id", "barcode", name="uq_saved_products_user_barcode"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True, ondelete="CASCADE")
    barcode: str = Field(index=True)
    product_data: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    saved_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    def __repr__(self) -> str:
        return f"SavedProduct(id={self.id}, barcode={self.barcode}, user_id={self.user_id})"
