# backend/app/models/product.py

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint, func
from sqlmodel import Field, Relationship, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(SQLModel, table=True):
    """Product model."""

    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    barcode: str = Field(index=True, unique=True)
    title: str
    brand: Optional[str] = Field(default=None, index=True)
    category: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    model: Optional[str] = Field(default=None)
    images: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    lowest_recorded_price: Optional[float] = Field(default=None)
    highest_recorded_price: Optional[float] = Field(default=None)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime(timezone=True), onupdate=func.now(), nullable=True
        ),
    )

    # Relationships
    prices: list["Price"] = Relationship(back_populates="product")

    def __str__(self) -> str:
        return f"Product(barcode={self.barcode}, title={self.title})"

    def __repr__(self) -> str:
        return f"Product(id={self.id}, barcode={self.barcode}, title={self.title})"


class Store(SQLModel, table=True):
    """Store model."""

    __tablename__ = "stores"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    logo: Optional[str] = Field(default=None)
    link: Optional[str] = Field(default=None)

    # Relationships
    prices: list["Price"] = Relationship(back_populates="store")

    def __repr__(self) -> str:
        return f"Store(id={self.id}, name={self.name})"


class Price(SQLModel, table=True):
    """Price of a product at a store; one row per (product, store)."""

    __tablename__ = "prices"
    __table_args__ = (UniqueConstraint("product_id", "store_id", name="uq_prices_product_store"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True, ondelete="CASCADE")
    store_id: int = Field(foreign_key="stores.id", index=True, ondelete="CASCADE")
    price: str
    currency: str = Field(default="USD", max_length=3)
    in_stock: int = Field(default=1)
    link: Optional[str] = Field(default=None)
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    # Relationships
    product: Product = Relationship(back_populates="prices")
    store: Store = Relationship(back_populates="prices")

    def __str__(self) -> str:
        return f"Price(product_id={self.product_id}, store_id={self.store_id}, price={self.price})"

    def __repr__(self) -> str:
        return (
            f"Price(id={self.id}, product_id={self.product_id}, "
            f"store_id={self.store_id}, price={self.price} {self.currency})"
        )
