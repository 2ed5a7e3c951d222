# backend/app/models/user.py

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, func
from sqlmodel import Field, SQLModel

from .product import utcnow


class User(SQLModel, table=True):
    """User model."""

    __tablename__ = "users"

    id: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, index=True, unique=True)
    first_name: Optional[str] = Field(default=None)
    last_name: Optional[str] = Field(default=None)
    profile_image_url: Optional[str] = Field(default=None)
    password_hash: Optional[str] = Field(default=None)
    google_id: Optional[str] = Field(default=None, index=True, unique=True)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    )

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def __str__(self) -> str:
        return f"User(id={self.id}, email={self.email})"

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, google_id={self.google_id})"
