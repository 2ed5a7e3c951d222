# backend/app/schemas/user.py

from typing import Optional

from pydantic import BaseModel, EmailStr, model_validator

from .product import CamelModel


class UserCreate(BaseModel):
    """User creation schema."""

    id: str
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    password_hash: Optional[str] = None
    google_id: Optional[str] = None

    @model_validator(mode="after")
    def require_credential(self) -> "UserCreate":
        """A user needs a password or a Google account to sign in with."""
        if not self.password_hash and not self.google_id:
            raise ValueError("User must have a password or a Google account")
        return self


class UserUpdate(BaseModel):
    """User update schema."""

    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    google_id: Optional[str] = None


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own profile."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserRead(CamelModel):
    """User read schema."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
