# backend/app/schemas/auth.py

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .product import CamelModel
from .user import UserRead


class UserLogin(BaseModel):
    """User login schema."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=70)


class UserRegister(CamelModel):
    """User registration schema."""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=70)
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password doesn't exceed bcrypt 72-byte limit."""
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be less than 72 bytes when encoded.")
        return v


class AuthResponse(BaseModel):
    """User plus bearer token returned after login or registration."""
    user: UserRead
    token: str


class CurrentUserResponse(BaseModel):
    user: UserRead


class GoogleProfile(BaseModel):
    """Subset of the Google userinfo payload."""
    sub: str
    email: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    picture: Optional[str] = None
