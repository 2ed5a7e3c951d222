# backend/app/schemas/__init__.py

from .auth import AuthResponse, CurrentUserResponse, GoogleProfile, UserLogin, UserRegister
from .donation import ClientTokenResponse, OrderCreate
from .history import ScanHistoryCreate, ScanHistoryRead
from .lookup import UpstreamItem, UpstreamLookupResponse, UpstreamOffer
from .product import ProductResponse, StoreOffer
from .user import ProfileUpdate, UserCreate, UserRead, UserUpdate

__all__ = [
    "AuthResponse",
    "CurrentUserResponse",
    "GoogleProfile",
    "UserLogin",
    "UserRegister",
    "ClientTokenResponse",
    "OrderCreate",
    "ScanHistoryCreate",
    "ScanHistoryRead",
    "UpstreamItem",
    "UpstreamLookupResponse",
    "UpstreamOffer",
    "ProductResponse",
    "StoreOffer",
    "ProfileUpdate",
    "UserCreate",
    "UserRead",
    "UserUpdate",
]
