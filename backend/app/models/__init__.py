# backend/app/models/__init__.py

from .history import SavedProduct, ScanHistory
from .product import Price, Product, Store
from .user import User

__all__ = [
    "User",
    "Product",
    "Store",
    "Price",
    "ScanHistory",
    "SavedProduct",
]
