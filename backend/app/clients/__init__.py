# backend/app/clients/__init__.py

from .base import BaseAPIClient
from .google import GoogleOAuthClient
from .paypal import PayPalClient
from .upcitemdb import BarcodeLookupClient

__all__ = [
    "BaseAPIClient",
    "BarcodeLookupClient",
    "GoogleOAuthClient",
    "PayPalClient",
]
