# backend/app/api/deps.py

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from app.clients.google import GoogleOAuthClient
from app.clients.paypal import PayPalClient
from app.clients.upcitemdb import BarcodeLookupClient
from app.core.security import decode_token
from app.models.user import User
from app.services.auth import AuthService
from app.services.lookup import LookupService
from app.storage.base import Storage

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

SESSION_USER_KEY = "user_id"


def get_storage(request: Request) -> Storage:
    """Storage built at startup."""
    return request.app.state.storage


def get_barcode_client(request: Request) -> BarcodeLookupClient:
    return request.app.state.barcode_client


def get_google_client(request: Request) -> GoogleOAuthClient:
    return request.app.state.google_client


def get_paypal_client(request: Request) -> PayPalClient:
    return request.app.state.paypal_client


def get_auth_service(storage: Storage = Depends(get_storage)) -> AuthService:
    return AuthService(storage)


def get_lookup_service(
        storage: Storage = Depends(get_storage),
        client: BarcodeLookupClient = Depends(get_barcode_client),
) -> LookupService:
    return LookupService(storage, client)


async def get_optional_user(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        storage: Storage = Depends(get_storage),
) -> Optional[User]:
    """Session user, else bearer token user, else None."""
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id:
        user = await storage.get_user(user_id)
        if user:
            return user
        request.session.pop(SESSION_USER_KEY, None)

    if credentials is None:
        return None

    try:
        payload = decode_token(credentials.credentials)
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None

    if payload.get("type") != "access" or not payload.get("sub"):
        return None
    return await storage.get_user(str(payload["sub"]))


async def get_current_user(
        user: Optional[User] = Depends(get_optional_user),
) -> User:
    """Get current authenticated user."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
