# backend/app/services/auth.py

import logging
import uuid
from datetime import timedelta
from typing import Optional

from app.core.exceptions import UserAlreadyExistsException
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import User
from app.schemas.auth import GoogleProfile, UserRegister
from app.schemas.user import UserCreate, UserUpdate
from app.storage.base import Storage

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def register(self, user_data: UserRegister) -> User:
        """Create a password user. Raises UserAlreadyExistsException on duplicate email."""
        existing_user = await self.storage.get_user_by_email(user_data.email)
        if existing_user:
            raise UserAlreadyExistsException()

        user = await self.storage.create_user(
            UserCreate(
                id=uuid.uuid4().hex,
                email=user_data.email,
                first_name=user_data.first_name,
                last_name=user_data.last_name,
                password_hash=get_password_hash(user_data.password),
            )
        )
        logger.info(f"Registered user {user.id}")
        return user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Authenticate user by email and password."""
        user = await self.storage.get_user_by_email(email)
        if not user or not user.has_password:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def get_or_create_google_user(self, profile: GoogleProfile) -> User:
        """Find the user for a Google account, creating it on first sign-in."""
        user = await self.storage.get_user_by_google_id(profile.sub)
        if user:
            return user

        if profile.email:
            user = await self.storage.get_user_by_email(profile.email)
            if user:
                logger.info(f"Linking Google account to existing user {user.id}")
                update = UserUpdate(google_id=profile.sub)
                if not user.profile_image_url and profile.picture:
                    update.profile_image_url = profile.picture
                return await self.storage.update_user(user.id, update)

        user = await self.storage.create_user(
            UserCreate(
                id=profile.sub,
                email=profile.email,
                first_name=profile.given_name,
                last_name=profile.family_name,
                profile_image_url=profile.picture,
                google_id=profile.sub,
            )
        )
        logger.info(f"Created user {user.id} from Google sign-in")
        return user

    def create_access_token(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        """Create access token."""
        return create_access_token(user.id, expires_delta, email=user.email)
