# backend/app/api/v1/profile.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user, get_storage
from app.core.exceptions import UserNotFoundException
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserRead, UserUpdate
from app.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UserRead)
async def get_profile(
        current_user: User = Depends(get_current_user),
        storage: Storage = Depends(get_storage),
) -> UserRead:
    """Get current user profile."""
    try:
        user = await storage.get_user(current_user.id)
    except Exception as e:
        logger.exception(f"Error retrieving profile {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve user profile",
        )
    if not user:
        raise UserNotFoundException()
    return UserRead.model_validate(user, from_attributes=True)


@router.patch("", response_model=UserRead)
async def update_profile(
        profile_update: ProfileUpdate,
        current_user: User = Depends(get_current_user),
        storage: Storage = Depends(get_storage),
) -> UserRead:
    """Update current user's name."""
    user_update = UserUpdate(**profile_update.model_dump(exclude_unset=True))

    try:
        updated_user = await storage.update_user(current_user.id, user_update)
    except Exception as e:
        logger.exception(f"Error updating profile {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update user profile",
        )
    if not updated_user:
        raise UserNotFoundException()
    return UserRead.model_validate(updated_user, from_attributes=True)
