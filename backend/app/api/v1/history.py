# backend/app/api/v1/history.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_optional_user, get_storage
from app.models.user import User
from app.schemas.history import ScanHistoryRead
from app.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[ScanHistoryRead])
async def get_history(
        storage: Storage = Depends(get_storage),
        current_user: Optional[User] = Depends(get_optional_user),
) -> list[ScanHistoryRead]:
    """Scan history of the current user, or all history when anonymous."""
    try:
        history = await storage.get_scan_history(current_user.id if current_user else None)
        return [ScanHistoryRead.model_validate(entry, from_attributes=True) for entry in history]
    except Exception as e:
        logger.exception(f"Error retrieving scan history: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve scan history",
        )


@router.post("/clear")
async def clear_history(
        storage: Storage = Depends(get_storage),
        current_user: Optional[User] = Depends(get_optional_user),
) -> dict[str, str]:
    """Clear the current user's history, or all history when anonymous."""
    try:
        if current_user:
            await storage.clear_scan_history(current_user.id)
            return {"message": "Your scan history cleared successfully"}

        await storage.clear_scan_history()
        return {"message": "Scan history cleared successfully"}
    except Exception as e:
        logger.exception(f"Error clearing scan history: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to clear scan history",
        )
