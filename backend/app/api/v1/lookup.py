# backend/app/api/v1/lookup.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status

from app.api.deps import get_lookup_service, get_optional_user
from app.core.exceptions import PriceScanException
from app.models.user import User
from app.schemas.product import ProductResponse
from app.services.lookup import LookupService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{barcode}", response_model=ProductResponse)
async def lookup_barcode(
        barcode: str = Path(..., min_length=1, max_length=64),
        lookup_service: LookupService = Depends(get_lookup_service),
        current_user: Optional[User] = Depends(get_optional_user),
) -> ProductResponse:
    """Look up a barcode, serving cached products without calling the API."""
    try:
        return await lookup_service.lookup(
            barcode.strip(), user_id=current_user.id if current_user else None
        )
    except PriceScanException:
        raise
    except Exception as e:
        logger.exception(f"Error looking up barcode {barcode}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        )
