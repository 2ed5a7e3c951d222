# backend/app/api/v1/saved.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_optional_user, get_storage
from app.models.user import User
from app.schemas.product import ProductResponse
from app.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _owner(user: Optional[User]) -> Optional[str]:
    return user.id if user else None


@router.get("", response_model=list[ProductResponse])
async def list_saved_products(
        storage: Storage = Depends(get_storage),
        current_user: Optional[User] = Depends(get_optional_user),
) -> list[ProductResponse]:
    """List saved products, newest first."""
    try:
        return await storage.get_saved_products(_owner(current_user))
    except Exception as e:
        logger.exception(f"Error retrieving saved products: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve saved products",
        )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def save_product(
        product: ProductResponse,
        storage: Storage = Depends(get_storage),
        current_user: Optional[User] = Depends(get_optional_user),
) -> ProductResponse:
    """Save a product to favorites, replacing an earlier save of the same barcode."""
    try:
        await storage.save_product_to_favorites(product, _owner(current_user))
        return product
    except Exception as e:
        logger.exception(f"Error saving product {product.barcode}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save product",
        )


@router.post("/clear")
async def clear_saved_products(
        storage: Storage = Depends(get_storage),
        current_user: Optional[User] = Depends(get_optional_user),
) -> dict[str, str]:
    try:
        await storage.clear_saved_products(_owner(current_user))
        return {"message": "Saved products cleared successfully"}
    except Exception as e:
        logger.exception(f"Error clearing saved products: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to clear saved products",
        )


@router.delete("/{barcode}")
async def remove_saved_product(
        barcode: str,
        storage: Storage = Depends(get_storage),
        current_user: Optional[User] = Depends(get_optional_user),
) -> dict[str, str]:
    try:
        await storage.remove_saved_product(barcode, _owner(current_user))
        return {"message": "Product removed from saved items"}
    except Exception as e:
        logger.exception(f"Error removing saved product {barcode}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove saved product",
        )
