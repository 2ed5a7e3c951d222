# backend/app/storage/base.py

from typing import Optional, Protocol, runtime_checkable

from app.models.history import ScanHistory
from app.models.user import User
from app.schemas.history import ScanHistoryCreate
from app.schemas.product import ProductResponse
from app.schemas.user import UserCreate, UserUpdate


@runtime_checkable
class Storage(Protocol):
    """Repository of products, scan history, favorites and users.

    ``user_id=None`` means "no user": reads and clears then act on every
    row, not only on anonymous ones.
    """

    async def initialize(self) -> None: ...

    async def close(self) -> None: ...

    # Products
    async def get_product_by_barcode(self, barcode: str) -> Optional[ProductResponse]: ...

    async def save_product(self, product: ProductResponse) -> None: ...

    # Scan history
    async def get_scan_history(self, user_id: Optional[str] = None) -> list[ScanHistory]: ...

    async def save_scan_history(self, entry: ScanHistoryCreate) -> ScanHistory: ...

    async def clear_scan_history(self, user_id: Optional[str] = None) -> None: ...

    # Favorites
    async def get_saved_products(self, user_id: Optional[str] = None) -> list[ProductResponse]: ...

    async def save_product_to_favorites(
        self, product: ProductResponse, user_id: Optional[str] = None
    ) -> None: ...

    async def remove_saved_product(self, barcode: str, user_id: Optional[str] = None) -> None: ...

    async def clear_saved_products(self, user_id: Optional[str] = None) -> None: ...

    # Users
    async def get_user(self, user_id: str) -> Optional[User]: ...

    async def get_user_by_email(self, email: str) -> Optional[User]: ...

    async def get_user_by_google_id(self, google_id: str) -> Optional[User]: ...

    async def create_user(self, user_data: UserCreate) -> User: ...

    async def update_user(self, user_id: str, user_update: UserUpdate) -> Optional[User]: ...
