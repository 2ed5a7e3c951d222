# backend/app/storage/memory.py

import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.exceptions import UserAlreadyExistsException
from app.models.history import ScanHistory
from app.models.user import User
from app.schemas.history import ScanHistoryCreate
from app.schemas.product import ProductResponse
from app.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class MemStorage:
    """In-process storage; everything is lost on restart."""

    def __init__(self):
        self.products: dict[str, ProductResponse] = {}
        self.history: list[ScanHistory] = []
        self.saved_products: dict[tuple[Optional[str], str], tuple[datetime, ProductResponse]] = {}
        self.users: dict[str, User] = {}
        self.users_by_email: dict[str, User] = {}
        self.users_by_google_id: dict[str, User] = {}
        self._history_id = 1

    async def initialize(self) -> None:
        logger.info("Using in-memory storage")

    async def close(self) -> None:
        pass

    # Products

    async def get_product_by_barcode(self, barcode: str) -> Optional[ProductResponse]:
        product = self.products.get(barcode)
        return product.model_copy(deep=True) if product else None

    async def save_product(self, product: ProductResponse) -> None:
        self.products[product.barcode] = product.model_copy(deep=True)

    # Scan history

    async def get_scan_history(self, user_id: Optional[str] = None) -> list[ScanHistory]:
        entries = self.history
        if user_id:
            entries = [entry for entry in entries if entry.user_id == user_id]
        return sorted(entries, key=lambda entry: (entry.scanned_at, entry.id), reverse=True)

    async def save_scan_history(self, entry: ScanHistoryCreate) -> ScanHistory:
        history = ScanHistory(
            id=self._history_id,
            barcode=entry.barcode,
            product_data=entry.product_data.snapshot(),
            user_id=entry.user_id,
            is_favorite=entry.is_favorite,
            scanned_at=datetime.now(timezone.utc),
        )
        self._history_id += 1
        self.history.append(history)
        return history

    async def clear_scan_history(self, user_id: Optional[str] = None) -> None:
        if user_id:
            self.history = [entry for entry in self.history if entry.user_id != user_id]
        else:
            self.history = []

    # Favorites

    async def get_saved_products(self, user_id: Optional[str] = None) -> list[ProductResponse]:
        items = [
            (saved_at, product)
            for (owner, _), (saved_at, product) in self.saved_products.items()
            if not user_id or owner == user_id
        ]
        items.sort(key=lambda item: item[0], reverse=True)
        return [product.model_copy(deep=True) for _, product in items]

    async def save_product_to_favorites(
        self, product: ProductResponse, user_id: Optional[str] = None
    ) -> None:
        key = (user_id, product.barcode)
        self.saved_products[key] = (datetime.now(timezone.utc), product.model_copy(deep=True))

    async def remove_saved_product(self, barcode: str, user_id: Optional[str] = None) -> None:
        for owner, saved_barcode in list(self.saved_products):
            if saved_barcode != barcode:
                continue
            if user_id and owner != user_id:
                continue
            del self.saved_products[(owner, saved_barcode)]

    async def clear_saved_products(self, user_id: Optional[str] = None) -> None:
        if user_id:
            self.saved_products = {
                key: value for key, value in self.saved_products.items() if key[0] != user_id
            }
        else:
            self.saved_products = {}

    # Users

    async def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return self.users_by_email.get(email)

    async def get_user_by_google_id(self, google_id: str) -> Optional[User]:
        return self.users_by_google_id.get(google_id)

    async def create_user(self, user_data: UserCreate) -> User:
        if user_data.id in self.users:
            raise UserAlreadyExistsException(f"User {user_data.id} already exists")
        if user_data.email and user_data.email in self.users_by_email:
            raise UserAlreadyExistsException()
        if user_data.google_id and user_data.google_id in self.users_by_google_id:
            raise UserAlreadyExistsException("Google account already linked")

        now = datetime.now(timezone.utc)
        user = User(**user_data.model_dump(), created_at=now, updated_at=now)
        self.users[user.id] = user
        if user.email:
            self.users_by_email[user.email] = user
        if user.google_id:
            self.users_by_google_id[user.google_id] = user
        return user

    async def update_user(self, user_id: str, user_update: UserUpdate) -> Optional[User]:
        user = self.users.get(user_id)
        if not user:
            return None

        update_data = user_update.model_dump(exclude_unset=True)

        new_email = update_data.get("email")
        if new_email and new_email != user.email:
            other = self.users_by_email.get(new_email)
            if other and other.id != user_id:
                raise UserAlreadyExistsException()
            if user.email:
                self.users_by_email.pop(user.email, None)
            self.users_by_email[new_email] = user

        new_google_id = update_data.get("google_id")
        if new_google_id and new_google_id != user.google_id:
            other = self.users_by_google_id.get(new_google_id)
            if other and other.id != user_id:
                raise UserAlreadyExistsException("Google account already linked")
            if user.google_id:
                self.users_by_google_id.pop(user.google_id, None)
            self.users_by_google_id[new_google_id] = user

        for field, value in update_data.items():
            setattr(user, field, value)
        user.updated_at = datetime.now(timezone.utc)
        return user
