# backend/app/storage/database.py

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, desc, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.exceptions import UserAlreadyExistsException
from app.database import create_session_maker, create_tables
from app.models.history import SavedProduct, ScanHistory
from app.models.product import Price, Product, Store
from app.models.user import User
from app.schemas.history import ScanHistoryCreate
from app.schemas.product import ProductResponse, StoreOffer
from app.schemas.user import UserCreate, UserUpdate
from app.services.pricing import mark_best_price

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """sqlite drops the offset of timezone-aware columns; stored values are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DatabaseStorage:
    """Relational storage on SQLAlchemy's async engine."""

    def __init__(self, engine: AsyncEngine, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self.engine = engine
        self.session_maker = session_maker or create_session_maker(engine)

    async def initialize(self) -> None:
        logger.info(f"Using database storage ({self.engine.url.get_backend_name()})")
        await create_tables(self.engine)

    async def close(self) -> None:
        await self.engine.dispose()

    # Products

    async def get_product_by_barcode(self, barcode: str) -> Optional[ProductResponse]:
        async with self.session_maker() as session:
            result = await session.execute(select(Product).where(Product.barcode == barcode))
            product = result.scalar_one_or_none()
            if product is None:
                return None

            stmt = (
                select(Price, Store)
                .join(Store, Price.store_id == Store.id)
                .where(Price.product_id == product.id)
                .order_by(Price.id)
            )
            rows = (await session.execute(stmt)).all()

        stores = [
            StoreOffer(
                id=index,
                name=store.name,
                price=price.price,
                currency=price.currency,
                in_stock=price.in_stock,
                updated_at=as_utc(price.updated_at),
                logo=store.logo,
                link=price.link or store.link,
            )
            for index, (price, store) in enumerate(rows, start=1)
        ]
        mark_best_price(stores)

        return ProductResponse(
            barcode=product.barcode,
            title=product.title,
            brand=product.brand,
            category=product.category,
            description=product.description,
            model=product.model,
            images=list(product.images or []),
            lowest_recorded_price=product.lowest_recorded_price,
            highest_recorded_price=product.highest_recorded_price,
            stores=stores,
        )

    async def save_product(self, product: ProductResponse) -> None:
        """Upsert product, its stores and their prices in one transaction."""
        async with self.session_maker() as session:
            async with session.begin():
                result = await session.execute(
                    select(Product).where(Product.barcode == product.barcode)
                )
                db_product = result.scalar_one_or_none()
                if db_product is None:
                    db_product = Product(barcode=product.barcode, title=product.title)
                    session.add(db_product)

                db_product.title = product.title
                db_product.brand = product.brand or None
                db_product.category = product.category or None
                db_product.description = product.description
                db_product.model = product.model
                db_product.images = list(product.images)
                db_product.lowest_recorded_price = product.lowest_recorded_price
                db_product.highest_recorded_price = product.highest_recorded_price
                await session.flush()

                for offer in product.stores:
                    store = await self._upsert_store(session, offer)
                    await self._upsert_price(session, db_product.id, store.id, offer)

        logger.debug(f"Saved product {product.barcode} with {len(product.stores)} offers")

    async def _upsert_store(self, session: AsyncSession, offer: StoreOffer) -> Store:
        result = await session.execute(select(Store).where(Store.name == offer.name))
        store = result.scalar_one_or_none()
        if store is None:
            store = Store(name=offer.name, logo=offer.logo, link=offer.link)
            session.add(store)
            await session.flush()
            return store

        if offer.logo and store.logo != offer.logo:
            store.logo = offer.logo
        if offer.link and store.link != offer.link:
            store.link = offer.link
        return store

    async def _upsert_price(
        self, session: AsyncSession, product_id: int, store_id: int, offer: StoreOffer
    ) -> Price:
        result = await session.execute(
            select(Price).where(Price.product_id == product_id, Price.store_id == store_id)
        )
        price = result.scalar_one_or_none()
        if price is None:
            price = Price(product_id=product_id, store_id=store_id, price=offer.price)
            session.add(price)

        price.price = offer.price
        price.currency = offer.currency
        price.in_stock = offer.in_stock if offer.in_stock is not None else 1
        price.link = offer.link
        price.updated_at = offer.updated_at
        await session.flush()
        return price

    # Scan history

    async def get_scan_history(self, user_id: Optional[str] = None) -> list[ScanHistory]:
        stmt = select(ScanHistory)
        if user_id:
            stmt = stmt.where(ScanHistory.user_id == user_id)
        stmt = stmt.order_by(desc(ScanHistory.scanned_at), desc(ScanHistory.id))

        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def save_scan_history(self, entry: ScanHistoryCreate) -> ScanHistory:
        history = ScanHistory(
            barcode=entry.barcode,
            product_data=entry.product_data.snapshot(),
            user_id=entry.user_id,
            is_favorite=entry.is_favorite,
            scanned_at=datetime.now(timezone.utc),
        )
        async with self.session_maker() as session:
            session.add(history)
            await session.commit()
            await session.refresh(history)
        return history

    async def clear_scan_history(self, user_id: Optional[str] = None) -> None:
        stmt = delete(ScanHistory)
        if user_id:
            stmt = stmt.where(ScanHistory.user_id == user_id)

        async with self.session_maker() as session:
            await session.execute(stmt)
            await session.commit()

    # Favorites

    async def get_saved_products(self, user_id: Optional[str] = None) -> list[ProductResponse]:
        stmt = select(SavedProduct)
        if user_id:
            stmt = stmt.where(SavedProduct.user_id == user_id)
        stmt = stmt.order_by(desc(SavedProduct.saved_at), desc(SavedProduct.id))

        async with self.session_maker() as session:
            result = await session.execute(stmt)
            saved = result.scalars().all()
        return [ProductResponse.model_validate(item.product_data) for item in saved]

    async def save_product_to_favorites(
        self, product: ProductResponse, user_id: Optional[str] = None
    ) -> None:
        # NULL user ids never collide in the unique index, so match explicitly
        owner_clause = SavedProduct.user_id == user_id if user_id else SavedProduct.user_id.is_(None)

        async with self.session_maker() as session:
            async with session.begin():
                result = await session.execute(
                    select(SavedProduct).where(SavedProduct.barcode == product.barcode, owner_clause)
                )
                saved = result.scalar_one_or_none()
                if saved is None:
                    saved = SavedProduct(
                        barcode=product.barcode,
                        user_id=user_id,
                        product_data=product.snapshot(),
                    )
                    session.add(saved)
                else:
                    saved.product_data = product.snapshot()
                    saved.saved_at = datetime.now(timezone.utc)

    async def remove_saved_product(self, barcode: str, user_id: Optional[str] = None) -> None:
        stmt = delete(SavedProduct).where(SavedProduct.barcode == barcode)
        if user_id:
            stmt = stmt.where(SavedProduct.user_id == user_id)

        async with self.session_maker() as session:
            await session.execute(stmt)
            await session.commit()

    async def clear_saved_products(self, user_id: Optional[str] = None) -> None:
        stmt = delete(SavedProduct)
        if user_id:
            stmt = stmt.where(SavedProduct.user_id == user_id)

        async with self.session_maker() as session:
            await session.execute(stmt)
            await session.commit()

    # Users

    async def get_user(self, user_id: str) -> Optional[User]:
        async with self.session_maker() as session:
            return await session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        async with self.session_maker() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    async def get_user_by_google_id(self, google_id: str) -> Optional[User]:
        async with self.session_maker() as session:
            result = await session.execute(select(User).where(User.google_id == google_id))
            return result.scalar_one_or_none()

    async def create_user(self, user_data: UserCreate) -> User:
        now = datetime.now(timezone.utc)
        user = User(**user_data.model_dump(), created_at=now, updated_at=now)

        clauses = [User.id == user.id]
        if user.email:
            clauses.append(User.email == user.email)
        if user.google_id:
            clauses.append(User.google_id == user.google_id)

        async with self.session_maker() as session:
            conflict = await session.execute(select(User.id).where(or_(*clauses)))
            if conflict.first() is not None:
                raise UserAlreadyExistsException()

            session.add(user)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise UserAlreadyExistsException() from e
            await session.refresh(user)
        return user

    async def update_user(self, user_id: str, user_update: UserUpdate) -> Optional[User]:
        async with self.session_maker() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None

            update_data = user_update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                setattr(user, field, value)
            user.updated_at = datetime.now(timezone.utc)

            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise UserAlreadyExistsException() from e
            await session.refresh(user)
        return user
