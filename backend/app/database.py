# backend/app/database.py

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.config import Settings


def create_engine_from_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create async engine for a postgresql+asyncpg or sqlite+aiosqlite URL."""
    if database_url.startswith("sqlite"):
        # in-memory sqlite must share one connection across sessions
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=300,
    )


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    return create_engine_from_url(settings.async_database_url, echo=settings.debug)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session maker."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create database tables."""
    # register every table on the metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
