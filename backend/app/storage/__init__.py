# backend/app/storage/__init__.py

from app.config import Settings
from app.database import create_engine_from_settings

from .base import Storage
from .database import DatabaseStorage
from .memory import MemStorage


def create_storage(settings: Settings) -> Storage:
    """Database storage when a database URL is configured, memory otherwise."""
    if settings.database_url:
        return DatabaseStorage(create_engine_from_settings(settings))
    return MemStorage()


__all__ = [
    "Storage",
    "DatabaseStorage",
    "MemStorage",
    "create_storage",
]
