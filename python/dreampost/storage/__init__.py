"""Persistence for users, postcards, and trades.

Provides:
- StorageBase: the repository interface every store implements
- MemStorage: process-local dicts (default)
- SqlStorage: SQLAlchemy-backed, selected by DATABASE_URL
- seed_demo_data: demo users and postcards for local development
"""

from dreampost.config import Settings
from dreampost.db.engine import create_db_engine
from dreampost.storage.base import (
    DEFAULT_PUBLIC_LIMIT,
    DEFAULT_TRADE_COUNT,
    StorageBase,
    UsernameTakenError,
)
from dreampost.storage.memory import MemStorage
from dreampost.storage.seed import seed_demo_data
from dreampost.storage.sql import SqlStorage


def create_storage(settings: Settings) -> StorageBase:
    """Build the store selected by configuration.

    Returns:
        SqlStorage (schema created if missing) when DATABASE_URL is set,
        MemStorage otherwise.
    """
    if settings.database_url:
        storage = SqlStorage(create_db_engine(settings.database_url))
        storage.create_schema()
        return storage
    return MemStorage()


__all__ = [
    "StorageBase",
    "UsernameTakenError",
    "MemStorage",
    "SqlStorage",
    "create_storage",
    "seed_demo_data",
    "DEFAULT_PUBLIC_LIMIT",
    "DEFAULT_TRADE_COUNT",
]
