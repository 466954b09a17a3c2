"""Database module for Dreampost.

Provides engine creation, session management, transaction helpers, and ORM models.
Only used when DATABASE_URL selects the SQL-backed store.
"""

from dreampost.db.engine import create_db_engine
from dreampost.db.models import Base, PostcardRow, TradeRow, UserRow
from dreampost.db.session import create_session_factory, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "create_session_factory",
    "transaction",
    # Models
    "Base",
    "UserRow",
    "PostcardRow",
    "TradeRow",
]
