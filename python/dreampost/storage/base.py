"""Repository interface for users, postcards, and trades.

Every store allocates integer ids per collection starting at 1 and never
reuses them. Lookups report "not found" by returning None; nothing here
raises for a missing record. Usernames are unique: create_user raises
UsernameTakenError atomically, however many registrations race.

Ordering rules shared by all implementations:
- "newest first" means created_at descending, then id descending
- public postcards sort by likes descending, then newest first
"""

from abc import ABC, abstractmethod

from dreampost.schemas.postcard import Postcard, PostcardCreate
from dreampost.schemas.trade import Trade, TradeCreate
from dreampost.schemas.user import User, UserCreate

DEFAULT_PUBLIC_LIMIT = 20
DEFAULT_TRADE_COUNT = 2


class UsernameTakenError(Exception):
    """Raised by create_user when the username already exists."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already taken")


class StorageBase(ABC):
    """Abstract base class for store implementations."""

    # =========================================================================
    # Users
    # =========================================================================

    @abstractmethod
    def get_user(self, user_id: int) -> User | None:
        """Get a user by id."""
        ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> User | None:
        """Get a user by exact username."""
        ...

    @abstractmethod
    def create_user(self, data: UserCreate) -> User:
        """Insert a user with a fresh id and no lastSleepAt.

        Raises:
            UsernameTakenError: If the username already exists.
        """
        ...

    @abstractmethod
    def update_user_last_sleep(self, user_id: int) -> User | None:
        """Stamp lastSleepAt with the current time.

        Returns:
            The updated user, or None if the id is unknown.
        """
        ...

    # =========================================================================
    # Postcards
    # =========================================================================

    @abstractmethod
    def get_postcard(self, postcard_id: int) -> Postcard | None:
        """Get a postcard by id."""
        ...

    @abstractmethod
    def get_postcards_by_user_id(self, user_id: int) -> list[Postcard]:
        """All postcards owned by a user, newest first."""
        ...

    @abstractmethod
    def get_public_postcards(self, limit: int = DEFAULT_PUBLIC_LIMIT) -> list[Postcard]:
        """Public postcards by likes descending, then newest first, at most limit."""
        ...

    @abstractmethod
    def create_postcard(self, data: PostcardCreate) -> Postcard:
        """Insert a postcard with createdAt = now and likes = 0."""
        ...

    @abstractmethod
    def like_postcard(self, postcard_id: int) -> Postcard | None:
        """Atomically add exactly one like.

        Returns:
            The updated postcard, or None if the id is unknown.
        """
        ...

    # =========================================================================
    # Trades
    # =========================================================================

    @abstractmethod
    def create_trade(self, data: TradeCreate) -> Trade:
        """Insert a trade record with createdAt = now."""
        ...

    @abstractmethod
    def get_trades_by_user_id(self, user_id: int) -> list[Trade]:
        """Trades where the user is either side, newest first."""
        ...

    @abstractmethod
    def get_random_postcards_for_trade(
        self, user_id: int, count: int = DEFAULT_TRADE_COUNT
    ) -> list[Postcard]:
        """Up to count distinct public postcards not owned by user_id.

        Selection is a uniform random permutation of the eligible set.
        Postcards the user already traded for are not excluded.
        """
        ...

    def close(self) -> None:
        """Release backing resources. No-op by default."""
        return None
