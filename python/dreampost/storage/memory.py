"""In-memory store.

Keyed dicts shared by every request in the process. Sync route handlers
run in a threadpool, so every read-modify-write happens under one lock;
two simultaneous likes both land.

Not durable: everything is lost on restart.
"""

import itertools
import random
import threading
from datetime import UTC, datetime

from dreampost.schemas.postcard import Postcard, PostcardCreate
from dreampost.schemas.trade import Trade, TradeCreate
from dreampost.schemas.user import User, UserCreate
from dreampost.storage.base import (
    DEFAULT_PUBLIC_LIMIT,
    DEFAULT_TRADE_COUNT,
    StorageBase,
    UsernameTakenError,
)


def _now() -> datetime:
    return datetime.now(UTC)


def _newest_first(record: Postcard | Trade) -> tuple[datetime, int]:
    return (record.created_at, record.id)


class MemStorage(StorageBase):
    """Dict-backed store.

    Args:
        rng: Random source for trade candidates. Tests pass a seeded one.
    """

    def __init__(self, rng: random.Random | None = None):
        self._users: dict[int, User] = {}
        self._postcards: dict[int, Postcard] = {}
        self._trades: dict[int, Trade] = {}
        self._user_ids = itertools.count(1)
        self._postcard_ids = itertools.count(1)
        self._trade_ids = itertools.count(1)
        self._lock = threading.Lock()
        self._rng = rng or random.Random()

    # Users

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        with self._lock:
            users = list(self._users.values())
        return next((u for u in users if u.username == username), None)

    def create_user(self, data: UserCreate) -> User:
        with self._lock:
            if any(u.username == data.username for u in self._users.values()):
                raise UsernameTakenError(data.username)
            user = User(
                id=next(self._user_ids),
                username=data.username,
                password=data.password,
                timezone=data.timezone,
                last_sleep_at=None,
            )
            self._users[user.id] = user
        return user

    def update_user_last_sleep(self, user_id: int) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = user.model_copy(update={"last_sleep_at": _now()})
            self._users[user_id] = updated
        return updated

    # Postcards

    def get_postcard(self, postcard_id: int) -> Postcard | None:
        return self._postcards.get(postcard_id)

    def get_postcards_by_user_id(self, user_id: int) -> list[Postcard]:
        with self._lock:
            owned = [p for p in self._postcards.values() if p.user_id == user_id]
        return sorted(owned, key=_newest_first, reverse=True)

    def get_public_postcards(self, limit: int = DEFAULT_PUBLIC_LIMIT) -> list[Postcard]:
        if limit <= 0:
            return []
        with self._lock:
            public = [p for p in self._postcards.values() if p.is_public == 1]
        public.sort(key=lambda p: (p.likes, p.created_at, p.id), reverse=True)
        return public[:limit]

    def create_postcard(self, data: PostcardCreate) -> Postcard:
        with self._lock:
            postcard = Postcard(
                id=next(self._postcard_ids),
                user_id=data.user_id,
                audio_hash=data.audio_hash,
                img_url=data.img_url,
                caption=data.caption,
                is_public=data.is_public,
                created_at=_now(),
                likes=0,
            )
            self._postcards[postcard.id] = postcard
        return postcard

    def like_postcard(self, postcard_id: int) -> Postcard | None:
        with self._lock:
            postcard = self._postcards.get(postcard_id)
            if postcard is None:
                return None
            updated = postcard.model_copy(update={"likes": postcard.likes + 1})
            self._postcards[postcard_id] = updated
        return updated

    # Trades

    def create_trade(self, data: TradeCreate) -> Trade:
        with self._lock:
            trade = Trade(
                id=next(self._trade_ids),
                from_id=data.from_id,
                to_id=data.to_id,
                postcard_id=data.postcard_id,
                created_at=_now(),
            )
            self._trades[trade.id] = trade
        return trade

    def get_trades_by_user_id(self, user_id: int) -> list[Trade]:
        with self._lock:
            involved = [
                t for t in self._trades.values() if t.from_id == user_id or t.to_id == user_id
            ]
        return sorted(involved, key=_newest_first, reverse=True)

    def get_random_postcards_for_trade(
        self, user_id: int, count: int = DEFAULT_TRADE_COUNT
    ) -> list[Postcard]:
        if count <= 0:
            return []
        with self._lock:
            eligible = sorted(
                (p for p in self._postcards.values() if p.user_id != user_id and p.is_public == 1),
                key=lambda p: p.id,
            )
            # Fisher-Yates via random.shuffle; the rng is shared state
            self._rng.shuffle(eligible)
        return eligible[:count]
