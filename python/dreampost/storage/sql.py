"""SQL-backed store on SQLAlchemy.

One short-lived session per operation. The like counter is a single
UPDATE ... SET likes = likes + 1 ... RETURNING, so concurrent likes never
overwrite each other and each caller sees the count its own like produced.
RETURNING needs PostgreSQL or SQLite 3.35+. Ids come from the database.
"""

from datetime import UTC, datetime

from sqlalchemy import or_, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql import func

from dreampost.db.models import Base, PostcardRow, TradeRow, UserRow
from dreampost.db.session import create_session_factory, transaction
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


def _to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        username=row.username,
        password=row.password,
        timezone=row.timezone,
        last_sleep_at=row.last_sleep_at,
    )


def _to_postcard(row: PostcardRow) -> Postcard:
    return Postcard(
        id=row.id,
        user_id=row.user_id,
        audio_hash=row.audio_hash,
        img_url=row.img_url,
        caption=row.caption,
        created_at=row.created_at,
        is_public=row.is_public,
        likes=row.likes,
    )


def _to_trade(row: TradeRow) -> Trade:
    return Trade(
        id=row.id,
        from_id=row.from_id,
        to_id=row.to_id,
        postcard_id=row.postcard_id,
        created_at=row.created_at,
    )


class SqlStorage(StorageBase):
    """Store backed by a relational database.

    Args:
        engine: SQLAlchemy engine (SQLite or PostgreSQL).
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    def create_schema(self) -> None:
        """Create missing tables. Existing tables are left untouched."""
        Base.metadata.create_all(self._engine)

    def close(self) -> None:
        self._engine.dispose()

    # Users

    def get_user(self, user_id: int) -> User | None:
        with self._session_factory() as db:
            row = db.get(UserRow, user_id)
            return _to_user(row) if row else None

    def get_user_by_username(self, username: str) -> User | None:
        with self._session_factory() as db:
            row = db.scalars(select(UserRow).where(UserRow.username == username)).first()
            return _to_user(row) if row else None

    def create_user(self, data: UserCreate) -> User:
        with self._session_factory() as db:
            row = UserRow(
                username=data.username,
                password=data.password,
                timezone=data.timezone,
                last_sleep_at=None,
            )
            try:
                with transaction(db):
                    db.add(row)
            except IntegrityError as e:
                # username is the only unique column besides the key
                raise UsernameTakenError(data.username) from e
            return _to_user(row)

    def update_user_last_sleep(self, user_id: int) -> User | None:
        with self._session_factory() as db:
            with transaction(db):
                row = db.get(UserRow, user_id)
                if row is None:
                    return None
                row.last_sleep_at = _now()
            return _to_user(row)

    # Postcards

    def get_postcard(self, postcard_id: int) -> Postcard | None:
        with self._session_factory() as db:
            row = db.get(PostcardRow, postcard_id)
            return _to_postcard(row) if row else None

    def get_postcards_by_user_id(self, user_id: int) -> list[Postcard]:
        stmt = (
            select(PostcardRow)
            .where(PostcardRow.user_id == user_id)
            .order_by(PostcardRow.created_at.desc(), PostcardRow.id.desc())
        )
        with self._session_factory() as db:
            return [_to_postcard(row) for row in db.scalars(stmt)]

    def get_public_postcards(self, limit: int = DEFAULT_PUBLIC_LIMIT) -> list[Postcard]:
        if limit <= 0:
            return []
        stmt = (
            select(PostcardRow)
            .where(PostcardRow.is_public == 1)
            .order_by(
                PostcardRow.likes.desc(),
                PostcardRow.created_at.desc(),
                PostcardRow.id.desc(),
            )
            .limit(limit)
        )
        with self._session_factory() as db:
            return [_to_postcard(row) for row in db.scalars(stmt)]

    def create_postcard(self, data: PostcardCreate) -> Postcard:
        with self._session_factory() as db:
            row = PostcardRow(
                user_id=data.user_id,
                audio_hash=data.audio_hash,
                img_url=data.img_url,
                caption=data.caption,
                is_public=data.is_public,
                created_at=_now(),
                likes=0,
            )
            with transaction(db):
                db.add(row)
            return _to_postcard(row)

    def like_postcard(self, postcard_id: int) -> Postcard | None:
        stmt = (
            update(PostcardRow)
            .where(PostcardRow.id == postcard_id)
            .values(likes=PostcardRow.likes + 1)
            .returning(PostcardRow)
        )
        with self._session_factory() as db:
            with transaction(db):
                row = db.scalars(stmt).first()
                postcard = _to_postcard(row) if row else None
            return postcard

    # Trades

    def create_trade(self, data: TradeCreate) -> Trade:
        with self._session_factory() as db:
            row = TradeRow(
                from_id=data.from_id,
                to_id=data.to_id,
                postcard_id=data.postcard_id,
                created_at=_now(),
            )
            with transaction(db):
                db.add(row)
            return _to_trade(row)

    def get_trades_by_user_id(self, user_id: int) -> list[Trade]:
        stmt = (
            select(TradeRow)
            .where(or_(TradeRow.from_id == user_id, TradeRow.to_id == user_id))
            .order_by(TradeRow.created_at.desc(), TradeRow.id.desc())
        )
        with self._session_factory() as db:
            return [_to_trade(row) for row in db.scalars(stmt)]

    def get_random_postcards_for_trade(
        self, user_id: int, count: int = DEFAULT_TRADE_COUNT
    ) -> list[Postcard]:
        if count <= 0:
            return []
        stmt = (
            select(PostcardRow)
            .where(PostcardRow.is_public == 1, PostcardRow.user_id != user_id)
            .order_by(func.random())
            .limit(count)
        )
        with self._session_factory() as db:
            return [_to_postcard(row) for row in db.scalars(stmt)]
