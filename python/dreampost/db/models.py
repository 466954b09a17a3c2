"""SQLAlchemy ORM models for Dreampost.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Integer primary keys come from the database sequence/autoincrement; id 0 is
never allocated, which keeps it free for the market sentinel in trades.
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserRow(Base):
    """Registered dreamer."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    timezone: Mapped[str] = mapped_column(String(50), nullable=False, server_default="UTC")
    last_sleep_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class PostcardRow(Base):
    """Generated postcard.

    user_id is a plain integer column: the store does not enforce
    referential integrity between postcards and users.
    """

    __tablename__ = "postcards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    audio_hash: Mapped[str] = mapped_column(Text, nullable=False)
    img_url: Mapped[str] = mapped_column(Text, nullable=False)
    caption: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    is_public: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    likes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")

    __table_args__ = (
        CheckConstraint("is_public IN (0, 1)", name="ck_postcards_is_public"),
        CheckConstraint("likes >= 0", name="ck_postcards_likes_nonnegative"),
    )


class TradeRow(Base):
    """Append-only trade/collect audit record.

    postcard_id is unconstrained for the same reason as PostcardRow.user_id.
    """

    __tablename__ = "trades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    from_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    to_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    postcard_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
