"""Tests for the store implementations.

Every test runs against both MemStorage and SqlStorage (SQLite) through the
parametrized `storage` fixture, so the two backends share one contract.

Tests cover:
- Id allocation and not-found behavior
- lastSleepAt stamping and username uniqueness
- Owned and public postcard ordering
- Likes
- Trades (no referential checks at the store level)
- Random trade candidates
"""

import random
import threading
from datetime import UTC, datetime

import pytest
from sqlalchemy import event

from dreampost.db.engine import create_db_engine
from dreampost.schemas.trade import MARKET_USER_ID, TradeCreate
from dreampost.schemas.user import UserCreate
from dreampost.storage import MemStorage, SqlStorage, UsernameTakenError
from tests.helpers import create_test_postcard, create_test_user


class TestUsers:
    """Tests for user records."""

    def test_ids_start_at_one_and_increase(self, storage):
        first = create_test_user(storage, "a")
        second = create_test_user(storage, "b")

        assert first.id == 1
        assert second.id == 2

    def test_new_user_has_no_last_sleep(self, storage):
        user = create_test_user(storage)

        assert user.last_sleep_at is None
        assert user.timezone == "UTC"

    def test_get_user_missing_returns_none(self, storage):
        assert storage.get_user(999) is None

    def test_get_user_by_username(self, storage):
        user = create_test_user(storage, "nightowl")

        found = storage.get_user_by_username("nightowl")

        assert found is not None
        assert found.id == user.id
        assert storage.get_user_by_username("nobody") is None

    def test_update_last_sleep_stamps_now(self, storage):
        user = create_test_user(storage)
        before = datetime.now(UTC)

        updated = storage.update_user_last_sleep(user.id)

        assert updated is not None
        assert updated.last_sleep_at is not None
        assert updated.last_sleep_at.tzinfo is not None
        assert updated.last_sleep_at >= before.replace(microsecond=0)
        assert storage.get_user(user.id).last_sleep_at == updated.last_sleep_at

    def test_update_last_sleep_unknown_user(self, storage):
        assert storage.update_user_last_sleep(42) is None

    def test_duplicate_username_raises(self, storage):
        original = create_test_user(storage, "nightowl")

        with pytest.raises(UsernameTakenError):
            storage.create_user(UserCreate(username="nightowl", password="other"))

        assert storage.get_user_by_username("nightowl") == original
        assert storage.get_user(original.id + 1) is None


class TestPostcards:
    """Tests for postcard records."""

    def test_new_postcard_defaults(self, storage):
        user = create_test_user(storage)
        before = datetime.now(UTC)

        postcard = create_test_postcard(storage, user.id)

        assert postcard.id == 1
        assert postcard.likes == 0
        assert postcard.is_public == 1
        assert postcard.user_id == user.id
        assert postcard.created_at >= before.replace(microsecond=0)

    def test_get_postcard_missing_returns_none(self, storage):
        assert storage.get_postcard(999) is None

    def test_owned_postcards_empty_for_user_without_cards(self, storage):
        user = create_test_user(storage)

        assert storage.get_postcards_by_user_id(user.id) == []
        assert storage.get_postcards_by_user_id(12345) == []

    def test_owned_postcards_newest_first(self, storage):
        user = create_test_user(storage)
        other = create_test_user(storage, "other")
        first = create_test_postcard(storage, user.id)
        create_test_postcard(storage, other.id)
        second = create_test_postcard(storage, user.id, is_public=0)

        result = storage.get_postcards_by_user_id(user.id)

        assert [p.id for p in result] == [second.id, first.id]

    def test_public_postcards_exclude_private(self, storage):
        user = create_test_user(storage)
        public = create_test_postcard(storage, user.id)
        create_test_postcard(storage, user.id, is_public=0)

        result = storage.get_public_postcards()

        assert [p.id for p in result] == [public.id]

    def test_public_postcards_sorted_by_likes_then_recency(self, storage):
        user = create_test_user(storage)
        older_popular = create_test_postcard(storage, user.id, likes=5)
        older_quiet = create_test_postcard(storage, user.id, likes=1)
        newer_quiet = create_test_postcard(storage, user.id, likes=1)

        result = storage.get_public_postcards()

        assert [p.id for p in result] == [older_popular.id, newer_quiet.id, older_quiet.id]

    def test_public_postcards_respects_limit(self, storage):
        user = create_test_user(storage)
        for _ in range(5):
            create_test_postcard(storage, user.id)

        assert len(storage.get_public_postcards(3)) == 3
        assert storage.get_public_postcards(0) == []

    def test_like_increments_by_exactly_one(self, storage):
        user = create_test_user(storage)
        postcard = create_test_postcard(storage, user.id)

        liked = storage.like_postcard(postcard.id)
        liked_again = storage.like_postcard(postcard.id)

        assert liked.likes == 1
        assert liked_again.likes == 2
        assert storage.get_postcard(postcard.id).likes == 2

    def test_like_missing_returns_none(self, storage):
        assert storage.like_postcard(999) is None


class TestTrades:
    """Tests for trade records."""

    def test_create_trade(self, storage):
        trade = storage.create_trade(TradeCreate(from_id=1, to_id=2, postcard_id=7))

        assert trade.id == 1
        assert (trade.from_id, trade.to_id, trade.postcard_id) == (1, 2, 7)
        assert trade.created_at.tzinfo is not None

    def test_store_does_not_check_references(self, storage):
        """Unknown users and postcards are recorded as given."""
        trade = storage.create_trade(TradeCreate(from_id=50, to_id=60, postcard_id=70))

        assert storage.get_trades_by_user_id(50) == [trade]

    def test_trades_by_user_cover_both_sides_newest_first(self, storage):
        sent = storage.create_trade(TradeCreate(from_id=1, to_id=2, postcard_id=1))
        storage.create_trade(TradeCreate(from_id=3, to_id=4, postcard_id=1))
        received = storage.create_trade(
            TradeCreate(from_id=MARKET_USER_ID, to_id=1, postcard_id=2)
        )

        result = storage.get_trades_by_user_id(1)

        assert [t.id for t in result] == [received.id, sent.id]

    def test_trades_empty_for_unknown_user(self, storage):
        assert storage.get_trades_by_user_id(99) == []


class TestTradeCandidates:
    """Tests for get_random_postcards_for_trade."""

    def test_excludes_own_and_private_postcards(self, storage):
        me = create_test_user(storage, "me")
        other = create_test_user(storage, "other")
        create_test_postcard(storage, me.id)
        create_test_postcard(storage, other.id, is_public=0)
        eligible = create_test_postcard(storage, other.id)

        for _ in range(10):
            result = storage.get_random_postcards_for_trade(me.id, 5)
            assert [p.id for p in result] == [eligible.id]

    def test_returns_at_most_count_distinct(self, storage):
        me = create_test_user(storage, "me")
        other = create_test_user(storage, "other")
        for _ in range(6):
            create_test_postcard(storage, other.id)

        result = storage.get_random_postcards_for_trade(me.id, 2)

        assert len(result) == 2
        assert len({p.id for p in result}) == 2
        assert all(p.user_id == other.id for p in result)

    def test_non_positive_count_returns_empty(self, storage):
        other = create_test_user(storage, "other")
        create_test_postcard(storage, other.id)

        assert storage.get_random_postcards_for_trade(999, 0) == []

    def test_empty_when_nothing_eligible(self, storage):
        me = create_test_user(storage, "me")
        create_test_postcard(storage, me.id)

        assert storage.get_random_postcards_for_trade(me.id) == []


class TestMemStorageSpecifics:
    """Behavior only the in-memory store can pin down."""

    def test_seeded_rng_makes_selection_reproducible(self):
        def pick(seed: int) -> list[int]:
            store = MemStorage(rng=random.Random(seed))
            owner = create_test_user(store, "owner")
            for _ in range(8):
                create_test_postcard(store, owner.id)
            return [p.id for p in store.get_random_postcards_for_trade(999, 3)]

        assert pick(7) == pick(7)

    @pytest.mark.parametrize("workers", [8])
    def test_concurrent_likes_are_not_lost(self, workers):
        store = MemStorage()
        owner = create_test_user(store)
        postcard = create_test_postcard(store, owner.id)
        likes_per_worker = 50

        def like_many():
            for _ in range(likes_per_worker):
                store.like_postcard(postcard.id)

        threads = [threading.Thread(target=like_many) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get_postcard(postcard.id).likes == workers * likes_per_worker


class TestSqlStorageSpecifics:
    """Tests for SqlStorage-only behavior."""

    def test_like_reads_count_from_its_own_update(self):
        engine = create_db_engine("sqlite:///:memory:")
        store = SqlStorage(engine)
        store.create_schema()
        owner = create_test_user(store)
        postcard = create_test_postcard(store, owner.id)
        statements: list[str] = []

        @event.listens_for(engine, "before_cursor_execute")
        def record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        liked = store.like_postcard(postcard.id)
        store.close()

        assert liked.likes == 1
        assert len(statements) == 1
        assert statements[0].lstrip().upper().startswith("UPDATE")
        assert "RETURNING" in statements[0].upper()
