"""Trade service layer.

A trade is an append-only audit record: fromId gives postcardId to toId.
Ownership of the postcard never changes. User id 0 is the market.

Integrity checks are off by default and every well-formed trade is
recorded as-is. With enforce_integrity:
- the postcard must exist (404)
- every non-market user id must exist (404)
- fromId and toId must differ (400)
"""

from dreampost.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from dreampost.logging import get_logger
from dreampost.schemas.postcard import Postcard
from dreampost.schemas.trade import MARKET_USER_ID, Trade, TradeCreate
from dreampost.storage.base import DEFAULT_TRADE_COUNT, StorageBase

logger = get_logger(__name__)


def _check_integrity(storage: StorageBase, data: TradeCreate) -> None:
    if storage.get_postcard(data.postcard_id) is None:
        raise NotFoundError(ApiErrorCode.E_POSTCARD_NOT_FOUND, "Postcard not found")

    for user_id in (data.from_id, data.to_id):
        if user_id != MARKET_USER_ID and storage.get_user(user_id) is None:
            raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")

    if data.from_id == data.to_id:
        raise InvalidRequestError(ApiErrorCode.E_SELF_TRADE, "Cannot trade with yourself")


def propose_trade(
    storage: StorageBase, data: TradeCreate, *, enforce_integrity: bool = False
) -> Trade:
    """Record a trade.

    Raises:
        InvalidRequestError(E_SELF_TRADE): fromId == toId (integrity mode only).
        NotFoundError: Unknown postcard or user (integrity mode only).
    """
    if enforce_integrity:
        _check_integrity(storage, data)

    trade = storage.create_trade(data)
    logger.info(
        "trade.recorded",
        trade_id=trade.id,
        from_id=trade.from_id,
        to_id=trade.to_id,
        postcard_id=trade.postcard_id,
    )
    return trade


def collect(
    storage: StorageBase,
    postcard_id: int,
    collector_id: int,
    *,
    enforce_integrity: bool = False,
) -> Trade:
    """Collect a postcard from the market: a trade from user 0 to the collector."""
    data = TradeCreate(from_id=MARKET_USER_ID, to_id=collector_id, postcard_id=postcard_id)
    return propose_trade(storage, data, enforce_integrity=enforce_integrity)


def list_candidates(
    storage: StorageBase, user_id: int, count: int = DEFAULT_TRADE_COUNT
) -> list[Postcard]:
    """Random public postcards the user could trade for."""
    return storage.get_random_postcards_for_trade(user_id, count)


def list_trades(storage: StorageBase, user_id: int) -> list[Trade]:
    """Trades the user took part in, newest first."""
    return storage.get_trades_by_user_id(user_id)
