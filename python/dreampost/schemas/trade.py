"""Trade Pydantic schemas."""

from pydantic import ConfigDict, Field

from dreampost.schemas.base import CamelModel, UtcDatetime

# Reserved user id for the market side of a trade or collect
MARKET_USER_ID = 0


class Trade(CamelModel):
    """Stored trade record, also the response schema.

    Append-only: a trade never changes postcard ownership.
    """

    id: int
    from_id: int
    to_id: int
    postcard_id: int
    created_at: UtcDatetime

    model_config = ConfigDict(frozen=True)


class TradeCreate(CamelModel):
    """Request schema for POST /api/trades."""

    from_id: int = Field(..., ge=0)
    to_id: int = Field(..., ge=0)
    postcard_id: int = Field(..., ge=1)


class CollectRequest(CamelModel):
    """Request schema for POST /api/postcards/{id}/collect."""

    user_id: int = Field(..., ge=1)
