"""Pydantic schemas for API request/response models."""

from dreampost.schemas.postcard import Postcard, PostcardCreate, RecordRequest
from dreampost.schemas.trade import MARKET_USER_ID, CollectRequest, Trade, TradeCreate
from dreampost.schemas.user import User, UserCreate, UserOut

__all__ = [
    "User",
    "UserCreate",
    "UserOut",
    "Postcard",
    "PostcardCreate",
    "RecordRequest",
    "Trade",
    "TradeCreate",
    "CollectRequest",
    "MARKET_USER_ID",
]
