"""Trade API routes.

Routes are transport-only: each calls exactly one service function.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from dreampost.api.deps import get_app_settings, get_storage
from dreampost.config import Settings
from dreampost.schemas.trade import TradeCreate
from dreampost.services import trades as trades_service
from dreampost.storage.base import StorageBase

router = APIRouter(tags=["trades"])


@router.post("/trades", status_code=201)
def create_trade(
    request: TradeCreate,
    storage: Annotated[StorageBase, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict:
    """Record a trade between two users.

    Errors:
        E_INVALID_REQUEST (400): Missing or malformed fromId/toId/postcardId.
        E_SELF_TRADE (400): fromId == toId (integrity mode only).
        E_POSTCARD_NOT_FOUND / E_USER_NOT_FOUND (404): Integrity mode only.
    """
    result = trades_service.propose_trade(
        storage, request, enforce_integrity=settings.enforce_trade_integrity
    )
    return result.model_dump(mode="json", by_alias=True)


@router.get("/trades/{user_id}")
def list_trades(
    user_id: int,
    storage: Annotated[StorageBase, Depends(get_storage)],
) -> list[dict]:
    """List trades where the user is sender or receiver, newest first."""
    result = trades_service.list_trades(storage, user_id)
    return [t.model_dump(mode="json", by_alias=True) for t in result]
