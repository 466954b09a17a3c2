"""Postcard API routes.

Routes are transport-only: each calls exactly one service function.
Bodies are the bare postcard object or array, with camelCase keys.
Error envelope: {"error": {"code": "...", "message": "...", "request_id": "..."}}

Static paths (/public, /trade/{user_id}) are registered before /{postcard_id}.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from dreampost.api.deps import get_app_settings, get_generator, get_storage
from dreampost.config import Settings
from dreampost.schemas.postcard import RecordRequest
from dreampost.schemas.trade import CollectRequest
from dreampost.services import postcards as postcards_service
from dreampost.services import trades as trades_service
from dreampost.services.generator import PostcardGenerator
from dreampost.storage.base import DEFAULT_PUBLIC_LIMIT, DEFAULT_TRADE_COUNT, StorageBase

router = APIRouter(tags=["postcards"])

# Upper bound for limit/count query parameters
MAX_PAGE_SIZE = 100


def lenient_size(raw: str | None, default: int) -> int:
    """Parse a limit/count query value.

    Missing, non-numeric or non-positive values fall back to the default.
    Values above MAX_PAGE_SIZE are capped.
    """
    try:
        value = int(raw) if raw is not None else 0
    except ValueError:
        value = 0
    if value <= 0:
        return default
    return min(value, MAX_PAGE_SIZE)


# =============================================================================
# Collections
# =============================================================================


@router.get("/postcards")
def list_user_postcards(
    user_id: Annotated[int, Query(alias="userId")],
    storage: Annotated[StorageBase, Depends(get_storage)],
) -> list[dict]:
    """List postcards owned by a user, newest first.

    Errors:
        E_INVALID_REQUEST (400): userId missing or not an integer.
    """
    result = postcards_service.list_user_postcards(storage, user_id)
    return [p.model_dump(mode="json", by_alias=True) for p in result]


@router.get("/postcards/public")
def list_public_postcards(
    storage: Annotated[StorageBase, Depends(get_storage)],
    limit: str | None = None,
) -> list[dict]:
    """List public postcards, most liked first, then newest."""
    result = postcards_service.list_public_postcards(
        storage, lenient_size(limit, DEFAULT_PUBLIC_LIMIT)
    )
    return [p.model_dump(mode="json", by_alias=True) for p in result]


@router.get("/postcards/trade/{user_id}")
def list_trade_candidates(
    user_id: int,
    storage: Annotated[StorageBase, Depends(get_storage)],
    count: str | None = None,
) -> list[dict]:
    """Random public postcards from other users, offered for trading.

    Errors:
        E_INVALID_REQUEST (400): userId not an integer.
    """
    result = trades_service.list_candidates(
        storage, user_id, lenient_size(count, DEFAULT_TRADE_COUNT)
    )
    return [p.model_dump(mode="json", by_alias=True) for p in result]


# =============================================================================
# Single postcard
# =============================================================================


@router.get("/postcards/{postcard_id}")
def get_postcard(
    postcard_id: int,
    storage: Annotated[StorageBase, Depends(get_storage)],
) -> dict:
    """Get one postcard.

    Errors:
        E_INVALID_REQUEST (400): id not an integer.
        E_POSTCARD_NOT_FOUND (404): No postcard with this id.
    """
    result = postcards_service.get_postcard(storage, postcard_id)
    return result.model_dump(mode="json", by_alias=True)


@router.post("/postcards/{postcard_id}/like")
def like_postcard(
    postcard_id: int,
    storage: Annotated[StorageBase, Depends(get_storage)],
) -> dict:
    """Add one like and return the updated postcard.

    Errors:
        E_INVALID_REQUEST (400): id not an integer.
        E_POSTCARD_NOT_FOUND (404): No postcard with this id.
    """
    result = postcards_service.like_postcard(storage, postcard_id)
    return result.model_dump(mode="json", by_alias=True)


@router.post("/postcards/{postcard_id}/collect", status_code=201)
def collect_postcard(
    postcard_id: int,
    request: CollectRequest,
    storage: Annotated[StorageBase, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict:
    """Collect a postcard from the market.

    Records a trade from user 0 (the market) to the collector.

    Errors:
        E_INVALID_REQUEST (400): Malformed id or body.
        E_POSTCARD_NOT_FOUND / E_USER_NOT_FOUND (404): Integrity mode only.
    """
    result = trades_service.collect(
        storage,
        postcard_id,
        request.user_id,
        enforce_integrity=settings.enforce_trade_integrity,
    )
    return result.model_dump(mode="json", by_alias=True)


# =============================================================================
# Recording pipeline
# =============================================================================


@router.post("/record", status_code=201)
async def record(
    request: RecordRequest,
    storage: Annotated[StorageBase, Depends(get_storage)],
    generator: Annotated[PostcardGenerator, Depends(get_generator)],
) -> dict:
    """Turn a night's audio recording into a postcard.

    Returns 201 with the new postcard. Generator failures never surface
    here: the postcard gets fallback caption/image instead.

    Errors:
        E_INVALID_REQUEST (400): userId or audioData missing.
        E_UNKNOWN_USER (400): userId does not exist.
    """
    result = await postcards_service.create_from_recording(
        storage,
        generator,
        request.user_id,
        request.audio_data,
        request.is_public,
    )
    return result.model_dump(mode="json", by_alias=True)
