"""Postcard service layer.

Implements the recording pipeline and postcard reads/likes.

Recording pipeline (create_from_recording):
1. Reject unknown users and empty audio (400, nothing created)
2. Stamp the user's lastSleepAt (kept even if later steps fail)
3. MD5 the audio payload into audioHash (stored only, no dedup)
4. Caption from audio, then image from caption (fallbacks allowed)
5. Validate the assembled record, then persist it

Store calls inside the async pipeline run in the threadpool
(run_in_threadpool) so they never block the event loop.

Service functions correspond 1:1 with route handlers.
Routes are transport-only and call exactly one service function.
"""

import hashlib

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from dreampost.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from dreampost.logging import get_logger, set_pipeline_user
from dreampost.schemas.postcard import Postcard, PostcardCreate, Visibility
from dreampost.services.generator import PostcardGenerator
from dreampost.services.redact import safe_kv
from dreampost.storage.base import DEFAULT_PUBLIC_LIMIT, StorageBase

logger = get_logger(__name__)


def audio_hash(audio_data: str) -> str:
    """MD5 hex digest of the audio payload as received."""
    return hashlib.md5(audio_data.encode("utf-8")).hexdigest()


async def create_from_recording(
    storage: StorageBase,
    generator: PostcardGenerator,
    user_id: int,
    audio_data: str,
    is_public: Visibility = 1,
) -> Postcard:
    """Turn one night's recording into a stored postcard.

    Raises:
        InvalidRequestError(E_INVALID_REQUEST): If audio_data is empty or the
            assembled postcard fails validation.
        InvalidRequestError(E_UNKNOWN_USER): If user_id does not exist.
    """
    if not audio_data:
        raise InvalidRequestError(message="Missing required data")

    set_pipeline_user(user_id)
    try:
        if await run_in_threadpool(storage.update_user_last_sleep, user_id) is None:
            raise InvalidRequestError(ApiErrorCode.E_UNKNOWN_USER, "Unknown user")

        digest = audio_hash(audio_data)
        caption = await generator.generate_caption(audio_data)
        image = await generator.generate_image(caption.text)

        try:
            data = PostcardCreate(
                user_id=user_id,
                audio_hash=digest,
                img_url=image.url,
                caption=caption.text,
                is_public=is_public,
            )
        except ValidationError as e:
            raise InvalidRequestError(message="Invalid postcard data") from e

        postcard = await run_in_threadpool(storage.create_postcard, data)
        logger.info(
            "postcard.created",
            **safe_kv(
                postcard_id=postcard.id,
                audio_hash=digest,
                audio_chars=len(audio_data),
                caption_chars=len(caption.text),
                caption_fallback=caption.is_fallback,
                image_fallback=image.is_fallback,
                is_public=postcard.is_public,
            ),
        )
        return postcard
    finally:
        set_pipeline_user(None)


def get_postcard(storage: StorageBase, postcard_id: int) -> Postcard:
    """Get one postcard.

    Raises:
        NotFoundError(E_POSTCARD_NOT_FOUND): If the postcard doesn't exist.
    """
    postcard = storage.get_postcard(postcard_id)
    if postcard is None:
        raise NotFoundError(ApiErrorCode.E_POSTCARD_NOT_FOUND, "Postcard not found")
    return postcard


def list_user_postcards(storage: StorageBase, user_id: int) -> list[Postcard]:
    """Postcards owned by a user, newest first. Unknown users get []."""
    return storage.get_postcards_by_user_id(user_id)


def list_public_postcards(
    storage: StorageBase, limit: int = DEFAULT_PUBLIC_LIMIT
) -> list[Postcard]:
    """Most-liked public postcards."""
    return storage.get_public_postcards(limit)


def like_postcard(storage: StorageBase, postcard_id: int) -> Postcard:
    """Add one like.

    Raises:
        NotFoundError(E_POSTCARD_NOT_FOUND): If the postcard doesn't exist.
    """
    postcard = storage.like_postcard(postcard_id)
    if postcard is None:
        raise NotFoundError(ApiErrorCode.E_POSTCARD_NOT_FOUND, "Postcard not found")
    logger.info("postcard.liked", postcard_id=postcard.id, likes=postcard.likes)
    return postcard
