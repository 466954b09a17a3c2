"""Postcard Pydantic schemas.

Wire names follow the frontend contract: userId, audioHash, imgURL,
caption, createdAt, isPublic (0/1), likes.
"""

from typing import Literal

from pydantic import ConfigDict, Field

from dreampost.schemas.base import CamelModel, UtcDatetime

# isPublic is an integer flag on the wire, not a boolean
Visibility = Literal[0, 1]


class Postcard(CamelModel):
    """Stored postcard record, also the response schema."""

    id: int
    user_id: int
    audio_hash: str
    img_url: str = Field(..., alias="imgURL")
    caption: str
    created_at: UtcDatetime
    is_public: Visibility = 1
    likes: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class PostcardCreate(CamelModel):
    """Assembled postcard fields, validated before persisting."""

    user_id: int = Field(..., ge=1)
    audio_hash: str = Field(..., min_length=1)
    img_url: str = Field(..., min_length=1, alias="imgURL")
    caption: str = Field(..., min_length=1)
    is_public: Visibility = 1


class RecordRequest(CamelModel):
    """Request schema for POST /api/record.

    audioData is the base64-encoded recording as captured by the browser.
    """

    user_id: int = Field(..., ge=1)
    audio_data: str = Field(..., min_length=1)
    is_public: Visibility = 1
