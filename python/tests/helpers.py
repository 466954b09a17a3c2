"""Test helpers shared across the suite.

Provides:
- Settings construction that ignores .env and the process environment
- A stub generator with recorded calls
- User and postcard creation helpers
"""

from dreampost.config import Settings
from dreampost.schemas.postcard import Postcard, PostcardCreate
from dreampost.schemas.user import User, UserCreate
from dreampost.services.generator import GeneratedCaption, GeneratedImage
from dreampost.storage.base import StorageBase

STUB_CAPTION = "Moonlit tides hum beneath a velvet sky"
STUB_IMAGE_URL = "https://images.example.test/postcards/stub.png"


def make_settings(**overrides) -> Settings:
    """Build Settings for tests without reading .env.

    Values are passed by field name; anything not given uses test defaults.
    """
    values = {
        "dreampost_env": "test",
        "database_url": None,
        "openai_api_key": None,
        "seed_demo_data": False,
        "enforce_trade_integrity": False,
        "log_json": False,
        "cors_origins": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class StubGenerator:
    """Stands in for PostcardGenerator; records every call."""

    def __init__(
        self,
        caption: str = STUB_CAPTION,
        image_url: str = STUB_IMAGE_URL,
        is_fallback: bool = False,
    ):
        self.caption = caption
        self.image_url = image_url
        self.is_fallback = is_fallback
        self.caption_calls: list[str] = []
        self.image_calls: list[str] = []

    async def generate_caption(self, audio_data: str) -> GeneratedCaption:
        self.caption_calls.append(audio_data)
        return GeneratedCaption(text=self.caption, is_fallback=self.is_fallback)

    async def generate_image(self, caption: str) -> GeneratedImage:
        self.image_calls.append(caption)
        return GeneratedImage(url=self.image_url, is_fallback=self.is_fallback)


def create_test_user(
    storage: StorageBase,
    username: str = "sleeper",
    timezone: str = "UTC",
) -> User:
    """Insert a user directly through the store."""
    return storage.create_user(
        UserCreate(username=username, password="hashed_password", timezone=timezone)
    )


def create_test_postcard(
    storage: StorageBase,
    user_id: int,
    *,
    is_public: int = 1,
    caption: str = "A quiet hum of distant rain",
    audio_hash: str = "abc123",
    likes: int = 0,
) -> Postcard:
    """Insert a postcard directly through the store, then apply likes."""
    postcard = storage.create_postcard(
        PostcardCreate(
            user_id=user_id,
            audio_hash=audio_hash,
            img_url="https://images.example.test/postcards/1.png",
            caption=caption,
            is_public=is_public,
        )
    )
    for _ in range(likes):
        postcard = storage.like_postcard(postcard.id)
    return postcard
