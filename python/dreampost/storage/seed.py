"""Demo data for local development.

Two dreamers, each with one public postcard. The gallery ordering is easy
to eyeball: nightwalker's card (87 likes) sorts above dreamweaver's (42).
"""

from dreampost.logging import get_logger
from dreampost.schemas.postcard import PostcardCreate
from dreampost.schemas.user import UserCreate
from dreampost.storage.base import StorageBase

logger = get_logger(__name__)

DEMO_PASSWORD = "hashed_password"

DEMO_POSTCARDS = (
    {
        "username": "dreamweaver",
        "timezone": "America/New_York",
        "audio_hash": "sample_hash_1",
        "img_url": (
            "https://images.unsplash.com/photo-1499678329028-101435549a4e"
            "?ixlib=rb-4.0.3&auto=format&fit=crop&w=800&h=400"
        ),
        "caption": "Whispers of midnight lavender, where dreams cascade like purple rain",
        "likes": 42,
    },
    {
        "username": "nightwalker",
        "timezone": "Europe/London",
        "audio_hash": "sample_hash_2",
        "img_url": (
            "https://images.unsplash.com/photo-1534447677768-be436bb09401"
            "?ixlib=rb-4.0.3&auto=format&fit=crop&w=800&h=400"
        ),
        "caption": (
            "Crystal whispers echo through caves of forgotten memories, "
            "time suspended in amber light"
        ),
        "likes": 87,
    },
)


def seed_demo_data(storage: StorageBase) -> int:
    """Insert the demo users and postcards.

    Returns:
        Number of demo users created by this call.

    Idempotent: a user that already exists is left alone along with its cards.
    Likes are applied through like_postcard so the counter invariants hold.
    """
    created = 0
    for demo in DEMO_POSTCARDS:
        if storage.get_user_by_username(demo["username"]) is not None:
            continue

        user = storage.create_user(
            UserCreate(
                username=demo["username"],
                password=DEMO_PASSWORD,
                timezone=demo["timezone"],
            )
        )
        storage.update_user_last_sleep(user.id)
        postcard = storage.create_postcard(
            PostcardCreate(
                user_id=user.id,
                audio_hash=demo["audio_hash"],
                img_url=demo["img_url"],
                caption=demo["caption"],
                is_public=1,
            )
        )
        for _ in range(demo["likes"]):
            storage.like_postcard(postcard.id)

        created += 1
        logger.info("demo_data.seeded", user_id=user.id, postcard_id=postcard.id)

    return created
