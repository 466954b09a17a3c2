"""User service layer.

Usernames are unique. Timezones must be IANA names known to zoneinfo.
Passwords are stored as given and never returned.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dreampost.errors import ApiErrorCode, ConflictError, InvalidRequestError, NotFoundError
from dreampost.logging import get_logger
from dreampost.schemas.user import User, UserCreate
from dreampost.storage.base import StorageBase, UsernameTakenError

logger = get_logger(__name__)


def validate_timezone(name: str) -> None:
    """Raise InvalidRequestError(E_INVALID_TIMEZONE) for unknown zone names."""
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_TIMEZONE, "Unknown timezone") from e


def register_user(storage: StorageBase, data: UserCreate) -> User:
    """Create a user.

    Raises:
        InvalidRequestError(E_INVALID_TIMEZONE): If the timezone is not an IANA name.
        ConflictError(E_USERNAME_TAKEN): If the username already exists.
    """
    validate_timezone(data.timezone)

    try:
        user = storage.create_user(data)
    except UsernameTakenError as e:
        raise ConflictError(ApiErrorCode.E_USERNAME_TAKEN, "Username already taken") from e

    logger.info("user.registered", user_id=user.id, timezone=user.timezone)
    return user


def get_user(storage: StorageBase, user_id: int) -> User:
    """Get a user.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): If the user doesn't exist.
    """
    user = storage.get_user(user_id)
    if user is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")
    return user
