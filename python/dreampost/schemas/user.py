"""User Pydantic schemas.

User is the stored record (includes the opaque credential).
UserOut is what the API returns; the password never leaves the server.
"""

from pydantic import ConfigDict, Field

from dreampost.schemas.base import CamelModel, UtcDatetime

DEFAULT_TIMEZONE = "UTC"


class User(CamelModel):
    """Stored user record."""

    id: int
    username: str
    password: str
    timezone: str = DEFAULT_TIMEZONE
    last_sleep_at: UtcDatetime | None = None

    model_config = ConfigDict(frozen=True)


class UserCreate(CamelModel):
    """Request schema for registering a user."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    timezone: str = Field(default=DEFAULT_TIMEZONE, min_length=1, max_length=50)


class UserOut(CamelModel):
    """Response schema for a user."""

    id: int
    username: str
    timezone: str
    last_sleep_at: UtcDatetime | None = None
