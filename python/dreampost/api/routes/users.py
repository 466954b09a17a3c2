"""User API routes.

The stored password is never part of a response.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from dreampost.api.deps import get_storage
from dreampost.schemas.user import User, UserCreate, UserOut
from dreampost.services import users as users_service
from dreampost.storage.base import StorageBase

router = APIRouter(tags=["users"])


def _user_out(user: User) -> dict:
    out = UserOut(**user.model_dump(exclude={"password"}))
    return out.model_dump(mode="json", by_alias=True)


@router.post("/users", status_code=201)
def register_user(
    request: UserCreate,
    storage: Annotated[StorageBase, Depends(get_storage)],
) -> dict:
    """Register a user.

    Errors:
        E_INVALID_REQUEST (400): Missing username or password.
        E_INVALID_TIMEZONE (400): timezone is not an IANA name.
        E_USERNAME_TAKEN (409): Username already exists.
    """
    return _user_out(users_service.register_user(storage, request))


@router.get("/users/{user_id}")
def get_user(
    user_id: int,
    storage: Annotated[StorageBase, Depends(get_storage)],
) -> dict:
    """Get a user.

    Errors:
        E_USER_NOT_FOUND (404): No user with this id.
    """
    return _user_out(users_service.get_user(storage, user_id))
