"""
Authentication API Routes for HomeServices.

Handles:
- Login with HTTP Basic credentials (starts a session)
- Logout (clears the session)
- Current user resolution and authorization checks for other routes
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from loguru import logger

from homeservices.api.dependencies import get_password_hasher, get_user_repository
from homeservices.api.middleware.error_handler import ForbiddenError, UnauthenticatedError
from homeservices.api.schemas import ErrorResponse, UserResponse
from homeservices.security import PasswordHasher, is_admin, is_self_or_admin
from homeservices.storage.models import User
from homeservices.storage.user_repository import UserRepository

router = APIRouter(tags=["auth"])

basic_auth = HTTPBasic(auto_error=False)

SESSION_USER_KEY = "user_id"


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPBasicCredentials], Depends(basic_auth)],
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> User:
    """
    Resolve the authenticated user.

    An existing session wins. Otherwise Basic credentials (email, password)
    are verified against the stored hash and a session is started.

    Raises:
        UnauthenticatedError: No session and no valid credentials.
    """
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is not None:
        user = await users.get(user_id)
        if user is not None:
            return user
        # Account is gone, drop the stale session
        request.session.pop(SESSION_USER_KEY, None)

    if credentials is None:
        raise UnauthenticatedError("No authorization header")

    user = await users.get_by_email(credentials.username)
    if user is None or not hasher.verify(credentials.password, user.password):
        logger.warning(f"Login failed for {credentials.username}")
        raise UnauthenticatedError("Invalid basic authorization")

    request.session[SESSION_USER_KEY] = user.id
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_admin(identity: User) -> None:
    """Raise ForbiddenError unless `identity` is an admin."""
    if not is_admin(identity):
        logger.warning(f"User {identity.id} denied admin access")
        raise ForbiddenError("Admin account required")


def require_self_or_admin(identity: User, owner_id: Optional[int]) -> None:
    """Raise ForbiddenError unless `identity` owns the resource or is an admin."""
    if not is_self_or_admin(identity, owner_id):
        logger.warning(f"User {identity.id} denied access to resources of user {owner_id}")
        raise ForbiddenError("Not allowed to access this account")


async def get_admin_user(current_user: CurrentUser) -> User:
    """Dependency for admin-only routes."""
    require_admin(current_user)
    return current_user


AdminUser = Annotated[User, Depends(get_admin_user)]


# --- Endpoints ---

@router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def login(current_user: CurrentUser):
    """Log in with Basic credentials and return the public user view."""
    logger.info(f"User {current_user.id} logged in")
    return current_user.to_public_dict()


@router.get("/logout")
async def logout(request: Request):
    """End the current session."""
    user_id = request.session.pop(SESSION_USER_KEY, None)
    request.session.clear()
    if user_id is not None:
        logger.info(f"User {user_id} logged out")
    return []
