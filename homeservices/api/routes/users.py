"""
User API Routes

Handles:
- Public registration
- Account listing (admin) and lookup (self or admin)
- The caller's home info (read and upsert)
"""

from fastapi import APIRouter, Depends
from loguru import logger

from homeservices.api.dependencies import get_password_hasher, get_user_repository
from homeservices.api.middleware.error_handler import NotFoundError
from homeservices.api.routes.auth import AdminUser, CurrentUser, require_self_or_admin
from homeservices.api.schemas import (
    ErrorResponse,
    HomeInfoIn,
    HomeInfoResponse,
    UserRegister,
    UserResponse,
)
from homeservices.security import PasswordHasher
from homeservices.storage.models import HomeInfo, User
from homeservices.storage.user_repository import UserRepository


router = APIRouter(prefix="/users", tags=["users"])


# =============================================================================
# Accounts
# =============================================================================

@router.get(
    "",
    response_model=list[UserResponse],
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
        403: {"model": ErrorResponse, "description": "Admin account required"},
    },
)
async def list_users(
    admin: AdminUser,
    users: UserRepository = Depends(get_user_repository),
):
    """All accounts. Admin only."""
    return [user.to_public_dict() for user in await users.list_all()]


@router.post(
    "",
    response_model=UserResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid registration data"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def register(
    body: UserRegister,
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """Register a new, non-admin account."""
    logger.info("Registering new user")

    user = User.build(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        password_hash=hasher.hash(body.password),
        phone_number=body.phone_number,
    )
    user = await users.register(user)
    await users.session.commit()

    return user.to_public_dict()


# =============================================================================
# Home Info
# =============================================================================

# Declared before /{user_id} so "homeInfo" is not parsed as an id

@router.get(
    "/homeInfo",
    response_model=HomeInfoResponse,
    responses={404: {"model": ErrorResponse, "description": "No home info stored"}},
)
async def get_home_info(
    current_user: CurrentUser,
    users: UserRepository = Depends(get_user_repository),
):
    """The caller's home info."""
    require_self_or_admin(current_user, current_user.id)

    home_info = await users.home_info_for(current_user)
    if home_info is None:
        raise NotFoundError("HomeInfo")
    return home_info.to_dict()


@router.put(
    "/homeInfo",
    response_model=HomeInfoResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid home info"}},
)
async def put_home_info(
    body: HomeInfoIn,
    current_user: CurrentUser,
    users: UserRepository = Depends(get_user_repository),
):
    """Create the caller's home info, or overwrite it if one exists."""
    require_self_or_admin(current_user, current_user.id)

    values = HomeInfo.for_user(current_user, **body.model_dump(mode="json"))
    home_info = await users.upsert_home_info(current_user, values)
    await users.session.commit()

    return home_info.to_dict()


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
        403: {"model": ErrorResponse, "description": "Not this user and not an admin"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def get_user(
    user_id: int,
    current_user: CurrentUser,
    users: UserRepository = Depends(get_user_repository),
):
    """Public view of one account. Self or admin."""
    require_self_or_admin(current_user, user_id)

    user = await users.get(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user.to_public_dict()
