"""
User Repository for HomeServices

Account storage plus the one-to-one home info relation:
- Registration with unique email
- Lookup by id or email
- Home info lookup and upsert
"""

from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import HomeInfo, User, is_storable_id


class EmailTakenError(Exception):
    """An account with this email already exists."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Account with email '{email}' already exists")


class UserRepository:
    """Repository for user accounts and their home info."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> list[User]:
        stmt = select(User).order_by(User.id.asc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def get(self, user_id: int) -> Optional[User]:
        if not is_storable_id(user_id):
            return None
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return (await self.session.execute(stmt)).scalars().first()

    async def register(self, user: User) -> User:
        """
        Store a new account.

        Args:
            user: Unsaved user built with `User.build`

        Returns:
            The stored user

        Raises:
            EmailTakenError: If the email is already registered
        """
        if await self.get_by_email(user.email) is not None:
            raise EmailTakenError(user.email)

        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race against another registration with the same email
            raise EmailTakenError(user.email) from e

        await self.session.refresh(user)
        logger.info(f"Registered user {user.id}")
        return user

    # =========================================================================
    # Home info
    # =========================================================================

    async def home_info_for(self, user: User) -> Optional[HomeInfo]:
        stmt = select(HomeInfo).where(HomeInfo.user_id == user.persisted_id)
        return (await self.session.execute(stmt)).scalars().first()

    async def upsert_home_info(self, user: User, home_info: HomeInfo) -> HomeInfo:
        """
        Create the user's home info, or overwrite the existing one in place.

        Args:
            user: Stored owner
            home_info: Unsaved values built with `HomeInfo.for_user`

        Returns:
            The stored home info
        """
        existing = await self.home_info_for(user)

        if existing is None:
            self.session.add(home_info)
            target = home_info
            logger.info(f"Creating home info for user {user.id}")
        else:
            existing.update_from(home_info)
            target = existing
            logger.info(f"Updating home info {existing.id} for user {user.id}")

        await self.session.flush()
        await self.session.refresh(target)
        return target

    async def set_admin(self, user: User, is_admin: bool = True) -> User:
        user.is_admin = is_admin
        await self.session.flush()
        return user
