"""
Admin account bootstrap.

The public API never sets the admin flag, so operators create or promote
admins through this module (see scripts/create_admin.py).
"""

from typing import Optional

from loguru import logger

from homeservices.api.dependencies import AppContext
from homeservices.storage.models import User
from homeservices.storage.user_repository import UserRepository


async def ensure_admin(
    context: AppContext,
    email: str,
    password: Optional[str] = None,
    first_name: str = "Admin",
    last_name: str = "User",
    phone_number: str = "00000000",
) -> User:
    """
    Promote an existing account to admin, or register a new admin account.

    Args:
        context: Application context
        email: Account email
        password: Required when the account does not exist yet
        first_name, last_name, phone_number: Used for new accounts only

    Returns:
        The admin user
    """
    async with context.session_factory() as session:
        users = UserRepository(session)
        user = await users.get_by_email(email)

        if user is None:
            if not password:
                raise ValueError(f"No account for {email}; a password is required to create one")
            user = await users.register(User.build(
                email=email,
                first_name=first_name,
                last_name=last_name,
                password_hash=context.password_hasher.hash(password),
                phone_number=phone_number,
            ))
            logger.info(f"Created account {user.id} for {email}")

        await users.set_admin(user, True)
        await session.commit()

        logger.info(f"User {user.id} is now an admin")
        return user
