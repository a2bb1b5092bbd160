"""
Dependency injection for FastAPI routes.

Provides injectable dependencies for:
- Configuration
- The application context (engine, session factory, password hasher)
- Database sessions
- Repositories
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import AsyncGenerator

from fastapi import Depends, Request
from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from homeservices.security import DEFAULT_BCRYPT_ROUNDS, PasswordHasher
from homeservices.storage.models import Base
from homeservices.storage.product_repository import ProductRepository
from homeservices.storage.quote_repository import QuoteRepository
from homeservices.storage.user_repository import UserRepository


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class Settings:
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./homeservices.db"
    database_echo: bool = False

    # Sessions
    session_secret: str = "dev-session-secret-change-me"
    session_cookie: str = "homeservices_session"
    session_max_age_hours: int = 24

    # Password hashing
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Environment
    environment: str = "development"
    debug: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
            session_secret=os.getenv("SESSION_SECRET", cls.session_secret),
            session_cookie=os.getenv("SESSION_COOKIE", cls.session_cookie),
            session_max_age_hours=int(os.getenv("SESSION_MAX_AGE_HOURS", cls.session_max_age_hours)),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", cls.bcrypt_rounds)),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", cls.port)),
            environment=os.getenv("HOMESERVICES_ENV", cls.environment),
            debug=os.getenv("DEBUG", "true").lower() == "true",
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings.from_env()


# =============================================================================
# Application Context
# =============================================================================

def _create_engine(settings: Settings) -> AsyncEngine:
    if ":memory:" in settings.database_url:
        # One shared connection, otherwise every session gets an empty database
        return create_async_engine(
            settings.database_url,
            echo=settings.database_echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


@dataclass
class AppContext:
    """
    Everything a request handler needs, built once per application.

    Stored on `app.state.context` and handed to handlers through
    dependencies instead of module globals.
    """

    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker
    password_hasher: PasswordHasher = field(default_factory=PasswordHasher)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = _create_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            ),
            password_hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        )

    async def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready")

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_context(request: Request) -> AppContext:
    """Dependency returning the application context."""
    return request.app.state.context


def get_password_hasher(context: AppContext = Depends(get_context)) -> PasswordHasher:
    return context.password_hasher


# =============================================================================
# Database
# =============================================================================

async def get_db(
    context: AppContext = Depends(get_context),
) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    The request runs in one transaction: committed if the handler returns,
    rolled back if it raises.

    Yields:
        AsyncSession for database operations.
    """
    async with context.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# =============================================================================
# Repositories
# =============================================================================

def get_product_repository(db: AsyncSession = Depends(get_db)) -> ProductRepository:
    return ProductRepository(db)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_quote_repository(db: AsyncSession = Depends(get_db)) -> QuoteRepository:
    return QuoteRepository(db)
