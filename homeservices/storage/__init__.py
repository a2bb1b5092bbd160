"""
Storage Module for HomeServices

SQLAlchemy models and repositories:
- Products, users, home info and quote requests
- Product/quote join table
- Async repositories over an AsyncSession
"""

from homeservices.storage.models import (
    Base,
    Product,
    ProductType,
    User,
    HomeInfo,
    RoomSize,
    QuoteRequest,
    QUOTE_PROMISE_WINDOW,
    ConversionError,
    UnsavedEntityError,
    MissingRelationError,
)
from homeservices.storage.product_repository import ProductRepository
from homeservices.storage.user_repository import UserRepository, EmailTakenError
from homeservices.storage.quote_repository import QuoteRepository

__all__ = [
    # Models
    "Base",
    "Product",
    "ProductType",
    "User",
    "HomeInfo",
    "RoomSize",
    "QuoteRequest",
    "QUOTE_PROMISE_WINDOW",
    "ConversionError",
    "UnsavedEntityError",
    "MissingRelationError",
    # Repositories
    "ProductRepository",
    "UserRepository",
    "EmailTakenError",
    "QuoteRepository",
]
