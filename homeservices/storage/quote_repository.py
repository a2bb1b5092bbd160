"""
Quote Repository for HomeServices

Quote requests belong to one user and link to one product through the
product_quoterequest join table.
"""

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product, QuoteRequest, User


class QuoteRepository:
    """Repository for quote requests."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def quotes_for(self, user: User) -> list[QuoteRequest]:
        """A user's quote requests, oldest first, with products loaded."""
        stmt = (
            select(QuoteRequest)
            .where(QuoteRequest.user_id == user.persisted_id)
            .order_by(QuoteRequest.id.asc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def create(
        self,
        user: User,
        product: Product,
        now: Optional[datetime] = None,
    ) -> QuoteRequest:
        """Store a quote request and its join row in one flush."""
        quote = QuoteRequest.for_user(user, product, now=now)

        self.session.add(quote)
        await self.session.flush()

        logger.info(f"Created quote {quote.id} for user {user.id} on product {product.id}")
        return quote
