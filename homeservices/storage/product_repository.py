"""
Product Repository for HomeServices

CRUD and listing queries for the product catalog. Listings are always
ordered by id ascending.
"""

from typing import Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product, ProductType, is_storable_id, product_quoterequest


class ProductRepository:
    """
    Repository for product rows.

    Usage:
        repo = ProductRepository(session)

        product = await repo.add(Product.from_dict(body))
        homes = await repo.list_by_type(ProductType.HOME)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> list[Product]:
        """All products, sorted by id."""
        stmt = select(Product).order_by(Product.id.asc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def list_by_type(self, product_type: ProductType) -> list[Product]:
        """Products of one type, sorted by id."""
        stmt = (
            select(Product)
            .where(Product.type == product_type.value)
            .order_by(Product.id.asc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get(self, product_id: int) -> Optional[Product]:
        if not is_storable_id(product_id):
            return None
        return await self.session.get(Product, product_id)

    async def add(self, product: Product) -> Product:
        """
        Insert a new product and assign its id.

        Args:
            product: Unsaved product

        Returns:
            The same product, now persisted
        """
        self.session.add(product)
        await self.session.flush()
        await self.session.refresh(product)

        logger.info(f"Created product {product.id}: {product.title}")
        return product

    async def save(self, product: Product) -> Product:
        """Flush pending changes on a stored product."""
        await self.session.flush()
        await self.session.refresh(product)
        return product

    async def delete(self, product: Product) -> None:
        """Delete a product together with its quote links."""
        await self.session.execute(
            delete(product_quoterequest).where(
                product_quoterequest.c.product_id == product.persisted_id
            )
        )
        await self.session.delete(product)
        await self.session.flush()

        logger.info(f"Deleted product {product.id}")
