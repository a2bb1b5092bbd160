"""
Product API Routes

Public catalog reads plus admin-only create, replace and delete.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from homeservices.api.dependencies import get_product_repository
from homeservices.api.middleware.error_handler import NotFoundError
from homeservices.api.routes.auth import AdminUser
from homeservices.api.schemas import ErrorResponse, ProductIn, ProductResponse
from homeservices.storage.models import Product, ProductType
from homeservices.storage.product_repository import ProductRepository


router = APIRouter(prefix="/products", tags=["products"])

ADMIN_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
    403: {"model": ErrorResponse, "description": "Admin account required"},
}


async def _get_or_404(repo: ProductRepository, product_id: int) -> Product:
    product = await repo.get(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


# =============================================================================
# Read Endpoints
# =============================================================================

@router.get("", response_model=list[ProductResponse])
async def list_products(repo: ProductRepository = Depends(get_product_repository)):
    """All products, sorted by id."""
    products = await repo.list_all()
    return [product.to_dict() for product in products]


@router.get("/business", response_model=list[ProductResponse])
async def list_business_products(repo: ProductRepository = Depends(get_product_repository)):
    """Products sold to businesses, sorted by id."""
    products = await repo.list_by_type(ProductType.BUSINESS)
    return [product.to_dict() for product in products]


@router.get("/home", response_model=list[ProductResponse])
async def list_home_products(repo: ProductRepository = Depends(get_product_repository)):
    """Products sold to homeowners, sorted by id."""
    products = await repo.list_by_type(ProductType.HOME)
    return [product.to_dict() for product in products]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def get_product(
    product_id: int,
    repo: ProductRepository = Depends(get_product_repository),
):
    product = await _get_or_404(repo, product_id)
    return product.to_dict()


# =============================================================================
# Admin Endpoints
# =============================================================================

@router.post(
    "",
    response_model=ProductResponse,
    responses={**ADMIN_RESPONSES, 400: {"model": ErrorResponse, "description": "Invalid product data"}},
)
async def create_product(
    body: ProductIn,
    admin: AdminUser,
    repo: ProductRepository = Depends(get_product_repository),
):
    """Create a product. Admin only."""
    logger.info(f"Admin {admin.id} creating product: {body.title}")

    product = Product.from_dict(body.model_dump(mode="json"))
    product = await repo.add(product)
    await repo.session.commit()

    return product.to_dict()


@router.delete(
    "/{product_id}",
    responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def delete_product(
    product_id: int,
    admin: AdminUser,
    repo: ProductRepository = Depends(get_product_repository),
):
    """Delete a product. Admin only."""
    logger.info(f"Admin {admin.id} deleting product {product_id}")

    product = await _get_or_404(repo, product_id)
    await repo.delete(product)
    await repo.session.commit()

    return {}


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def update_product(
    product_id: int,
    body: ProductIn,
    admin: AdminUser,
    repo: ProductRepository = Depends(get_product_repository),
):
    """Replace every field of a product. Admin only."""
    logger.info(f"Admin {admin.id} updating product {product_id}")

    product = await _get_or_404(repo, product_id)
    product.update_from(Product.from_dict(body.model_dump(mode="json")))
    product = await repo.save(product)
    await repo.session.commit()

    return product.to_dict()
