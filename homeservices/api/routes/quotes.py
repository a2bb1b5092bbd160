"""
Quote API Routes

Authenticated users request quotes on products and list their own quotes.
Each response embeds the quoted product.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from homeservices.api.dependencies import get_product_repository, get_quote_repository
from homeservices.api.middleware.error_handler import NotFoundError
from homeservices.api.routes.auth import CurrentUser, require_self_or_admin
from homeservices.api.schemas import ErrorResponse, QuoteResponse
from homeservices.storage.product_repository import ProductRepository
from homeservices.storage.quote_repository import QuoteRepository


router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.get(
    "",
    response_model=list[QuoteResponse],
    responses={404: {"model": ErrorResponse, "description": "No quotes requested yet"}},
)
async def list_quotes(
    current_user: CurrentUser,
    quotes: QuoteRepository = Depends(get_quote_repository),
):
    """The caller's quote requests."""
    require_self_or_admin(current_user, current_user.id)

    requested = await quotes.quotes_for(current_user)
    if not requested:
        raise NotFoundError("QuoteRequest")

    return [quote.to_public_dict() for quote in requested]


@router.post(
    "/product/{product_id}",
    response_model=QuoteResponse,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
)
async def request_quote(
    product_id: int,
    current_user: CurrentUser,
    products: ProductRepository = Depends(get_product_repository),
    quotes: QuoteRepository = Depends(get_quote_repository),
):
    """Request a quote on a product. Promised three days out."""
    require_self_or_admin(current_user, current_user.id)

    product = await products.get(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)

    logger.info(f"User {current_user.id} requesting quote on product {product_id}")
    quote = await quotes.create(current_user, product)
    await quotes.session.commit()

    return quote.to_public_dict()
