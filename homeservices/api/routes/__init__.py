"""
API Routes for HomeServices

Route modules:
- auth: Login, logout and the authorization checks shared by other routes
- products: Product catalog CRUD
- users: Registration, accounts and home info
- quotes: Quote requests
"""

from homeservices.api.routes.auth import router as auth_router
from homeservices.api.routes.products import router as products_router
from homeservices.api.routes.users import router as users_router
from homeservices.api.routes.quotes import router as quotes_router

__all__ = [
    "auth_router",
    "products_router",
    "users_router",
    "quotes_router",
]
