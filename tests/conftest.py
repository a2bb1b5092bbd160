"""
Pytest configuration and fixtures for HomeServices tests.
"""

import sys
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from homeservices.admin import ensure_admin
from homeservices.api.dependencies import AppContext, Settings
from homeservices.api.main import create_app


# =============================================================================
# Test Settings
# =============================================================================

def get_test_settings() -> Settings:
    """Return settings configured for testing."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        database_echo=False,
        session_secret="test-session-secret",
        bcrypt_rounds=4,
        environment="test",
        debug=False,
    )


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass"


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def app():
    """Create FastAPI application with an empty in-memory database."""
    application = create_app(get_test_settings())
    context: AppContext = application.state.context
    await context.create_tables()

    yield application

    await context.dispose()


@pytest.fixture
def context(app) -> AppContext:
    return app.state.context


def make_client(app, auth=None) -> AsyncClient:
    """HTTP client with its own cookie jar (and so its own session)."""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test", auth=auth)


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous HTTP client."""
    async with make_client(app) as ac:
        yield ac


# =============================================================================
# Account Fixtures
# =============================================================================

@pytest.fixture
def customer_data() -> dict:
    return {
        "email": "jane@example.com",
        "first_name": "Jane",
        "last_name": "Doe",
        "password": "jane-pass",
        "phone_number": "5551234567",
    }


@pytest.fixture
def other_customer_data() -> dict:
    return {
        "email": "sam@example.com",
        "first_name": "Sam",
        "last_name": "Roe",
        "password": "sam-pass",
        "phone_number": "5559876543",
    }


@pytest_asyncio.fixture
async def admin_user(context):
    """Admin account created through the bootstrap helper."""
    return await ensure_admin(
        context,
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        phone_number="5550000000",
    )


@pytest_asyncio.fixture
async def customer(client, customer_data) -> dict:
    """Registered non-admin account (public view)."""
    response = await client.post("/users", json=customer_data)
    assert response.status_code == 200
    return response.json()


@pytest_asyncio.fixture
async def other_customer(client, other_customer_data) -> dict:
    response = await client.post("/users", json=other_customer_data)
    assert response.status_code == 200
    return response.json()


@pytest_asyncio.fixture
async def admin_client(app, admin_user) -> AsyncGenerator[AsyncClient, None]:
    async with make_client(app, auth=(ADMIN_EMAIL, ADMIN_PASSWORD)) as ac:
        yield ac


@pytest_asyncio.fixture
async def customer_client(app, customer, customer_data) -> AsyncGenerator[AsyncClient, None]:
    async with make_client(app, auth=(customer_data["email"], customer_data["password"])) as ac:
        yield ac


@pytest_asyncio.fixture
async def other_client(app, other_customer, other_customer_data) -> AsyncGenerator[AsyncClient, None]:
    auth = (other_customer_data["email"], other_customer_data["password"])
    async with make_client(app, auth=auth) as ac:
        yield ac


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_product_data() -> dict:
    """Sample product body."""
    return {
        "title": "Paint",
        "price_hourly": 50,
        "price_square_foot": 2,
        "product_description": "Interior wall painting",
        "type": "home",
    }


@pytest.fixture
def sample_products_batch() -> list[dict]:
    """Mixed business and home products."""
    return [
        {
            "title": "Office Cleaning",
            "image_url": "https://example.com/office.png",
            "price_hourly": 40.0,
            "price_square_foot": 0.5,
            "product_description": "Nightly office cleaning",
            "type": "business",
        },
        {
            "title": "Lawn Care",
            "price_hourly": 30.0,
            "price_square_foot": 0.1,
            "product_description": "Weekly mowing and edging",
            "type": "home",
        },
        {
            "title": "Window Washing",
            "price_hourly": 35.0,
            "price_square_foot": 0.25,
            "product_description": "Storefront windows",
            "type": "business",
        },
        {
            "title": "Gutter Cleaning",
            "price_hourly": 45.0,
            "price_square_foot": 0.3,
            "product_description": "Seasonal gutter cleaning",
            "type": "home",
        },
    ]


@pytest_asyncio.fixture
async def product(admin_client, sample_product_data) -> dict:
    """A stored product (wire representation)."""
    response = await admin_client.post("/products", json=sample_product_data)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def sample_home_info() -> dict:
    return {
        "bathroom_count": 2,
        "bedroom_count": 3,
        "kitchen_size": "medium",
        "other_rooms_count": 1,
        "square_footage": 1800,
    }
