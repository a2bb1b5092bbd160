"""
Integration tests for API endpoints.
"""

import pytest
from sqlalchemy import func, select

from homeservices.storage.models import HomeInfo, Product, QUOTE_PROMISE_WINDOW
from tests.conftest import make_client

pytestmark = pytest.mark.asyncio


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["database"] == "healthy"

    async def test_request_id_echoed(self, client):
        response = await client.get("/products", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"


class TestProductReads:
    """Tests for public product endpoints."""

    async def test_list_empty(self, client):
        response = await client.get("/products")

        assert response.status_code == 200
        assert response.json() == []

    async def test_list_sorted_by_id(self, client, admin_client, sample_products_batch):
        for body in sample_products_batch:
            await admin_client.post("/products", json=body)

        response = await client.get("/products")

        assert response.status_code == 200
        ids = [p["id"] for p in response.json()]
        assert ids == sorted(ids)
        assert len(ids) == len(sample_products_batch)

    async def test_list_by_type(self, client, admin_client, sample_products_batch):
        for body in sample_products_batch:
            await admin_client.post("/products", json=body)

        business = (await client.get("/products/business")).json()
        home = (await client.get("/products/home")).json()

        assert [p["title"] for p in business] == ["Office Cleaning", "Window Washing"]
        assert [p["title"] for p in home] == ["Lawn Care", "Gutter Cleaning"]
        assert all(p["type"] == "business" for p in business)

    async def test_get_by_id(self, client, product):
        response = await client.get(f"/products/{product['id']}")

        assert response.status_code == 200
        assert response.json() == product

    async def test_get_nonexistent_product(self, client):
        response = await client.get("/products/999")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestProductWrites:
    """Tests for admin-only product endpoints."""

    async def test_create_as_admin(self, admin_client, sample_product_data):
        response = await admin_client.post("/products", json=sample_product_data)

        assert response.status_code == 200
        data = response.json()
        assert isinstance(data["id"], int)
        assert data["title"] == "Paint"
        assert data["price_hourly"] == 50.0
        assert data["type"] == "home"
        assert data["image_url"] is None

    async def test_create_as_customer_is_forbidden(self, client, customer_client, sample_product_data):
        response = await customer_client.post("/products", json=sample_product_data)

        assert response.status_code == 403
        assert (await client.get("/products")).json() == []

    async def test_create_unauthenticated(self, client, sample_product_data):
        response = await client.post("/products", json=sample_product_data)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Basic"

    async def test_create_with_unknown_type(self, admin_client, sample_product_data):
        sample_product_data["type"] = "Home"
        response = await admin_client.post("/products", json=sample_product_data)

        assert response.status_code == 400

    async def test_create_with_missing_field(self, admin_client, sample_product_data):
        del sample_product_data["title"]
        response = await admin_client.post("/products", json=sample_product_data)

        assert response.status_code == 400

    @pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
    async def test_create_with_non_finite_price(self, client, admin_client, literal):
        body = (
            '{"title": "Paint", "price_hourly": ' + literal + ', "price_square_foot": 2,'
            ' "product_description": "Interior wall painting", "type": "home"}'
        )
        response = await admin_client.post(
            "/products",
            content=body.encode(),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"
        assert (await client.get("/products")).json() == []

    async def test_create_with_malformed_json(self, admin_client):
        response = await admin_client.post(
            "/products",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    async def test_update_replaces_all_fields(self, admin_client, sample_products_batch):
        created = (await admin_client.post("/products", json=sample_products_batch[0])).json()
        assert created["image_url"] is not None

        replacement = sample_products_batch[1]
        response = await admin_client.patch(f"/products/{created['id']}", json=replacement)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["title"] == "Lawn Care"
        assert data["type"] == "home"
        assert data["image_url"] is None

        fetched = (await admin_client.get(f"/products/{created['id']}")).json()
        assert fetched == data

    async def test_update_nonexistent(self, admin_client, sample_product_data):
        response = await admin_client.patch("/products/999", json=sample_product_data)

        assert response.status_code == 404

    async def test_update_as_customer(self, customer_client, product, sample_product_data):
        sample_product_data["title"] = "Hacked"
        response = await customer_client.patch(f"/products/{product['id']}", json=sample_product_data)

        assert response.status_code == 403
        assert (await customer_client.get(f"/products/{product['id']}")).json()["title"] == "Paint"

    async def test_delete(self, admin_client, product):
        response = await admin_client.delete(f"/products/{product['id']}")

        assert response.status_code == 200
        assert response.json() == {}

        get_response = await admin_client.get(f"/products/{product['id']}")
        assert get_response.status_code == 404

    async def test_delete_nonexistent(self, admin_client):
        response = await admin_client.delete("/products/999")

        assert response.status_code == 404

    async def test_delete_as_customer(self, client, customer_client, product):
        response = await customer_client.delete(f"/products/{product['id']}")

        assert response.status_code == 403
        assert (await client.get(f"/products/{product['id']}")).status_code == 200


class TestAdminOnlyEndpoints:
    """Every admin-only endpoint separates 401 from 403."""

    ENDPOINTS = [
        ("POST", "/products"),
        ("PATCH", "/products/1"),
        ("DELETE", "/products/1"),
        ("GET", "/users"),
    ]

    @pytest.mark.parametrize("method,path", ENDPOINTS)
    async def test_unauthenticated(self, client, sample_product_data, method, path):
        body = sample_product_data if method in ("POST", "PATCH") else None
        response = await client.request(method, path, json=body)

        assert response.status_code == 401

    @pytest.mark.parametrize("method,path", ENDPOINTS)
    async def test_non_admin(self, customer_client, sample_product_data, method, path):
        body = sample_product_data if method in ("POST", "PATCH") else None
        response = await customer_client.request(method, path, json=body)

        assert response.status_code == 403

    @pytest.mark.parametrize("method,path", ENDPOINTS)
    async def test_wrong_password(self, app, customer, customer_data, sample_product_data, method, path):
        body = sample_product_data if method in ("POST", "PATCH") else None
        async with make_client(app, auth=(customer_data["email"], "wrong")) as ac:
            response = await ac.request(method, path, json=body)

        assert response.status_code == 401


class TestAuthEndpoints:
    """Tests for login and logout."""

    async def test_login_returns_public_user(self, customer_client, customer):
        response = await customer_client.post("/login")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == customer["id"]
        assert "password" not in data

    async def test_login_wrong_password(self, app, customer, customer_data):
        async with make_client(app, auth=(customer_data["email"], "nope")) as ac:
            response = await ac.post("/login")

        assert response.status_code == 401

    async def test_login_unknown_email(self, app):
        async with make_client(app, auth=("ghost@example.com", "nope")) as ac:
            response = await ac.post("/login")

        assert response.status_code == 401

    async def test_login_without_credentials(self, client):
        response = await client.post("/login")

        assert response.status_code == 401

    async def test_session_reused_after_login(self, app, customer, customer_data):
        async with make_client(app) as ac:
            login = await ac.post("/login", auth=(customer_data["email"], customer_data["password"]))
            assert login.status_code == 200

            # No credentials: the session identifies the caller
            response = await ac.get(f"/users/{customer['id']}")
            assert response.status_code == 200

    async def test_logout_clears_session(self, app, customer, customer_data):
        async with make_client(app) as ac:
            await ac.post("/login", auth=(customer_data["email"], customer_data["password"]))

            response = await ac.get("/logout")
            assert response.status_code == 200
            assert response.json() == []

            after = await ac.get(f"/users/{customer['id']}")
            assert after.status_code == 401


class TestUserEndpoints:
    """Tests for registration and account lookup."""

    async def test_register(self, client, customer_data):
        response = await client.post("/users", json=customer_data)

        assert response.status_code == 200
        data = response.json()
        assert isinstance(data["id"], int)
        assert data["email"] == customer_data["email"]
        assert data["first_name"] == "Jane"
        assert data["admin"] is False
        assert "password" not in data

    async def test_register_cannot_set_admin(self, client, customer_data):
        customer_data["admin"] = True
        response = await client.post("/users", json=customer_data)

        assert response.status_code == 200
        assert response.json()["admin"] is False

    async def test_register_duplicate_email(self, client, customer, customer_data):
        customer_data["first_name"] = "Other"
        response = await client.post("/users", json=customer_data)

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    @pytest.mark.parametrize("phone_number", ["1234567", "555-123-4567", "1234567890123456"])
    async def test_register_invalid_phone(self, client, customer_data, phone_number):
        customer_data["phone_number"] = phone_number
        response = await client.post("/users", json=customer_data)

        assert response.status_code == 400

    async def test_register_eight_digit_phone(self, client, customer_data):
        customer_data["phone_number"] = "12345678"
        response = await client.post("/users", json=customer_data)

        assert response.status_code == 200

    async def test_register_invalid_email(self, client, customer_data):
        customer_data["email"] = "jane.example.com"
        response = await client.post("/users", json=customer_data)

        assert response.status_code == 400

    async def test_register_missing_field(self, client, customer_data):
        del customer_data["last_name"]
        response = await client.post("/users", json=customer_data)

        assert response.status_code == 400

    async def test_list_users_as_admin(self, admin_client, customer, other_customer):
        response = await admin_client.get("/users")

        assert response.status_code == 200
        emails = [u["email"] for u in response.json()]
        assert customer["email"] in emails
        assert other_customer["email"] in emails
        assert all("password" not in u for u in response.json())

    async def test_get_self(self, customer_client, customer):
        response = await customer_client.get(f"/users/{customer['id']}")

        assert response.status_code == 200
        assert response.json() == customer

    async def test_get_other_user_forbidden(self, customer_client, other_customer):
        response = await customer_client.get(f"/users/{other_customer['id']}")

        assert response.status_code == 403

    async def test_admin_gets_any_user(self, admin_client, customer):
        response = await admin_client.get(f"/users/{customer['id']}")

        assert response.status_code == 200
        assert response.json()["email"] == customer["email"]

    async def test_admin_gets_missing_user(self, admin_client):
        response = await admin_client.get("/users/999")

        assert response.status_code == 404

    async def test_get_user_unauthenticated(self, client, customer):
        response = await client.get(f"/users/{customer['id']}")

        assert response.status_code == 401


class TestHomeInfoEndpoints:
    """Tests for the caller's home info."""

    async def test_missing_home_info(self, customer_client):
        response = await customer_client.get("/users/homeInfo")

        assert response.status_code == 404

    async def test_put_creates(self, customer_client, customer, sample_home_info):
        response = await customer_client.put("/users/homeInfo", json=sample_home_info)

        assert response.status_code == 200
        data = response.json()
        assert data["rwuser_id"] == customer["id"]
        assert data["kitchen_size"] == "medium"

        fetched = await customer_client.get("/users/homeInfo")
        assert fetched.status_code == 200
        assert fetched.json() == data

    async def test_put_twice_updates_in_place(self, context, customer_client, customer, sample_home_info):
        first = (await customer_client.put("/users/homeInfo", json=sample_home_info)).json()

        sample_home_info.update(bedroom_count=5, kitchen_size="large")
        second = (await customer_client.put("/users/homeInfo", json=sample_home_info)).json()

        assert second["id"] == first["id"]
        assert second["bedroom_count"] == 5
        assert second["kitchen_size"] == "large"

        async with context.session_factory() as session:
            count = await session.scalar(
                select(func.count()).select_from(HomeInfo).where(HomeInfo.user_id == customer["id"])
            )
        assert count == 1

    async def test_home_info_is_per_user(self, customer_client, other_client, sample_home_info):
        await customer_client.put("/users/homeInfo", json=sample_home_info)

        response = await other_client.get("/users/homeInfo")

        assert response.status_code == 404

    async def test_put_invalid_kitchen_size(self, customer_client, sample_home_info):
        sample_home_info["kitchen_size"] = "Huge"
        response = await customer_client.put("/users/homeInfo", json=sample_home_info)

        assert response.status_code == 400

    async def test_put_negative_count(self, customer_client, sample_home_info):
        sample_home_info["bathroom_count"] = -1
        response = await customer_client.put("/users/homeInfo", json=sample_home_info)

        assert response.status_code == 400

    async def test_home_info_unauthenticated(self, client, sample_home_info):
        assert (await client.get("/users/homeInfo")).status_code == 401
        assert (await client.put("/users/homeInfo", json=sample_home_info)).status_code == 401


class TestQuoteEndpoints:
    """Tests for quote requests."""

    async def test_no_quotes(self, customer_client):
        response = await customer_client.get("/quotes")

        assert response.status_code == 404

    async def test_request_quote(self, customer_client, customer, product):
        response = await customer_client.post(f"/quotes/product/{product['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["rwuser_id"] == customer["id"]
        assert data["product"] == product
        assert data["promised"] == data["created"] + QUOTE_PROMISE_WINDOW.total_seconds()

    async def test_request_quote_missing_product(self, customer_client):
        response = await customer_client.post("/quotes/product/999")

        assert response.status_code == 404

    async def test_request_quote_unauthenticated(self, client, product):
        response = await client.post(f"/quotes/product/{product['id']}")

        assert response.status_code == 401

    async def test_list_own_quotes(self, customer_client, other_client, admin_client, sample_products_batch):
        created = [
            (await admin_client.post("/products", json=body)).json()
            for body in sample_products_batch[:2]
        ]
        for item in created:
            await customer_client.post(f"/quotes/product/{item['id']}")
        await other_client.post(f"/quotes/product/{created[0]['id']}")

        response = await customer_client.get("/quotes")

        assert response.status_code == 200
        quotes = response.json()
        assert [q["product"]["id"] for q in quotes] == [item["id"] for item in created]

        other = (await other_client.get("/quotes")).json()
        assert len(other) == 1

    async def test_quote_whose_product_was_deleted(self, admin_client, customer_client, product):
        await customer_client.post(f"/quotes/product/{product['id']}")
        await admin_client.delete(f"/products/{product['id']}")

        response = await customer_client.get("/quotes")

        assert response.status_code == 500
        assert response.json()["code"] == "SERVER_ERROR"

    async def test_quote_links_one_product(self, context, customer_client, product):
        await customer_client.post(f"/quotes/product/{product['id']}")

        async with context.session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(Product))
        assert count == 1


class TestOutOfRangeIds:
    """Ids no row can have are reported as missing."""

    HUGE_ID = "99999999999999999999"

    async def test_get_product(self, client):
        response = await client.get(f"/products/{self.HUGE_ID}")

        assert response.status_code == 404

    async def test_update_and_delete_product(self, admin_client, sample_product_data):
        patch = await admin_client.patch(f"/products/{self.HUGE_ID}", json=sample_product_data)
        delete = await admin_client.delete(f"/products/{self.HUGE_ID}")

        assert patch.status_code == 404
        assert delete.status_code == 404

    async def test_request_quote(self, customer_client):
        response = await customer_client.post(f"/quotes/product/{self.HUGE_ID}")

        assert response.status_code == 404

    async def test_get_user_as_admin(self, admin_client):
        response = await admin_client.get(f"/users/{self.HUGE_ID}")

        assert response.status_code == 404

    async def test_get_user_as_customer(self, customer_client):
        response = await customer_client.get(f"/users/{self.HUGE_ID}")

        assert response.status_code == 403

    async def test_negative_product_id(self, client):
        response = await client.get("/products/-1")

        assert response.status_code == 404
