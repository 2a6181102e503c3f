import json

from sqlalchemy import select
from starlette.requests import Request

from app.core.config import Settings, settings
from app.core.exceptions import unhandled_exception_handler
from app.core.seed import DEMO_PRODUCTS
from app.models import Product
from .conftest import checkout_payload


class TestCatalog:

    async def test_lists_active_products_by_name(self, client, make_product):
        await make_product("Zz Hidden", is_active=False)

        body = (await client.get("/api/products")).json()

        names = [p["name"] for p in body["data"]]
        assert names == sorted(names)
        assert "Zz Hidden" not in names
        assert body["meta"]["total"] == len(DEMO_PRODUCTS)

    async def test_get_by_slug(self, client):
        response = await client.get("/api/products/wireless-headphones")

        assert response.status_code == 200
        product = response.json()["data"]
        assert product["name"] == "Wireless Headphones"
        assert product["price"] == 149.99
        assert product["imageUrl"] == f"{settings.IMAGE_URL_PREFIX}/wireless-headphones.jpg"

    async def test_unknown_slug(self, client):
        response = await client.get("/api/products/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Product not found"},
        }

    async def test_inactive_product_still_resolves_by_id(self, client, make_product):
        retired = await make_product("Retired Item", is_active=False)

        by_id = await client.get(f"/api/products/id/{retired.id}")
        by_slug = await client.get(f"/api/products/{retired.slug}")

        assert by_id.status_code == 200
        assert by_id.json()["data"]["isActive"] is False
        assert by_slug.status_code == 404


class TestProductAdministration:

    async def test_create_product(self, client, login):
        admin = await login("admin_user")

        response = await client.post(
            "/api/products",
            json={"name": "Cable Organizer", "price": "9.99", "stock": 12, "description": "<b>Tidy</b><script>x</script>"},
            headers=admin,
        )

        assert response.status_code == 201
        assert response.json()["data"]["slug"] == "cable-organizer"
        product = (await client.get("/api/products/cable-organizer")).json()["data"]
        assert product["stock"] == 12
        assert "<script>" not in product["description"]

    async def test_duplicate_name(self, client, login):
        admin = await login("admin_user")

        response = await client.post(
            "/api/products", json={"name": "Wireless Headphones", "price": "1.00", "stock": 1}, headers=admin
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_invalid_price_and_stock(self, client, login):
        admin = await login("admin_user")

        response = await client.post(
            "/api/products", json={"name": "Broken", "price": "0", "stock": -1}, headers=admin
        )

        details = response.json()["error"]["details"]
        assert response.status_code == 400
        assert "price" in details and "stock" in details

    async def test_requires_admin(self, client, login):
        anonymous = await client.post("/api/products", json={"name": "X", "price": "1.00", "stock": 1})
        standard = await client.post(
            "/api/products", json={"name": "X", "price": "1.00", "stock": 1}, headers=await login()
        )

        assert anonymous.status_code == 401
        assert standard.status_code == 403

    async def test_rename_rederives_slug(self, client, login, make_product):
        product = await make_product("Old Name")
        admin = await login("admin_user")

        response = await client.patch(f"/api/products/{product.id}", json={"name": "New Name"}, headers=admin)

        assert response.json()["data"]["slug"] == "new-name"
        assert (await client.get("/api/products/new-name")).status_code == 200

    async def test_rename_to_unsluggable_name(self, client, login, make_product):
        product = await make_product("Sluggable")
        admin = await login("admin_user")

        response = await client.patch(f"/api/products/{product.id}", json={"name": "!!!"}, headers=admin)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert "name" in response.json()["error"]["details"]
        assert (await client.get("/api/products/sluggable")).status_code == 200

    async def test_empty_update(self, client, login, make_product):
        product = await make_product("Unchanged")

        response = await client.patch(f"/api/products/{product.id}", json={}, headers=await login("admin_user"))

        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_delete_is_soft(self, client, db, login, make_product):
        product = await make_product("Soft Deleted")

        response = await client.delete(f"/api/products/{product.id}", headers=await login("admin_user"))

        assert response.status_code == 200
        row = (await db.execute(select(Product).where(Product.id == product.id))).scalar_one()
        assert row.is_active is False


class TestAdminDashboard:

    async def test_all_products_include_inactive(self, client, login, make_product):
        await make_product("Inactive Listing", is_active=False)

        body = (await client.get("/api/admin/products", headers=await login("admin_user"))).json()

        assert "Inactive Listing" in [p["name"] for p in body["data"]]
        assert body["meta"]["total"] == len(DEMO_PRODUCTS) + 1

    async def test_stock_update(self, client, login, make_product):
        product = await make_product("Restock", stock=1)
        admin = await login("admin_user")

        ok = await client.patch(f"/api/admin/products/{product.id}/stock", json={"stock": 40}, headers=admin)
        negative = await client.patch(f"/api/admin/products/{product.id}/stock", json={"stock": -5}, headers=admin)
        missing = await client.patch("/api/admin/products/99999/stock", json={"stock": 1}, headers=admin)

        assert ok.json()["data"]["stock"] == 40
        assert negative.json()["error"]["code"] == "VALIDATION_ERROR"
        assert missing.status_code == 404

    async def test_orders_and_any_status_transition(self, client, login, make_product):
        product = await make_product("Status Flow", stock=5)
        session = {"X-Session-ID": "admin-flow"}
        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=session)
        placed = await client.post("/api/orders", json=checkout_payload(), headers={**session, **await login()})
        order_id = placed.json()["data"]["id"]
        admin = await login("admin_user")

        listing = (await client.get("/api/admin/orders", headers=admin)).json()["data"]
        assert listing[0]["id"] == order_id
        assert listing[0]["username"] == "standard_user"

        for new_status in ("delivered", "pending", "cancelled"):
            response = await client.patch(
                f"/api/admin/orders/{order_id}/status", json={"status": new_status}, headers=admin
            )
            assert response.status_code == 200
            assert response.json()["data"]["status"] == new_status

        detail = (await client.get(f"/api/admin/orders/{order_id}", headers=admin)).json()["data"]
        assert detail["status"] == "cancelled"
        assert detail["items"][0]["productName"] == "Status Flow"

    async def test_unknown_status(self, client, login):
        response = await client.patch(
            "/api/admin/orders/1/status", json={"status": "lost"}, headers=await login("admin_user")
        )

        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_stats(self, client, login):
        body = (await client.get("/api/admin/stats", headers=await login("admin_user"))).json()["data"]

        assert body["counts"] == {
            "products": len(DEMO_PRODUCTS),
            "orders": 0,
            "users": 3,
            "pendingOrders": 0,
        }
        assert body["recentOrders"] == []
        stocks = [p["stock"] for p in body["lowStockProducts"]]
        assert stocks == sorted(stocks)
        assert all(stock < settings.LOW_STOCK_THRESHOLD for stock in stocks)
        assert [p["name"] for p in body["lowStockProducts"]] == ["Desk Lamp", "Webcam HD", "USB-C Hub"]


class TestServiceEndpoints:

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_detailed_health(self, client):
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        assert response.json()["components"]["database"]["status"] == "healthy"

    async def test_unknown_route_uses_envelope(self, client):
        response = await client.get("/api/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_request_id_header(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"
        assert "X-Process-Time" in response.headers


def _request(path="/api/boom"):
    return Request({"type": "http", "method": "GET", "path": path, "headers": [], "query_string": b""})


class TestUnhandledErrors:

    async def test_detail_withheld_outside_development(self):
        response = await unhandled_exception_handler(_request(), RuntimeError("db password is hunter2"))

        body = json.loads(response.body)
        assert response.status_code == 500
        assert body == {
            "success": False,
            "error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
        }

    async def test_detail_exposed_in_development(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")

        response = await unhandled_exception_handler(_request(), RuntimeError("boom"))

        assert json.loads(response.body)["error"]["message"] == "boom"

    def test_environment_defaults_to_production(self, monkeypatch):
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        defaults = Settings(_env_file=None)

        assert defaults.ENVIRONMENT == "production"
        assert not defaults.is_development
