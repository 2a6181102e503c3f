from sqlalchemy import update

from app.api.v1.cart.schemas import CartLine
from app.api.v1.cart.services import CartStore
from app.core.config import settings
from app.models import Product


class TestCartMutations:
    """Session cart over the HTTP API"""

    async def test_add_read_remove(self, client, make_product, session_headers):
        product = await make_product("Test Mug", price="12.50", stock=10)

        added = await client.post(
            "/api/cart/items", json={"productId": product.id, "quantity": 3}, headers=session_headers
        )
        assert added.status_code == 200
        assert added.json()["data"] == {"productId": product.id, "quantity": 3, "totalItems": 3}

        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 3
        assert cart["items"][0]["product"]["name"] == "Test Mug"
        assert cart["totalItems"] == 3
        assert cart["totalAmount"] == 37.5

        removed = await client.delete(f"/api/cart/items/{product.id}", headers=session_headers)
        assert removed.status_code == 200

        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert cart == {"items": [], "totalItems": 0, "totalAmount": 0.0}

    async def test_add_accumulates_existing_line(self, client, make_product, session_headers):
        product = await make_product("Test Pen", stock=10)

        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 2}, headers=session_headers)
        response = await client.post(
            "/api/cart/items", json={"productId": product.id, "quantity": 4}, headers=session_headers
        )

        assert response.json()["data"]["quantity"] == 6
        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert len(cart["items"]) == 1

    async def test_add_over_stock_leaves_cart_unchanged(self, client, make_product, session_headers):
        product = await make_product("Scarce Item", stock=5)

        response = await client.post(
            "/api/cart/items", json={"productId": product.id, "quantity": 6}, headers=session_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "OUT_OF_STOCK"
        assert "Scarce Item" in response.json()["error"]["message"]
        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert cart["items"] == []

    async def test_accumulated_quantity_checked_against_stock(self, client, make_product, session_headers):
        product = await make_product("Five Left", stock=5)
        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 4}, headers=session_headers)

        response = await client.post(
            "/api/cart/items", json={"productId": product.id, "quantity": 2}, headers=session_headers
        )

        assert response.json()["error"]["code"] == "OUT_OF_STOCK"
        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert cart["items"][0]["quantity"] == 4

    async def test_accumulated_quantity_capped_per_line(self, client, make_product, session_headers):
        product = await make_product("Pallet", stock=500)
        cap = settings.CART_MAX_LINE_QUANTITY
        await client.post("/api/cart/items", json={"productId": product.id, "quantity": cap}, headers=session_headers)

        response = await client.post(
            "/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=session_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert cart["items"][0]["quantity"] == cap

    async def test_add_unknown_or_inactive_product(self, client, make_product, session_headers):
        hidden = await make_product("Hidden", is_active=False)

        for product_id in (hidden.id, 99999):
            response = await client.post(
                "/api/cart/items", json={"productId": product_id, "quantity": 1}, headers=session_headers
            )
            assert response.status_code == 404
            assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_add_quantity_bounds(self, client, make_product, session_headers):
        product = await make_product("Bulk", stock=500)

        for quantity in (0, -1, settings.CART_MAX_LINE_QUANTITY + 1):
            response = await client.post(
                "/api/cart/items", json={"productId": product.id, "quantity": quantity}, headers=session_headers
            )
            assert response.status_code == 400
            assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_update_replaces_quantity(self, client, make_product, session_headers):
        product = await make_product("Notebook", stock=10)
        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 5}, headers=session_headers)

        response = await client.patch(
            f"/api/cart/items/{product.id}", json={"quantity": 2}, headers=session_headers
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"productId": product.id, "quantity": 2, "totalItems": 2}

    async def test_update_to_zero_removes_line(self, client, make_product, session_headers):
        product = await make_product("Eraser", stock=10)
        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=session_headers)

        response = await client.patch(
            f"/api/cart/items/{product.id}", json={"quantity": 0}, headers=session_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["totalItems"] == 0
        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert cart["items"] == []

    async def test_update_over_stock(self, client, make_product, session_headers):
        product = await make_product("Stapler", stock=3)
        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=session_headers)

        response = await client.patch(
            f"/api/cart/items/{product.id}", json={"quantity": 4}, headers=session_headers
        )

        assert response.json()["error"]["code"] == "OUT_OF_STOCK"
        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert cart["items"][0]["quantity"] == 1

    async def test_update_and_remove_missing_line(self, client, make_product, session_headers):
        product = await make_product("Not In Cart", stock=3)

        patched = await client.patch(f"/api/cart/items/{product.id}", json={"quantity": 1}, headers=session_headers)
        deleted = await client.delete(f"/api/cart/items/{product.id}", headers=session_headers)

        assert patched.status_code == deleted.status_code == 404
        assert patched.json()["error"]["code"] == "NOT_FOUND"

    async def test_clear_is_idempotent(self, client, make_product, session_headers):
        product = await make_product("Clearable", stock=3)
        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=session_headers)

        for _ in range(2):
            response = await client.delete("/api/cart", headers=session_headers)
            assert response.status_code == 200

        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert cart["items"] == []

    async def test_session_header_required(self, client):
        response = await client.get("/api/cart")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_sessions_are_isolated(self, client, make_product):
        product = await make_product("Shared", stock=10)
        await client.post(
            "/api/cart/items", json={"productId": product.id, "quantity": 2}, headers={"X-Session-ID": "a"}
        )

        other = (await client.get("/api/cart", headers={"X-Session-ID": "b"})).json()["data"]
        assert other["items"] == []


class TestCartStorage:

    async def test_every_write_resets_expiry(self, client, kv, make_product, session_headers):
        product = await make_product("Timed", stock=10)
        key = CartStore.key(session_headers["X-Session-ID"])

        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=session_headers)
        assert 0 < await kv.ttl(key) <= settings.cart_ttl_seconds

        await kv.client.expire(key, 60)
        await client.patch(f"/api/cart/items/{product.id}", json={"quantity": 2}, headers=session_headers)

        assert await kv.ttl(key) > 60

    async def test_clear_deletes_record(self, client, kv, make_product, session_headers):
        product = await make_product("Gone", stock=10)
        key = CartStore.key(session_headers["X-Session-ID"])
        await client.post("/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=session_headers)

        await client.delete("/api/cart", headers=session_headers)

        assert await kv.get_json(key) is None

    async def test_inactive_product_hidden_but_kept(self, client, kv, db, make_product, session_headers):
        kept = await make_product("Still Sold", price="5.00", stock=10)
        retired = await make_product("Retired", price="7.00", stock=10)
        for product in (kept, retired):
            await client.post(
                "/api/cart/items", json={"productId": product.id, "quantity": 1}, headers=session_headers
            )

        await db.execute(update(Product).where(Product.id == retired.id).values(is_active=False))
        await db.commit()

        cart = (await client.get("/api/cart", headers=session_headers)).json()["data"]
        assert [item["productId"] for item in cart["items"]] == [kept.id]
        assert cart["totalAmount"] == 5.0

        stored = await CartStore(kv).load(session_headers["X-Session-ID"])
        assert {line.product_id for line in stored.items} == {kept.id, retired.id}

    async def test_concurrent_writers_last_write_wins(self, kv):
        """Two read-modify-write cycles on one session: the second save overwrites the first"""
        store = CartStore(kv)
        session_id = "racy-session"

        first = await store.load(session_id)
        second = await store.load(session_id)

        first.items.append(CartLine(product_id=1, quantity=2))
        second.items.append(CartLine(product_id=2, quantity=5))

        await store.save(session_id, first)
        await store.save(session_id, second)

        final = await store.load(session_id)
        assert [(line.product_id, line.quantity) for line in final.items] == [(2, 5)]
