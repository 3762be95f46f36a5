"""Catalog endpoint tests."""

from httpx import AsyncClient

from atompoint.store.base import StoreBackend
from conftest import give_credits, register


class TestCatalogRead:
    async def test_grouped_listing(self, client: AsyncClient, user: dict, product: dict):
        response = await client.get("/api/products", headers=user["headers"])
        assert response.status_code == 200
        grouped = response.json()["products"]
        assert [p["id"] for p in grouped["Telenor"]["Data"]] == [product["id"]]

    async def test_listing_hides_unavailable(self, client: AsyncClient, user: dict, admin: dict, product: dict):
        await client.put(f"/api/products/{product['id']}", headers=admin["headers"], json={"available": False})
        response = await client.get("/api/products", headers=user["headers"])
        assert response.json()["products"] == {}

    async def test_listing_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/products")
        assert response.status_code == 401

    async def test_get_one(self, client: AsyncClient, user: dict, product: dict):
        response = await client.get(f"/api/products/{product['id']}", headers=user["headers"])
        assert response.status_code == 200
        assert response.json()["product"]["price_cr"] == 80

    async def test_get_unknown(self, client: AsyncClient, user: dict):
        response = await client.get("/api/products/999", headers=user["headers"])
        assert response.status_code == 404


class TestCatalogAdmin:
    async def test_create_requires_admin(self, client: AsyncClient, user: dict):
        response = await client.post("/api/products", headers=user["headers"], json={
            "operator": "MPT", "category": "Recharge", "name": "1000 MMK", "priceMMK": 1000, "priceCr": 100,
        })
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    async def test_create_rejects_zero_price(self, client: AsyncClient, admin: dict):
        response = await client.post("/api/products", headers=admin["headers"], json={
            "operator": "MPT", "category": "Recharge", "name": "Free", "priceMMK": 0, "priceCr": 0,
        })
        assert response.status_code == 400

    async def test_price_beyond_column_range(self, client: AsyncClient, admin: dict, product: dict):
        response = await client.post("/api/products", headers=admin["headers"], json={
            "operator": "MPT", "category": "Recharge", "name": "Huge", "priceMMK": 2**63, "priceCr": 100,
        })
        assert response.status_code == 400
        response = await client.put(f"/api/products/{product['id']}", headers=admin["headers"], json={
            "priceCr": 2_147_483_648,
        })
        assert response.status_code == 400

    async def test_update(self, client: AsyncClient, admin: dict, product: dict):
        response = await client.put(f"/api/products/{product['id']}", headers=admin["headers"], json={
            "priceCr": 90,
        })
        assert response.status_code == 200
        updated = response.json()["product"]
        assert updated["price_cr"] == 90
        assert updated["name"] == "1GB Daily"

    async def test_update_empty_body(self, client: AsyncClient, admin: dict, product: dict):
        response = await client.put(f"/api/products/{product['id']}", headers=admin["headers"], json={})
        assert response.status_code == 400

    async def test_update_unknown(self, client: AsyncClient, admin: dict):
        response = await client.put("/api/products/999", headers=admin["headers"], json={"name": "x"})
        assert response.status_code == 404

    async def test_delete(self, client: AsyncClient, admin: dict, product: dict):
        response = await client.delete(f"/api/products/{product['id']}", headers=admin["headers"])
        assert response.status_code == 200
        again = await client.delete(f"/api/products/{product['id']}", headers=admin["headers"])
        assert again.status_code == 404

    async def test_delete_keeps_order_history(
        self, client: AsyncClient, admin: dict, product: dict, backend: StoreBackend
    ):
        buyer = await register(client, "carol")
        await give_credits(backend, buyer["id"], 100)
        await client.post("/api/orders/product", headers=buyer["headers"], json={"productId": product["id"]})

        await client.delete(f"/api/products/{product['id']}", headers=admin["headers"])
        orders = (await client.get("/api/orders", headers=buyer["headers"])).json()["orders"]
        assert len(orders) == 1
        assert orders[0]["product_id"] is None
        assert orders[0]["amount"] == 80
