"""User self-service endpoint tests."""

from httpx import AsyncClient


class TestProfile:
    async def test_profile_includes_order_count(self, client: AsyncClient, user: dict):
        await client.post("/api/orders/credit", headers=user["headers"], json={"amount": 1500})
        response = await client.get("/api/users/profile", headers=user["headers"])
        assert response.status_code == 200
        profile = response.json()["user"]
        assert profile["username"] == "alice"
        assert profile["order_count"] == 1
        assert profile["security_amount"] == 0

    async def test_profile_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/users/profile")
        assert response.status_code == 401


class TestNotifications:
    async def test_clear_notifications(self, client: AsyncClient, user: dict):
        response = await client.post("/api/users/clear-notifications", headers=user["headers"])
        assert response.status_code == 200
        assert response.json() == {"message": "Notifications cleared", "cleared": 1}

        me = await client.get("/api/auth/me", headers=user["headers"])
        assert me.json()["user"]["notifications"] == []


class TestPublicSettings:
    async def test_no_auth_needed(self, client: AsyncClient):
        response = await client.get("/api/users/settings")
        assert response.status_code == 200
        data = response.json()
        assert data["admin_contact"] == "https://t.me/CEO_METAVERSE"
        assert isinstance(data["payment_details"], dict)
