"""Admin endpoint tests."""

from httpx import AsyncClient

from conftest import login, register


class TestAdminAccess:
    async def test_regular_user_forbidden(self, client: AsyncClient, user: dict):
        for method, path in [
            ("GET", "/api/admin/users"),
            ("GET", "/api/admin/orders"),
            ("POST", "/api/admin/broadcast"),
        ]:
            response = await client.request(method, path, headers=user["headers"], json={"message": "hi"})
            assert response.status_code == 403, path

    async def test_anonymous_unauthorized(self, client: AsyncClient):
        response = await client.get("/api/admin/users")
        assert response.status_code == 401


class TestAdminUsers:
    async def test_list_users_with_order_counts(self, client: AsyncClient, admin: dict, user: dict):
        await client.post("/api/orders/credit", headers=user["headers"], json={"amount": 1000})
        response = await client.get("/api/admin/users", headers=admin["headers"])
        assert response.status_code == 200
        users = {u["username"]: u for u in response.json()["users"]}
        assert users["alice"]["order_count"] == 1
        assert users["boss"]["is_admin"] is True
        assert "password_hash" not in users["alice"]

    async def test_ban_and_unban(self, client: AsyncClient, admin: dict, user: dict):
        response = await client.put(
            f"/api/admin/users/{user['id']}/ban", headers=admin["headers"], json={"banned": True}
        )
        assert response.status_code == 200
        assert response.json()["user"]["banned"] is True
        assert response.json()["message"] == "User banned successfully"

        response = await client.put(
            f"/api/admin/users/{user['id']}/ban", headers=admin["headers"], json={"banned": False}
        )
        assert response.json()["user"]["banned"] is False
        me = await client.get("/api/auth/me", headers=user["headers"])
        assert me.status_code == 200

    async def test_ban_unknown_user(self, client: AsyncClient, admin: dict):
        response = await client.put("/api/admin/users/999/ban", headers=admin["headers"], json={"banned": True})
        assert response.status_code == 404

    async def test_reset_password(self, client: AsyncClient, admin: dict, user: dict):
        response = await client.post(
            f"/api/admin/users/{user['id']}/reset-password",
            headers=admin["headers"],
            json={"newPassword": "brandnew1"},
        )
        assert response.status_code == 200
        relogged = await login(client, "alice", "brandnew1")
        assert relogged["id"] == user["id"]
        old = await client.post("/api/auth/login", json={"username": "alice", "password": "secret1"})
        assert old.status_code == 401

    async def test_reset_password_too_short(self, client: AsyncClient, admin: dict, user: dict):
        response = await client.post(
            f"/api/admin/users/{user['id']}/reset-password",
            headers=admin["headers"],
            json={"new_password": "123"},
        )
        assert response.status_code == 400

    async def test_reset_password_unknown_user(self, client: AsyncClient, admin: dict):
        response = await client.post(
            "/api/admin/users/999/reset-password", headers=admin["headers"], json={"newPassword": "brandnew1"}
        )
        assert response.status_code == 404


class TestAdminOrders:
    async def _credit_order(self, client: AsyncClient, user: dict, amount: int = 2000) -> int:
        response = await client.post("/api/orders/credit", headers=user["headers"], json={"amount": amount})
        return response.json()["order"]["id"]

    async def test_list_orders_with_usernames(self, client: AsyncClient, admin: dict, user: dict):
        await self._credit_order(client, user)
        response = await client.get("/api/admin/orders", headers=admin["headers"])
        assert response.status_code == 200
        orders = response.json()["orders"]
        assert len(orders) == 1
        assert orders[0]["username"] == "alice"

    async def test_approve_grants_credits_once(self, client: AsyncClient, admin: dict, user: dict):
        order_id = await self._credit_order(client, user, 2000)
        response = await client.put(f"/api/admin/orders/{order_id}", headers=admin["headers"], json={
            "status": "APPROVED",
        })
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "APPROVED"
        assert response.json()["message"] == "Order approved successfully"

        again = await client.put(f"/api/admin/orders/{order_id}", headers=admin["headers"], json={
            "status": "APPROVED",
        })
        assert again.status_code == 400

        me = await client.get("/api/auth/me", headers=user["headers"])
        assert me.json()["user"]["credits"] == 200
        assert me.json()["user"]["notifications"][-2:] == [
            "Credit purchase approved! 200 credits added to your account.",
            "Your credit order has been approved!",
        ]

    async def test_reject_keeps_balance(self, client: AsyncClient, admin: dict, user: dict):
        order_id = await self._credit_order(client, user)
        response = await client.put(f"/api/admin/orders/{order_id}", headers=admin["headers"], json={
            "status": "rejected",
        })
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "REJECTED"
        me = await client.get("/api/auth/me", headers=user["headers"])
        assert me.json()["user"]["credits"] == 0

    async def test_rejected_cannot_be_approved(self, client: AsyncClient, admin: dict, user: dict):
        order_id = await self._credit_order(client, user)
        await client.put(f"/api/admin/orders/{order_id}", headers=admin["headers"], json={"status": "REJECTED"})
        response = await client.put(f"/api/admin/orders/{order_id}", headers=admin["headers"], json={
            "status": "APPROVED",
        })
        assert response.status_code == 400
        me = await client.get("/api/auth/me", headers=user["headers"])
        assert me.json()["user"]["credits"] == 0

    async def test_unknown_order(self, client: AsyncClient, admin: dict):
        response = await client.put("/api/admin/orders/999", headers=admin["headers"], json={"status": "APPROVED"})
        assert response.status_code == 404

    async def test_unknown_status(self, client: AsyncClient, admin: dict, user: dict):
        order_id = await self._credit_order(client, user)
        response = await client.put(f"/api/admin/orders/{order_id}", headers=admin["headers"], json={
            "status": "SHIPPED",
        })
        assert response.status_code == 400


class TestBroadcast:
    async def test_broadcast_to_everyone(self, client: AsyncClient, admin: dict, user: dict):
        await register(client, "bob")
        response = await client.post("/api/admin/broadcast", headers=admin["headers"], json={
            "message": "Maintenance tonight",
        })
        assert response.status_code == 200
        assert response.json() == {"count": 3, "message": "Broadcast sent to 3 users"}
        me = await client.get("/api/auth/me", headers=user["headers"])
        assert me.json()["user"]["notifications"][-1] == "Maintenance tonight"

    async def test_broadcast_to_targets(self, client: AsyncClient, admin: dict, user: dict):
        bob = await register(client, "bob")
        response = await client.post("/api/admin/broadcast", headers=admin["headers"], json={
            "message": "Your refund is ready",
            "targetIds": [bob["id"], 999],
        })
        assert response.json()["count"] == 1
        alice_inbox = (await client.get("/api/auth/me", headers=user["headers"])).json()["user"]["notifications"]
        bob_inbox = (await client.get("/api/auth/me", headers=bob["headers"])).json()["user"]["notifications"]
        assert "Your refund is ready" not in alice_inbox
        assert bob_inbox[-1] == "Your refund is ready"

    async def test_empty_message_rejected(self, client: AsyncClient, admin: dict):
        response = await client.post("/api/admin/broadcast", headers=admin["headers"], json={"message": ""})
        assert response.status_code == 400


class TestAdminSettings:
    async def test_payment_account_upsert_is_public(self, client: AsyncClient, admin: dict):
        response = await client.put("/api/admin/payment-accounts/KPay", headers=admin["headers"], json={
            "name": "Atom Point",
            "number": "09 111 222 333",
        })
        assert response.status_code == 200
        assert response.json()["payment_account"]["provider"] == "KPay"

        public = await client.get("/api/users/settings")
        assert public.json()["payment_details"]["KPay"] == {"name": "Atom Point", "number": "09 111 222 333"}

    async def test_inactive_account_hidden(self, client: AsyncClient, admin: dict):
        await client.put("/api/admin/payment-accounts/Wave Pay", headers=admin["headers"], json={
            "name": "Atom Point", "number": "09 000", "active": False,
        })
        public = await client.get("/api/users/settings")
        assert "Wave Pay" not in public.json()["payment_details"]

    async def test_setting_upsert(self, client: AsyncClient, admin: dict):
        response = await client.put("/api/admin/settings/adminContact", headers=admin["headers"], json={
            "value": "https://t.me/atompoint_support",
        })
        assert response.status_code == 200
        assert response.json()["setting"]["value"] == "https://t.me/atompoint_support"

        public = await client.get("/api/users/settings")
        assert public.json()["admin_contact"] == "https://t.me/atompoint_support"
        assert public.json()["settings"]["adminContact"] == "https://t.me/atompoint_support"
