"""Admin router — all /api/admin/* endpoints. Every route requires an admin session."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from atompoint.admin.schemas import (
    AdminOrderListResponse,
    AdminUserListResponse,
    AdminUserResponse,
    BanRequest,
    BanResponse,
    BroadcastRequest,
    BroadcastResponse,
    OrderStatusRequest,
    PaymentAccountEnvelope,
    PaymentAccountRequest,
    PaymentAccountResponse,
    ResetPasswordRequest,
    SettingEnvelope,
    SettingRequest,
    SettingResponse,
)
from atompoint.admin.service import (
    broadcast,
    reset_user_password,
    set_user_banned,
    upsert_payment_account,
    upsert_setting,
)
from atompoint.auth.dependencies import require_admin
from atompoint.auth.schemas import MessageResponse
from atompoint.db.models import User
from atompoint.dependencies import get_store
from atompoint.orders.schemas import AdminOrderResponse, OrderCreatedResponse, OrderResponse
from atompoint.orders.service import set_order_status
from atompoint.store.base import Store

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


def _admin_user_response(user: User, order_count: int) -> AdminUserResponse:
    return AdminUserResponse(
        id=user.id,
        username=user.username,
        is_admin=user.is_admin,
        credits=user.credits,
        banned=user.banned,
        created_at=user.created_at,
        order_count=order_count,
    )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=AdminUserListResponse)
async def list_users(store: Store = Depends(get_store)) -> AdminUserListResponse:
    """All users, newest first, with order counts."""
    rows = await store.users.list_with_order_counts()
    return AdminUserListResponse(users=[_admin_user_response(u, n) for u, n in rows])


@router.put("/users/{user_id}/ban", response_model=BanResponse)
async def ban_user(
    user_id: int,
    body: BanRequest,
    store: Store = Depends(get_store),
) -> BanResponse:
    """Ban or unban a user."""
    user = await set_user_banned(store, user_id, body.banned)
    await store.commit()
    order_count = await store.users.count_orders(user_id)
    return BanResponse(
        user=_admin_user_response(user, order_count),
        message="User banned successfully" if body.banned else "User unbanned successfully",
    )


@router.post("/users/{user_id}/reset-password", response_model=MessageResponse)
async def reset_password_endpoint(
    user_id: int,
    body: ResetPasswordRequest,
    store: Store = Depends(get_store),
) -> MessageResponse:
    """Set a new password for a user."""
    await reset_user_password(store, user_id, body.new_password)
    await store.commit()
    return MessageResponse(message="Password reset successfully")


@router.post("/broadcast", response_model=BroadcastResponse)
async def broadcast_endpoint(
    body: BroadcastRequest,
    store: Store = Depends(get_store),
) -> BroadcastResponse:
    """Send a notification to all users or to an explicit subset."""
    count = await broadcast(store, body.message, body.target_ids)
    await store.commit()
    return BroadcastResponse(count=count, message=f"Broadcast sent to {count} users")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@router.get("/orders", response_model=AdminOrderListResponse)
async def list_orders(store: Store = Depends(get_store)) -> AdminOrderListResponse:
    """All orders, newest first, with the owner's username."""
    rows = await store.orders.list_all()
    return AdminOrderListResponse(
        orders=[
            AdminOrderResponse(**OrderResponse.model_validate(order).model_dump(), username=username)
            for order, username in rows
        ]
    )


@router.put("/orders/{order_id}", response_model=OrderCreatedResponse)
async def update_order_status(
    order_id: int,
    body: OrderStatusRequest,
    store: Store = Depends(get_store),
) -> OrderCreatedResponse:
    """Approve or reject a pending order."""
    order = await set_order_status(store, order_id, body.status)
    await store.commit()
    return OrderCreatedResponse(
        order=OrderResponse.model_validate(order),
        message=f"Order {body.status.lower()} successfully",
    )


# ---------------------------------------------------------------------------
# Payment accounts & settings
# ---------------------------------------------------------------------------


@router.put("/payment-accounts/{provider}", response_model=PaymentAccountEnvelope)
async def put_payment_account(
    provider: str,
    body: PaymentAccountRequest,
    store: Store = Depends(get_store),
) -> PaymentAccountEnvelope:
    """Create or update a payment account."""
    account = await upsert_payment_account(store, provider, body.name, body.number, body.active)
    await store.commit()
    return PaymentAccountEnvelope(
        payment_account=PaymentAccountResponse.model_validate(account),
        message="Payment account updated successfully",
    )


@router.put("/settings/{key}", response_model=SettingEnvelope)
async def put_setting(
    key: str,
    body: SettingRequest,
    store: Store = Depends(get_store),
) -> SettingEnvelope:
    """Create or update a setting."""
    setting = await upsert_setting(store, key, body.value)
    await store.commit()
    return SettingEnvelope(
        setting=SettingResponse.model_validate(setting),
        message="Setting updated successfully",
    )
