"""Order router — all /api/orders/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from atompoint.auth.dependencies import get_current_user
from atompoint.db.models import User
from atompoint.dependencies import get_store
from atompoint.orders.schemas import (
    CreditOrderRequest,
    OrderCreatedResponse,
    OrderListResponse,
    OrderResponse,
    ProductOrderCreatedResponse,
    ProductOrderRequest,
)
from atompoint.orders.service import create_credit_order, create_product_order
from atompoint.store.base import Store

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=OrderListResponse)
async def list_my_orders(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> OrderListResponse:
    """The current user's orders, newest first."""
    orders = await store.orders.list_for_user(user.id)
    return OrderListResponse(orders=[OrderResponse.model_validate(o) for o in orders])


@router.post("/credit", response_model=OrderCreatedResponse, status_code=201)
async def create_credit_order_endpoint(
    body: CreditOrderRequest,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> OrderCreatedResponse:
    """Submit a credit top-up request with proof of payment."""
    order = await create_credit_order(store, user, body.amount, body.proof_image)
    await store.commit()
    return OrderCreatedResponse(
        order=OrderResponse.model_validate(order),
        message="Credit purchase request submitted successfully",
    )


@router.post("/product", response_model=ProductOrderCreatedResponse, status_code=201)
async def create_product_order_endpoint(
    body: ProductOrderRequest,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> ProductOrderCreatedResponse:
    """Buy a product with credits."""
    order, balance = await create_product_order(store, user, body.product_id)
    await store.commit()
    return ProductOrderCreatedResponse(
        order=OrderResponse.model_validate(order),
        credits=balance,
        message=f"Product order placed successfully. {order.amount} credits deducted.",
    )
