"""Request/response schemas for order endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from atompoint.db.base import MAX_INT


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: str
    amount: int
    proof_image: str | None = None
    product_id: int | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class AdminOrderResponse(OrderResponse):
    username: str


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class CreditOrderRequest(BaseModel):
    """Top-up request. ``amount`` is in MMK; the minimum is enforced by the service."""

    model_config = ConfigDict(populate_by_name=True)

    amount: int = Field(..., gt=0, le=MAX_INT)
    proof_image: str | None = Field(None, max_length=10_000_000, alias="proofImage")


class ProductOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., gt=0, le=MAX_INT, alias="productId")


class OrderCreatedResponse(BaseModel):
    order: OrderResponse
    message: str


class ProductOrderCreatedResponse(OrderCreatedResponse):
    credits: int
