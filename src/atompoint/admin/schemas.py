"""Request/response schemas for admin endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from atompoint.orders.schemas import AdminOrderResponse


class AdminUserResponse(BaseModel):
    id: int
    username: str
    is_admin: bool
    credits: int
    banned: bool
    created_at: datetime
    order_count: int


class AdminUserListResponse(BaseModel):
    users: list[AdminUserResponse]


class AdminOrderListResponse(BaseModel):
    orders: list[AdminOrderResponse]


class OrderStatusRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=16)

    @field_validator("status")
    @classmethod
    def upper(cls, v: str) -> str:
        return v.strip().upper()


class BanRequest(BaseModel):
    banned: bool


class BanResponse(BaseModel):
    user: AdminUserResponse
    message: str


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(..., min_length=1, max_length=128, alias="newPassword")


class BroadcastRequest(BaseModel):
    """Notify every user, or only ``target_ids`` when given."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1, max_length=2000)
    target_ids: list[int] | None = Field(None, alias="targetIds")


class BroadcastResponse(BaseModel):
    count: int
    message: str


class PaymentAccountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    number: str = Field(..., min_length=1, max_length=64)
    active: bool = True


class PaymentAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    provider: str
    name: str
    number: str
    active: bool
    updated_at: datetime


class PaymentAccountEnvelope(BaseModel):
    payment_account: PaymentAccountResponse
    message: str


class SettingRequest(BaseModel):
    value: str = Field(..., max_length=2000)


class SettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: str
    updated_at: datetime


class SettingEnvelope(BaseModel):
    setting: SettingResponse
    message: str
