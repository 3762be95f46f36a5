"""Response schemas for user endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class PaymentDetail(BaseModel):
    name: str
    number: str


class PublicSettingsResponse(BaseModel):
    settings: dict[str, str]
    payment_details: dict[str, PaymentDetail]
    admin_contact: str


class ClearNotificationsResponse(BaseModel):
    message: str
    cleared: int
