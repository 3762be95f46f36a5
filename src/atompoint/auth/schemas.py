"""Request/response schemas for authentication and user endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from atompoint.db.base import MAX_INT


class RegisterRequest(BaseModel):
    """Registration request."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)
    security_amount: int = Field(..., ge=0, le=MAX_INT, alias="securityAmount")

    @field_validator("username", mode="before")
    @classmethod
    def normalize_username(cls, v: object) -> object:
        """Trim and lowercase the username."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class LoginRequest(BaseModel):
    """Login with username + password."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def normalize_username(cls, v: object) -> object:
        """Trim and lowercase the username."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class UserResponse(BaseModel):
    """Full user profile returned to the account owner."""

    id: int
    username: str
    is_admin: bool
    credits: int
    security_amount: int
    banned: bool
    notifications: list[str]
    created_at: datetime


class ProfileResponse(UserResponse):
    """Profile with order count."""

    order_count: int


class AuthResponse(BaseModel):
    """Register/login result. The token itself travels in the HTTP-only cookie."""

    message: str
    user: UserResponse


class MeResponse(BaseModel):
    user: UserResponse


class ProfileEnvelope(BaseModel):
    user: ProfileResponse


class MessageResponse(BaseModel):
    message: str
