"""Authentication router — all /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Response

from atompoint.auth.dependencies import get_current_user
from atompoint.auth.jwt import create_access_token
from atompoint.auth.schemas import AuthResponse, LoginRequest, MeResponse, MessageResponse, RegisterRequest
from atompoint.auth.service import authenticate_user, build_user_response, register_user
from atompoint.config import get_settings
from atompoint.db.models import User
from atompoint.dependencies import get_store
from atompoint.store.base import Store

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, user: User) -> None:
    """Issue a session token in an HTTP-only cookie."""
    settings = get_settings()
    token = create_access_token(user.id, user.username)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_access_token_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    store: Store = Depends(get_store),
) -> AuthResponse:
    """Register with username + password + security amount."""
    user = await register_user(store, body.username, body.password, body.security_amount)
    await store.commit()

    _set_session_cookie(response, user)
    return AuthResponse(
        message=f"Registration successful! Your ID is {user.id}",
        user=await build_user_response(store, user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    response: Response,
    store: Store = Depends(get_store),
) -> AuthResponse:
    """Login with username + password."""
    user = await authenticate_user(store, body.username, body.password)
    await store.commit()

    _set_session_cookie(response, user)
    logger.info("user_logged_in", user_id=user.id)
    return AuthResponse(message="Login successful", user=await build_user_response(store, user))


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=MeResponse)
async def me(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> MeResponse:
    """Get the current user."""
    return MeResponse(user=await build_user_response(store, user))
