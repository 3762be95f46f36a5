"""User router — all /api/users/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from atompoint.auth.dependencies import get_current_user
from atompoint.auth.schemas import ProfileEnvelope, ProfileResponse
from atompoint.auth.service import build_user_response
from atompoint.db.models import User
from atompoint.dependencies import get_store
from atompoint.store.base import Store
from atompoint.users.schemas import ClearNotificationsResponse, PublicSettingsResponse
from atompoint.users.service import clear_notifications, get_public_settings

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/profile", response_model=ProfileEnvelope)
async def get_profile(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> ProfileEnvelope:
    """Own profile with order count."""
    base = await build_user_response(store, user)
    order_count = await store.users.count_orders(user.id)
    return ProfileEnvelope(user=ProfileResponse(**base.model_dump(), order_count=order_count))


@router.post("/clear-notifications", response_model=ClearNotificationsResponse)
async def clear_my_notifications(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> ClearNotificationsResponse:
    """Empty the notification inbox."""
    cleared = await clear_notifications(store, user.id)
    await store.commit()
    return ClearNotificationsResponse(message="Notifications cleared", cleared=cleared)


@router.get("/settings", response_model=PublicSettingsResponse)
async def public_settings(store: Store = Depends(get_store)) -> PublicSettingsResponse:
    """Payment details and contact link shown on the top-up page. No auth."""
    return PublicSettingsResponse(**await get_public_settings(store))
