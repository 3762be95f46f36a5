"""User self-service logic."""

from __future__ import annotations

from typing import Any

import structlog

from atompoint.config import get_settings
from atompoint.store.base import Store

logger = structlog.get_logger()


async def clear_notifications(store: Store, user_id: int) -> int:
    cleared = await store.users.clear_notifications(user_id)
    logger.info("notifications_cleared", user_id=user_id, count=cleared)
    return cleared


async def get_public_settings(store: Store) -> dict[str, Any]:
    """Settings map, active payment accounts keyed by provider, and the admin contact link."""
    settings_map = await store.settings.list_settings()
    accounts = await store.settings.list_payment_accounts(only_active=True)
    return {
        "settings": settings_map,
        "payment_details": {a.provider: {"name": a.name, "number": a.number} for a in accounts},
        "admin_contact": settings_map.get("adminContact") or get_settings().admin_contact,
    }
