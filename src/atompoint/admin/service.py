"""Admin operations layered over the user, order and settings stores."""

from __future__ import annotations

import structlog

from atompoint.auth.service import reset_password
from atompoint.db.models import PaymentAccount, Setting, User
from atompoint.errors import UserNotFoundError
from atompoint.store.base import Store

logger = structlog.get_logger()


async def set_user_banned(store: Store, user_id: int, banned: bool) -> User:
    user = await store.users.set_banned(user_id, banned)
    if user is None:
        raise UserNotFoundError
    logger.info("user_ban_changed", user_id=user_id, banned=banned)
    return user


async def reset_user_password(store: Store, user_id: int, new_password: str) -> User:
    user = await reset_password(store, user_id, new_password)
    if user is None:
        raise UserNotFoundError
    return user


async def broadcast(store: Store, message: str, target_ids: list[int] | None = None) -> int:
    """Push ``message`` to all users, or to ``target_ids``. Returns how many users were notified."""
    count = await store.users.broadcast(message, target_ids)
    logger.info("broadcast_sent", count=count, targeted=target_ids is not None)
    return count


async def upsert_payment_account(
    store: Store,
    provider: str,
    name: str,
    number: str,
    active: bool = True,
) -> PaymentAccount:
    account = await store.settings.upsert_payment_account(provider, name=name, number=number, active=active)
    logger.info("payment_account_updated", provider=provider, active=active)
    return account


async def upsert_setting(store: Store, key: str, value: str) -> Setting:
    setting = await store.settings.upsert_setting(key, value)
    logger.info("setting_updated", key=key)
    return setting
