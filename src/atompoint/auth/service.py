"""
Authentication business logic.

Handles registration, login and the account fields shown back to a user.
"""

from __future__ import annotations

import structlog

from atompoint.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from atompoint.auth.schemas import UserResponse
from atompoint.config import get_settings
from atompoint.db.models import User
from atompoint.errors import BannedError, InvalidCredentialsError, ValidationError
from atompoint.store.base import Store

logger = structlog.get_logger()


def normalize_username(username: str) -> str:
    """Lowercase/strip a username and check its length."""
    settings = get_settings()
    normalized = username.strip().lower()
    if not settings.username_min_length <= len(normalized) <= settings.username_max_length:
        msg = (
            f"Username must be {settings.username_min_length}-"
            f"{settings.username_max_length} characters"
        )
        raise ValidationError(msg)
    return normalized


async def register_user(
    store: Store,
    username: str,
    password: str,
    security_amount: int,
) -> User:
    """
    Register a new (non-admin, zero-balance) user.

    Raises:
        ValidationError: If the username or password is malformed.
        DuplicateUsernameError: If the username is taken (case-insensitive).
    """
    username = normalize_username(username)
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationError(str(e)) from e
    if security_amount < 0:
        msg = "Security amount must be a positive number"
        raise ValidationError(msg)

    user = await store.users.create(username, hash_password(password), security_amount)
    await store.users.push_notification(user.id, get_settings().welcome_message)
    logger.info("user_created", user_id=user.id, username=username)
    return user


async def authenticate_user(store: Store, username: str, password: str) -> User:
    """
    Check credentials.

    The password is verified before the ban flag so a banned account is only
    reported as banned to someone who knows its password.

    Raises:
        InvalidCredentialsError: Unknown user or wrong password.
        BannedError: Correct credentials on a banned account.
    """
    user = await store.users.get_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", username=username.lower())
        raise InvalidCredentialsError

    if user.banned:
        raise BannedError

    if check_needs_rehash(user.password_hash):
        await store.users.set_password_hash(user.id, hash_password(password))
        logger.info("password_rehashed", user_id=user.id)

    return user


async def reset_password(store: Store, user_id: int, new_password: str) -> User | None:
    """Set a new password for a user. Returns None if the user does not exist."""
    try:
        validate_password_strength(new_password)
    except PasswordStrengthError as e:
        raise ValidationError(str(e)) from e
    user = await store.users.set_password_hash(user_id, hash_password(new_password))
    if user is not None:
        logger.info("password_reset", user_id=user_id)
    return user


async def build_user_response(store: Store, user: User) -> UserResponse:
    """Build a UserResponse, loading the user's recent notifications."""
    notifications = await store.users.list_notifications(user.id, get_settings().notification_inbox_limit)
    return UserResponse(
        id=user.id,
        username=user.username,
        is_admin=user.is_admin,
        credits=user.credits,
        security_amount=user.security_amount,
        banned=user.banned,
        notifications=notifications,
        created_at=user.created_at,
    )
