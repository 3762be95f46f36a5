"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from atompoint.auth.jwt import verify_token
from atompoint.config import get_settings
from atompoint.db.models import User
from atompoint.dependencies import get_store
from atompoint.errors import (
    AuthenticationError,
    AuthorizationError,
    BannedError,
    ExpiredTokenError,
    InvalidTokenError,
)
from atompoint.store.base import Store

_bearer = HTTPBearer(auto_error=False)


def extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    """Session cookie first, bearer header as fallback."""
    token = request.cookies.get(get_settings().auth_cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    store: Store = Depends(get_store),
) -> User:
    """
    Resolve the session token to a User.

    Raises 401 for a missing, invalid or expired token or an unknown user, and
    403 for a banned account.
    """
    token = extract_token(request, credentials)
    if not token:
        msg = "Access token required"
        raise AuthenticationError(msg)

    try:
        payload = verify_token(token, expected_type="access")
    except jwt.ExpiredSignatureError as e:
        raise ExpiredTokenError from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError from e

    try:
        user_id = int(payload["sub"])
    except ValueError as e:
        raise InvalidTokenError from e

    user = await store.users.get_by_id(user_id)
    if user is None:
        msg = "User not found"
        raise AuthenticationError(msg)
    if user.banned:
        raise BannedError
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Same as get_current_user, additionally requiring the admin flag."""
    if not user.is_admin:
        raise AuthorizationError
    return user
