"""Domain error taxonomy.

Every error carries the HTTP status it maps to. Services raise these; the global
handler in ``atompoint.middleware.error_handler`` renders them as
``{"detail": message}``.
"""

from __future__ import annotations


class ShopError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ShopError):
    status_code = 400
    default_message = "Invalid input"


class AuthenticationError(ShopError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid credentials"


class InvalidTokenError(AuthenticationError):
    default_message = "Invalid or expired token"


class ExpiredTokenError(InvalidTokenError):
    default_message = "Token has expired"


class BannedError(AuthenticationError):
    status_code = 403
    default_message = "Account is banned"


class AuthorizationError(ShopError):
    status_code = 403
    default_message = "Admin access required"


class NotFoundError(ShopError):
    status_code = 404
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class ProductNotFoundError(NotFoundError):
    default_message = "Product not found"


class OrderNotFoundError(NotFoundError):
    default_message = "Order not found"


class BusinessRuleError(ShopError):
    status_code = 400


class DuplicateUsernameError(BusinessRuleError):
    default_message = "Username already taken"


class InsufficientBalanceError(BusinessRuleError):
    default_message = "Insufficient credits"


class BelowMinimumError(BusinessRuleError):
    default_message = "Amount is below the minimum"


class InvalidTransitionError(BusinessRuleError):
    default_message = "Invalid order status transition"


class StoreUnavailableError(Exception):
    """The backing database could not be reached."""
