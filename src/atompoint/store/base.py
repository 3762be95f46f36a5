"""Repository interfaces shared by the SQL and in-memory stores.

Services only ever talk to a :class:`Store`. Which backend sits behind it is
decided once at startup (see :func:`atompoint.store.open_backend`).
"""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from atompoint.db.models import Order, PaymentAccount, Product, Setting, User


class UserRepository(Protocol):
    async def get_by_id(self, user_id: int) -> User | None: ...

    async def get_by_username(self, username: str) -> User | None:
        """Case-insensitive lookup."""
        ...

    async def create(
        self,
        username: str,
        password_hash: str,
        security_amount: int,
        *,
        is_admin: bool = False,
    ) -> User:
        """Insert a user. Raises DuplicateUsernameError if the name is taken."""
        ...

    async def list_with_order_counts(self) -> list[tuple[User, int]]: ...

    async def count_orders(self, user_id: int) -> int: ...

    async def set_banned(self, user_id: int, banned: bool) -> User | None: ...

    async def set_password_hash(self, user_id: int, password_hash: str) -> User | None: ...

    async def add_credits(self, user_id: int, amount: int) -> int:
        """Unconditional increment. Returns the new balance."""
        ...

    async def debit_credits(self, user_id: int, amount: int) -> int | None:
        """Compare-and-swap decrement.

        Applies only if the balance is still >= amount at write time. Returns the
        new balance, or None when nothing was changed.
        """
        ...

    async def push_notification(self, user_id: int, message: str) -> None: ...

    async def broadcast(self, message: str, user_ids: Iterable[int] | None = None) -> int:
        """Notify the given users (all users when None). Returns how many were notified."""
        ...

    async def notify_admins(self, message: str) -> int: ...

    async def list_notifications(self, user_id: int, limit: int) -> list[str]:
        """Most recent ``limit`` messages, oldest first."""
        ...

    async def clear_notifications(self, user_id: int) -> int: ...


class ProductRepository(Protocol):
    async def list_all(self, only_available: bool = True) -> list[Product]:
        """Products ordered by operator, category, id."""
        ...

    async def get(self, product_id: int) -> Product | None: ...

    async def create(self, **fields: Any) -> Product: ...

    async def update(self, product_id: int, **fields: Any) -> Product | None: ...

    async def delete(self, product_id: int) -> bool: ...


class OrderRepository(Protocol):
    async def create(
        self,
        user_id: int,
        type_: str,
        amount: int,
        status: str,
        *,
        proof_image: str | None = None,
        product_id: int | None = None,
    ) -> Order: ...

    async def get(self, order_id: int) -> Order | None: ...

    async def list_for_user(self, user_id: int) -> list[Order]: ...

    async def list_all(self) -> list[tuple[Order, str]]:
        """Every order with its owner's username, newest first."""
        ...

    async def transition(self, order_id: int, from_status: str, to_status: str) -> Order | None:
        """Compare-and-swap the status. Returns the updated order, or None if it was not ``from_status``."""
        ...


class SettingsRepository(Protocol):
    async def list_settings(self) -> dict[str, str]: ...

    async def upsert_setting(self, key: str, value: str) -> Setting: ...

    async def list_payment_accounts(self, only_active: bool = True) -> list[PaymentAccount]: ...

    async def upsert_payment_account(
        self,
        provider: str,
        *,
        name: str,
        number: str,
        active: bool = True,
    ) -> PaymentAccount: ...


class Store(Protocol):
    """Unit of work bundling the repositories for one request."""

    users: UserRepository
    products: ProductRepository
    orders: OrderRepository
    settings: SettingsRepository

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class StoreBackend(Protocol):
    """Long-lived backend that hands out a :class:`Store` per request."""

    name: str

    def session(self) -> AbstractAsyncContextManager[Store]: ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...

