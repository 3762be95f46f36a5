"""In-memory store used when the database is unreachable (or by choice).

All state lives on one :class:`MemoryBackend` instance owned by the app. Every
mutation runs under ``backend.lock``; check-then-write paths never await inside
the critical section.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from atompoint.db.models import Order, PaymentAccount, Product, Setting, User
from atompoint.errors import DuplicateUsernameError


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryBackend:
    name = "memory"

    def __init__(self, notification_limit: int = 50) -> None:
        self.lock = asyncio.Lock()
        self.notification_limit = notification_limit
        self.users: dict[int, User] = {}
        self.products: dict[int, Product] = {}
        self.orders: dict[int, Order] = {}
        self.notifications: dict[int, list[str]] = {}
        self.payment_accounts: dict[str, PaymentAccount] = {}
        self.settings: dict[str, Setting] = {}
        self._ids = {
            "users": itertools.count(1),
            "products": itertools.count(1),
            "orders": itertools.count(1),
            "payment_accounts": itertools.count(1),
        }

    def next_id(self, table: str) -> int:
        return next(self._ids[table])

    @asynccontextmanager
    async def session(self) -> AsyncIterator[MemoryStore]:
        yield MemoryStore(self)

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        return None


class MemoryUserRepository:
    def __init__(self, backend: MemoryBackend) -> None:
        self._b = backend

    async def get_by_id(self, user_id: int) -> User | None:
        return self._b.users.get(user_id)

    async def get_by_username(self, username: str) -> User | None:
        wanted = username.lower()
        return next((u for u in self._b.users.values() if u.username == wanted), None)

    async def create(
        self,
        username: str,
        password_hash: str,
        security_amount: int,
        *,
        is_admin: bool = False,
    ) -> User:
        username = username.lower()
        async with self._b.lock:
            if any(u.username == username for u in self._b.users.values()):
                raise DuplicateUsernameError
            now = _now()
            user = User(
                id=self._b.next_id("users"),
                username=username,
                password_hash=password_hash,
                security_amount=security_amount,
                is_admin=is_admin,
                credits=0,
                banned=False,
                created_at=now,
                updated_at=now,
            )
            self._b.users[user.id] = user
            self._b.notifications[user.id] = []
        return user

    async def list_with_order_counts(self) -> list[tuple[User, int]]:
        counts: dict[int, int] = {}
        for order in self._b.orders.values():
            counts[order.user_id] = counts.get(order.user_id, 0) + 1
        users = sorted(self._b.users.values(), key=lambda u: (u.created_at, u.id), reverse=True)
        return [(u, counts.get(u.id, 0)) for u in users]

    async def count_orders(self, user_id: int) -> int:
        return sum(1 for o in self._b.orders.values() if o.user_id == user_id)

    async def set_banned(self, user_id: int, banned: bool) -> User | None:
        async with self._b.lock:
            user = self._b.users.get(user_id)
            if user is None:
                return None
            user.banned = banned
            user.updated_at = _now()
        return user

    async def set_password_hash(self, user_id: int, password_hash: str) -> User | None:
        async with self._b.lock:
            user = self._b.users.get(user_id)
            if user is None:
                return None
            user.password_hash = password_hash
            user.updated_at = _now()
        return user

    async def add_credits(self, user_id: int, amount: int) -> int:
        async with self._b.lock:
            user = self._b.users[user_id]
            user.credits += amount
            user.updated_at = _now()
            return user.credits

    async def debit_credits(self, user_id: int, amount: int) -> int | None:
        async with self._b.lock:
            user = self._b.users.get(user_id)
            if user is None or user.credits < amount:
                return None
            user.credits -= amount
            user.updated_at = _now()
            return user.credits

    def _append(self, user_id: int, message: str) -> None:
        inbox = self._b.notifications.setdefault(user_id, [])
        inbox.append(message)
        overflow = len(inbox) - self._b.notification_limit
        if overflow > 0:
            del inbox[:overflow]

    async def push_notification(self, user_id: int, message: str) -> None:
        async with self._b.lock:
            self._append(user_id, message)

    async def broadcast(self, message: str, user_ids: Iterable[int] | None = None) -> int:
        async with self._b.lock:
            if user_ids is None:
                targets = list(self._b.users)
            else:
                targets = [uid for uid in dict.fromkeys(user_ids) if uid in self._b.users]
            for uid in targets:
                self._append(uid, message)
        return len(targets)

    async def notify_admins(self, message: str) -> int:
        return await self.broadcast(message, [u.id for u in self._b.users.values() if u.is_admin])

    async def list_notifications(self, user_id: int, limit: int) -> list[str]:
        inbox = self._b.notifications.get(user_id, [])
        return list(inbox[-limit:]) if limit > 0 else []

    async def clear_notifications(self, user_id: int) -> int:
        async with self._b.lock:
            cleared = len(self._b.notifications.get(user_id, []))
            self._b.notifications[user_id] = []
        return cleared


class MemoryProductRepository:
    def __init__(self, backend: MemoryBackend) -> None:
        self._b = backend

    async def list_all(self, only_available: bool = True) -> list[Product]:
        products = [p for p in self._b.products.values() if p.available or not only_available]
        return sorted(products, key=lambda p: (p.operator, p.category, p.id))

    async def get(self, product_id: int) -> Product | None:
        return self._b.products.get(product_id)

    async def create(self, **fields: Any) -> Product:
        fields.setdefault("available", True)
        async with self._b.lock:
            now = _now()
            product = Product(id=self._b.next_id("products"), **fields, created_at=now, updated_at=now)
            self._b.products[product.id] = product
        return product

    async def update(self, product_id: int, **fields: Any) -> Product | None:
        async with self._b.lock:
            product = self._b.products.get(product_id)
            if product is None:
                return None
            for key, value in fields.items():
                setattr(product, key, value)
            product.updated_at = _now()
        return product

    async def delete(self, product_id: int) -> bool:
        async with self._b.lock:
            if self._b.products.pop(product_id, None) is None:
                return False
            for order in self._b.orders.values():
                if order.product_id == product_id:
                    order.product_id = None
        return True


class MemoryOrderRepository:
    def __init__(self, backend: MemoryBackend) -> None:
        self._b = backend

    async def create(
        self,
        user_id: int,
        type_: str,
        amount: int,
        status: str,
        *,
        proof_image: str | None = None,
        product_id: int | None = None,
    ) -> Order:
        async with self._b.lock:
            now = _now()
            order = Order(
                id=self._b.next_id("orders"),
                user_id=user_id,
                type=type_,
                amount=amount,
                status=status,
                proof_image=proof_image,
                product_id=product_id,
                created_at=now,
                updated_at=now,
            )
            self._b.orders[order.id] = order
        return order

    async def get(self, order_id: int) -> Order | None:
        return self._b.orders.get(order_id)

    async def list_for_user(self, user_id: int) -> list[Order]:
        orders = [o for o in self._b.orders.values() if o.user_id == user_id]
        return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)

    async def list_all(self) -> list[tuple[Order, str]]:
        orders = sorted(self._b.orders.values(), key=lambda o: (o.created_at, o.id), reverse=True)
        result = []
        for order in orders:
            owner = self._b.users.get(order.user_id)
            result.append((order, owner.username if owner is not None else "unknown"))
        return result

    async def transition(self, order_id: int, from_status: str, to_status: str) -> Order | None:
        async with self._b.lock:
            order = self._b.orders.get(order_id)
            if order is None or order.status != from_status:
                return None
            order.status = to_status
            order.updated_at = _now()
        return order


class MemorySettingsRepository:
    def __init__(self, backend: MemoryBackend) -> None:
        self._b = backend

    async def list_settings(self) -> dict[str, str]:
        return {key: s.value for key, s in self._b.settings.items()}

    async def upsert_setting(self, key: str, value: str) -> Setting:
        async with self._b.lock:
            setting = self._b.settings.get(key)
            if setting is None:
                setting = Setting(key=key, value=value, updated_at=_now())
                self._b.settings[key] = setting
            else:
                setting.value = value
                setting.updated_at = _now()
        return setting

    async def list_payment_accounts(self, only_active: bool = True) -> list[PaymentAccount]:
        accounts = [a for a in self._b.payment_accounts.values() if a.active or not only_active]
        return sorted(accounts, key=lambda a: a.provider)

    async def upsert_payment_account(
        self,
        provider: str,
        *,
        name: str,
        number: str,
        active: bool = True,
    ) -> PaymentAccount:
        async with self._b.lock:
            account = self._b.payment_accounts.get(provider)
            if account is None:
                account = PaymentAccount(
                    id=self._b.next_id("payment_accounts"),
                    provider=provider,
                    name=name,
                    number=number,
                    active=active,
                    updated_at=_now(),
                )
                self._b.payment_accounts[provider] = account
            else:
                account.name = name
                account.number = number
                account.active = active
                account.updated_at = _now()
        return account


class MemoryStore:
    """Writes apply immediately; commit and rollback are no-ops."""

    def __init__(self, backend: MemoryBackend) -> None:
        self.users = MemoryUserRepository(backend)
        self.products = MemoryProductRepository(backend)
        self.orders = MemoryOrderRepository(backend)
        self.settings = MemorySettingsRepository(backend)

    async def commit(self) -> None:
        return None

    async def rollback(self) -> None:
        return None
