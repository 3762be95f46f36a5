"""SQLAlchemy-backed store.

The two read-modify-write paths (credit debit and order status transition) are
single conditional UPDATE statements, so concurrent requests against the same
row cannot both act on a stale value.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from atompoint.database import check_connection, create_session_factory
from atompoint.db.models import Notification, Order, PaymentAccount, Product, Setting, User
from atompoint.errors import DuplicateUsernameError


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SqlUserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    async def get_by_id(self, user_id: int) -> User | None:
        result = await self._db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        result = await self._db.execute(select(User).where(func.lower(User.username) == username.lower()))
        return result.scalar_one_or_none()

    async def _reload(self, user_id: int) -> User | None:
        result = await self._db.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        username: str,
        password_hash: str,
        security_amount: int,
        *,
        is_admin: bool = False,
    ) -> User:
        username = username.lower()
        if await self.get_by_username(username) is not None:
            raise DuplicateUsernameError
        now = _now()
        user = User(
            username=username,
            password_hash=password_hash,
            security_amount=security_amount,
            is_admin=is_admin,
            credits=0,
            banned=False,
            created_at=now,
            updated_at=now,
        )
        self._db.add(user)
        try:
            await self._db.flush()
        except IntegrityError as e:
            await self._db.rollback()
            raise DuplicateUsernameError from e
        return user

    async def list_with_order_counts(self) -> list[tuple[User, int]]:
        result = await self._db.execute(
            select(User, func.count(Order.id))
            .outerjoin(Order, Order.user_id == User.id)
            .group_by(User.id)
            .order_by(User.created_at.desc(), User.id.desc())
        )
        return [(user, count) for user, count in result.all()]

    async def count_orders(self, user_id: int) -> int:
        result = await self._db.execute(select(func.count()).select_from(Order).where(Order.user_id == user_id))
        return result.scalar_one()

    async def set_banned(self, user_id: int, banned: bool) -> User | None:
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        user.banned = banned
        user.updated_at = _now()
        await self._db.flush()
        return user

    async def set_password_hash(self, user_id: int, password_hash: str) -> User | None:
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        user.password_hash = password_hash
        user.updated_at = _now()
        await self._db.flush()
        return user

    async def add_credits(self, user_id: int, amount: int) -> int:
        await self._db.execute(
            update(User)
            .where(User.id == user_id)
            .values(credits=User.credits + amount, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        user = await self._reload(user_id)
        return user.credits if user is not None else 0

    async def debit_credits(self, user_id: int, amount: int) -> int | None:
        result = await self._db.execute(
            update(User)
            .where(User.id == user_id, User.credits >= amount)
            .values(credits=User.credits - amount, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        user = await self._reload(user_id)
        return user.credits if user is not None else None

    async def push_notification(self, user_id: int, message: str) -> None:
        self._db.add(Notification(user_id=user_id, message=message, created_at=_now()))
        await self._db.flush()

    async def broadcast(self, message: str, user_ids: Iterable[int] | None = None) -> int:
        stmt = select(User.id)
        if user_ids is not None:
            stmt = stmt.where(User.id.in_(list(user_ids)))
        result = await self._db.execute(stmt)
        targets = [row[0] for row in result]
        now = _now()
        self._db.add_all([Notification(user_id=uid, message=message, created_at=now) for uid in targets])
        await self._db.flush()
        return len(targets)

    async def notify_admins(self, message: str) -> int:
        result = await self._db.execute(select(User.id).where(User.is_admin.is_(True)))
        return await self.broadcast(message, [row[0] for row in result])

    async def list_notifications(self, user_id: int, limit: int) -> list[str]:
        result = await self._db.execute(
            select(Notification.message)
            .where(Notification.user_id == user_id)
            .order_by(Notification.id.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))

    async def clear_notifications(self, user_id: int) -> int:
        result = await self._db.execute(delete(Notification).where(Notification.user_id == user_id))
        await self._db.flush()
        return result.rowcount  # type: ignore[attr-defined,no-any-return]


class SqlProductRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    async def list_all(self, only_available: bool = True) -> list[Product]:
        stmt = select(Product).order_by(Product.operator, Product.category, Product.id)
        if only_available:
            stmt = stmt.where(Product.available.is_(True))
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, product_id: int) -> Product | None:
        result = await self._db.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    async def create(self, **fields: Any) -> Product:
        now = _now()
        fields.setdefault("available", True)
        product = Product(**fields, created_at=now, updated_at=now)
        self._db.add(product)
        await self._db.flush()
        return product

    async def update(self, product_id: int, **fields: Any) -> Product | None:
        product = await self.get(product_id)
        if product is None:
            return None
        for key, value in fields.items():
            setattr(product, key, value)
        product.updated_at = _now()
        await self._db.flush()
        return product

    async def delete(self, product_id: int) -> bool:
        product = await self.get(product_id)
        if product is None:
            return False
        await self._db.execute(
            update(Order)
            .where(Order.product_id == product_id)
            .values(product_id=None)
            .execution_options(synchronize_session=False)
        )
        await self._db.delete(product)
        await self._db.flush()
        return True


class SqlOrderRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

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
        now = _now()
        order = Order(
            user_id=user_id,
            type=type_,
            amount=amount,
            status=status,
            proof_image=proof_image,
            product_id=product_id,
            created_at=now,
            updated_at=now,
        )
        self._db.add(order)
        await self._db.flush()
        return order

    async def get(self, order_id: int) -> Order | None:
        result = await self._db.execute(select(Order).where(Order.id == order_id))
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> list[Order]:
        result = await self._db.execute(
            select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[tuple[Order, str]]:
        result = await self._db.execute(
            select(Order, User.username)
            .join(User, User.id == Order.user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return [(order, username) for order, username in result.all()]

    async def transition(self, order_id: int, from_status: str, to_status: str) -> Order | None:
        result = await self._db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == from_status)
            .values(status=to_status, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        reloaded = await self._db.execute(
            select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        )
        return reloaded.scalar_one()


class SqlSettingsRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    async def list_settings(self) -> dict[str, str]:
        result = await self._db.execute(select(Setting))
        return {s.key: s.value for s in result.scalars().all()}

    async def upsert_setting(self, key: str, value: str) -> Setting:
        setting = await self._db.get(Setting, key)
        if setting is None:
            setting = Setting(key=key, value=value, updated_at=_now())
            self._db.add(setting)
        else:
            setting.value = value
            setting.updated_at = _now()
        await self._db.flush()
        return setting

    async def list_payment_accounts(self, only_active: bool = True) -> list[PaymentAccount]:
        stmt = select(PaymentAccount).order_by(PaymentAccount.provider)
        if only_active:
            stmt = stmt.where(PaymentAccount.active.is_(True))
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def upsert_payment_account(
        self,
        provider: str,
        *,
        name: str,
        number: str,
        active: bool = True,
    ) -> PaymentAccount:
        result = await self._db.execute(select(PaymentAccount).where(PaymentAccount.provider == provider))
        account = result.scalar_one_or_none()
        if account is None:
            account = PaymentAccount(provider=provider, name=name, number=number, active=active, updated_at=_now())
            self._db.add(account)
        else:
            account.name = name
            account.number = number
            account.active = active
            account.updated_at = _now()
        await self._db.flush()
        return account


class SqlStore:
    """Unit of work over one AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.users = SqlUserRepository(session)
        self.products = SqlProductRepository(session)
        self.orders = SqlOrderRepository(session)
        self.settings = SqlSettingsRepository(session)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


class SqlBackend:
    name = "database"

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = create_session_factory(engine)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[SqlStore]:
        async with self._session_factory() as session:
            yield SqlStore(session)

    async def ping(self) -> None:
        await check_connection(self.engine)

    async def close(self) -> None:
        await self.engine.dispose()
