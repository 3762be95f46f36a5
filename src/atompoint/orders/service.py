"""
Order ledger and approval state machine.

CREDIT orders are top-up requests: created PENDING, settled by an admin. PRODUCT
orders are purchases: the balance is debited and the order is created already
APPROVED. Status only ever leaves PENDING, and it does so through a
compare-and-swap, so a credit grant can happen at most once per order.
"""

from __future__ import annotations

import structlog

from atompoint.config import get_settings
from atompoint.db.models import Order, User
from atompoint.errors import (
    BelowMinimumError,
    InsufficientBalanceError,
    InvalidTransitionError,
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from atompoint.store.base import Store

logger = structlog.get_logger()

CREDIT = "CREDIT"
PRODUCT = "PRODUCT"

PENDING = "PENDING"
APPROVED = "APPROVED"
REJECTED = "REJECTED"

VALID_TRANSITIONS: dict[str, list[str]] = {
    PENDING: [APPROVED, REJECTED],
    APPROVED: [],
    REJECTED: [],
}


def validate_transition(current: str, target: str) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if target not in VALID_TRANSITIONS.get(current, []):
        msg = f"Invalid transition: order is {current}, cannot move to {target}"
        raise InvalidTransitionError(msg)


def credits_for_amount(amount: int) -> int:
    """Credits granted for a top-up of ``amount`` MMK (floor division by the exchange rate)."""
    return amount // get_settings().credit_exchange_rate


async def create_credit_order(
    store: Store,
    user: User,
    amount: int,
    proof_image: str | None = None,
) -> Order:
    """
    Record a PENDING top-up request and notify admins.

    Raises:
        BelowMinimumError: If ``amount`` is under ``min_credit_amount``.
    """
    settings = get_settings()
    if amount < settings.min_credit_amount:
        msg = f"Minimum credit amount is {settings.min_credit_amount} MMK"
        raise BelowMinimumError(msg)

    order = await store.orders.create(user.id, CREDIT, amount, PENDING, proof_image=proof_image)
    await store.users.notify_admins(
        f"Credit Request: {user.username} requests {amount} MMK via {settings.payment_provider_label}."
    )
    logger.info("credit_order_created", order_id=order.id, user_id=user.id, amount=amount)
    return order


async def create_product_order(store: Store, user: User, product_id: int) -> tuple[Order, int]:
    """
    Buy a product with credits.

    The price is read fresh and the debit is a compare-and-swap on the balance,
    so two concurrent purchases cannot overdraw it.

    Returns:
        Tuple of (order, new_balance).

    Raises:
        ProductNotFoundError: Unknown or unavailable product.
        InsufficientBalanceError: Balance below the price; nothing is changed.
    """
    product = await store.products.get(product_id)
    if product is None or not product.available:
        raise ProductNotFoundError

    new_balance = await store.users.debit_credits(user.id, product.price_cr)
    if new_balance is None:
        raise InsufficientBalanceError

    order = await store.orders.create(user.id, PRODUCT, product.price_cr, APPROVED, product_id=product.id)
    await store.users.notify_admins(f"Product Order: {user.username} ordered {product.name}")
    logger.info(
        "product_purchased",
        order_id=order.id,
        user_id=user.id,
        product_id=product.id,
        price_cr=product.price_cr,
        balance=new_balance,
    )
    return order, new_balance


async def set_order_status(store: Store, order_id: int, new_status: str) -> Order:
    """
    Move a PENDING order to APPROVED or REJECTED.

    Approving a CREDIT order grants ``credits_for_amount(order.amount)`` to its
    owner. Rejections never touch the balance. Either way the owner is
    notified of the new status.

    Raises:
        OrderNotFoundError: Unknown order.
        ValidationError: ``new_status`` is not a known status.
        InvalidTransitionError: The order is no longer PENDING.
    """
    if new_status not in VALID_TRANSITIONS:
        msg = f"Unknown order status: {new_status}"
        raise ValidationError(msg)

    order = await store.orders.get(order_id)
    if order is None:
        raise OrderNotFoundError
    validate_transition(order.status, new_status)

    updated = await store.orders.transition(order_id, order.status, new_status)
    if updated is None:
        # settled by another request between the read and the swap
        msg = "Order is no longer pending"
        raise InvalidTransitionError(msg)

    if new_status == APPROVED and updated.type == CREDIT:
        granted = credits_for_amount(updated.amount)
        balance = await store.users.add_credits(updated.user_id, granted)
        await store.users.push_notification(
            updated.user_id,
            f"Credit purchase approved! {granted} credits added to your account.",
        )
        logger.info("credits_granted", order_id=order_id, user_id=updated.user_id, credits=granted, balance=balance)

    suffix = "!" if new_status == APPROVED else "."
    await store.users.push_notification(
        updated.user_id,
        f"Your {updated.type.lower()} order has been {new_status.lower()}{suffix}",
    )

    logger.info("order_status_changed", order_id=order_id, status=new_status)
    return updated
