"""Demo data loaded into the in-memory store."""

from __future__ import annotations

import structlog

from atompoint.auth.password import hash_password
from atompoint.config import Settings
from atompoint.store.base import Store

logger = structlog.get_logger()

DEMO_PRODUCTS = [
    {"operator": "MPT", "category": "Recharge", "name": "1000 MMK", "price_mmk": 1000, "price_cr": 100},
    {"operator": "MPT", "category": "Recharge", "name": "3000 MMK", "price_mmk": 3000, "price_cr": 300},
    {"operator": "Ooredoo", "category": "Recharge", "name": "1000 MMK", "price_mmk": 1000, "price_cr": 100},
    {"operator": "Telenor", "category": "Data", "name": "1GB Daily", "price_mmk": 800, "price_cr": 80},
]

DEMO_PAYMENT_ACCOUNTS = {
    "KPay": {"name": "ATOM Point Admin", "number": "09 987 654 321"},
    "Wave Pay": {"name": "ATOM Point Services", "number": "09 123 456 789"},
}


async def seed_demo_data(store: Store, settings: Settings) -> None:
    """Load demo catalog, payment accounts and (optionally) an admin account."""
    for product in DEMO_PRODUCTS:
        await store.products.create(**product)

    for provider, account in DEMO_PAYMENT_ACCOUNTS.items():
        await store.settings.upsert_payment_account(provider, **account)

    await store.settings.upsert_setting("adminContact", settings.admin_contact)

    if settings.seed_admin_password:
        admin = await store.users.create(
            settings.seed_admin_username,
            hash_password(settings.seed_admin_password),
            0,
            is_admin=True,
        )
        await store.users.push_notification(admin.id, f"{settings.welcome_message} (Admin Account)")
    else:
        logger.warning("seed_admin_skipped", reason="ATOM_SEED_ADMIN_PASSWORD not set")

    await store.commit()
    logger.info("demo_data_seeded", products=len(DEMO_PRODUCTS))
