"""Store selection: database when reachable, in-memory otherwise."""

from __future__ import annotations

import structlog

from atompoint.config import Settings
from atompoint.database import create_engine, create_schema
from atompoint.errors import StoreUnavailableError
from atompoint.store.base import Store, StoreBackend
from atompoint.store.memory import MemoryBackend
from atompoint.store.seed import seed_demo_data
from atompoint.store.sql import SqlBackend

logger = structlog.get_logger()


async def open_memory_backend(settings: Settings) -> MemoryBackend:
    backend = MemoryBackend(notification_limit=settings.notification_inbox_limit)
    if settings.seed_demo_data:
        async with backend.session() as store:
            await seed_demo_data(store, settings)
    return backend


async def open_sql_backend(settings: Settings) -> SqlBackend:
    """Connect to the database. Raises StoreUnavailableError if it cannot be reached."""
    backend = SqlBackend(create_engine(settings.database_url, settings.db_connect_timeout_seconds))
    try:
        await backend.ping()
        if settings.auto_create_schema:
            await create_schema(backend.engine)
    except StoreUnavailableError:
        await backend.close()
        raise
    return backend


async def open_backend(settings: Settings) -> StoreBackend:
    """Open the configured backend, degrading to memory when the database is down."""
    if settings.store_backend == "memory":
        return await open_memory_backend(settings)

    try:
        backend = await open_sql_backend(settings)
    except StoreUnavailableError as exc:
        if not settings.fallback_enabled:
            raise
        logger.warning("store_fallback_enabled", reason=str(exc))
        return await open_memory_backend(settings)

    logger.info("store_connected", backend=backend.name)
    return backend


__all__ = [
    "MemoryBackend",
    "SqlBackend",
    "Store",
    "StoreBackend",
    "open_backend",
]
