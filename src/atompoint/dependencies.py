"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from fastapi import Request

from atompoint.store.base import Store, StoreBackend


def get_backend(request: Request) -> StoreBackend:
    """The store backend chosen at startup."""
    backend: StoreBackend = request.app.state.store_backend
    return backend


async def get_store(request: Request) -> AsyncGenerator[Store, None]:
    """Yield a per-request Store (FastAPI dependency). Uncommitted work is discarded on exit."""
    async with get_backend(request).session() as store:
        yield store
