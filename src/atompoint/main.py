"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from atompoint.admin.router import router as admin_router
from atompoint.auth.router import router as auth_router
from atompoint.config import get_settings
from atompoint.health.router import router as health_router
from atompoint.middleware import setup_middleware
from atompoint.orders.router import router as orders_router
from atompoint.products.router import router as products_router
from atompoint.store import open_backend
from atompoint.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    backend = await open_backend(settings)
    app.state.store_backend = backend
    logger.info("app_started", store=backend.name, environment=settings.environment)

    yield

    await backend.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Atom Point API",
        description="Backend API for Atom Point Web, a prepaid top-up and credit storefront",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(products_router)
    app.include_router(orders_router)
    app.include_router(admin_router)

    return app


app = create_app()
