"""Middleware registration."""

from fastapi import FastAPI

from atompoint.config import Settings
from atompoint.middleware.cors import setup_cors
from atompoint.middleware.error_handler import setup_error_handlers
from atompoint.middleware.logging import setup_logging
from atompoint.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette runs middleware in reverse-add order, so CORS is added last to wrap error responses.
    """
    setup_logging(settings)
    setup_error_handlers(app, debug=settings.debug)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
