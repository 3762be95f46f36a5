"""CORS for the storefront SPA.

The browser session lives in the ``authToken`` cookie, so credentialed requests
must be allowed, which in turn rules out wildcard origins. Only the headers the
storefront actually sends are accepted on preflight.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from atompoint.config import Settings

STOREFRONT_METHODS = ["GET", "POST", "PUT", "DELETE"]
STOREFRONT_HEADERS = ["Authorization", "Content-Type", "X-Request-Id"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    if "*" in settings.cors_origins:
        raise ValueError("ATOM_CORS_ORIGINS cannot contain '*' while the session cookie is sent cross-origin")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=STOREFRONT_METHODS,
        allow_headers=STOREFRONT_HEADERS,
        expose_headers=["X-Request-Id"],
        max_age=600,
    )
