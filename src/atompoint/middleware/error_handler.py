"""Global error handler — every failure leaves as a JSON ``{"detail": ...}`` body."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from atompoint.errors import ShopError

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI, debug: bool = False) -> None:
    """Register global exception handlers."""

    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
        """Map domain errors to their HTTP status."""
        if exc.status_code >= 500:
            logger.error("shop_error", path=request.url.path, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed bodies are client errors: 400 with the field errors attached."""
        return JSONResponse(
            status_code=400,
            content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions — always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        content = {"detail": "Internal server error"}
        if debug:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)
