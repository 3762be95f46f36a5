"""Health, readiness, and version endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from atompoint.config import get_settings
from atompoint.dependencies import get_backend
from atompoint.errors import StoreUnavailableError
from atompoint.store.base import StoreBackend

router = APIRouter()


@router.get("/health")
async def health(
    backend: StoreBackend = Depends(get_backend),  # noqa: B008
) -> dict[str, str]:
    """Liveness probe — reports which store is serving requests."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "store": backend.name,
    }


@router.get("/ready")
async def readiness(
    backend: StoreBackend = Depends(get_backend),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe — checks store connectivity."""
    checks: dict[str, object] = {}

    try:
        await backend.ping()
        checks["store"] = "ok"
    except StoreUnavailableError as exc:
        checks["store"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "backend": backend.name, "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
