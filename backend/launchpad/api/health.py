from datetime import datetime, timezone

from fastapi import APIRouter, Request
from tortoise import connections

from launchpad.core.errors import InvalidPriceFeed

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
async def health_check(request: Request):
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "projects": len(request.app.state.sale.get_projects()),
    }


@router.get("/ready", summary="Readiness check")
async def readiness_check(request: Request):
    """
    Readiness check - verifies all dependencies are available.

    Checks the database connection and that a native price is published.
    """
    checks = {}

    try:
        await connections.get("default").execute_query("SELECT 1")
        checks["database"] = True
    except Exception:
        checks["database"] = False

    try:
        request.app.state.sale.get_native_price_e8()
        checks["native_price"] = True
    except InvalidPriceFeed:
        checks["native_price"] = False

    all_healthy = all(checks.values())

    return {
        "status": "ready" if all_healthy else "degraded",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
