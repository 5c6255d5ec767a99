"""
Health check endpoint
"""
from datetime import datetime, timezone

import httpx
from fastapi import APIRouter, Depends, Response, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import text
from sqlalchemy.orm import Session

from bakery.api.deps import get_rate_limiter
from bakery.config import settings
from bakery.database import get_db
from bakery.services.rate_limiter import RateLimiter

router = APIRouter(tags=["health"])

VERSION = "1.0.0"


def _check_database(db: Session) -> str:
    try:
        db.execute(text("SELECT 1"))
        return "healthy"
    except Exception as e:
        return f"unhealthy: {e}"


async def _check_auth_provider() -> str:
    try:
        async with httpx.AsyncClient(timeout=2.0) as client:
            response = await client.get(
                f"{settings.AUTH_URL}/auth/v1/health",
                headers={"apikey": settings.AUTH_ANON_KEY}
            )
    except httpx.HTTPError as e:
        return f"unhealthy: {e}"
    if response.status_code != 200:
        return f"unhealthy: status {response.status_code}"
    return "healthy"


@router.get("/health")
async def health_check(
    response: Response,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter)
):
    """
    Health check endpoint

    Checks:
    - Database connectivity
    - Auth provider connectivity

    Responds 503 when either dependency is down.
    """
    checks = {
        "database": await run_in_threadpool(_check_database, db),
        "auth_provider": await _check_auth_provider(),
    }
    healthy = all(value == "healthy" for value in checks.values())
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "service": settings.SERVICE_NAME,
        "status": "healthy" if healthy else "unhealthy",
        **checks,
        "events": "enabled" if settings.EVENTS_ENABLED else "disabled",
        "rate_limit_entries": limiter.entry_count(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/")
def root():
    """Service info"""
    return {
        "service": settings.SERVICE_NAME,
        "version": VERSION,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs"
    }
