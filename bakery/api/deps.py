"""
Shared API dependencies

Process-wide collaborators are created once here and handed to services
through FastAPI dependencies so tests can override them.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from bakery.config import settings
from bakery.database import get_db
from bakery.errors import HTTP_STATUS_BY_CODE, report_error, get_user_error_message
from bakery.publishers.event_publisher import EventPublisher
from bakery.schemas.common import ActionResult
from bakery.services.admin_service import AdminService
from bakery.services.auth_client import AuthClient, AuthServiceError, AuthUser
from bakery.services.auth_service import AuthService
from bakery.services.catalog_editor import EditorSessionRegistry
from bakery.services.catalog_service import CatalogService
from bakery.services.order_service import OrderService
from bakery.services.profile_service import ProfileService
from bakery.services.rate_limiter import InMemoryRateLimitStore, RateLimiter, RATE_LIMITS
from bakery.services.view_cache import ViewCache

logger = logging.getLogger(__name__)

AUTH_UNAVAILABLE = "שירות ההתחברות אינו זמין כרגע"

rate_limiter = RateLimiter(InMemoryRateLimitStore())
history_cache = ViewCache(ttl=settings.ORDER_HISTORY_CACHE_TTL)
editor_registry = EditorSessionRegistry()
event_publisher = EventPublisher()
auth_client = AuthClient()


def get_rate_limiter() -> RateLimiter:
    return rate_limiter


def get_history_cache() -> ViewCache:
    return history_cache


def get_editor_registry() -> EditorSessionRegistry:
    return editor_registry


def get_event_publisher() -> EventPublisher:
    return event_publisher


def get_auth_client() -> AuthClient:
    return auth_client


async def get_current_user(
    authorization: Optional[str] = Header(None),
    client: AuthClient = Depends(get_auth_client)
) -> Optional[AuthUser]:
    """Resolve the bearer token to a user; anonymous callers get None"""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization[7:].strip()
    if not token:
        return None
    try:
        return await client.get_user(token)
    except AuthServiceError as e:
        report_error(e, "resolve_user")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=get_user_error_message(e, AUTH_UNAVAILABLE)
        )


def general_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    """Per-client limit for public endpoints"""
    client_id = request.client.host if request.client else "unknown"
    result = limiter.check(client_id, RATE_LIMITS["GENERAL_API"])
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
            headers={"Retry-After": str(max(1, int(result.reset_time - limiter.clock())))}
        )


def get_order_service(
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
    cache: ViewCache = Depends(get_history_cache),
    publisher: EventPublisher = Depends(get_event_publisher)
) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db, limiter, cache, publisher)


def get_admin_service(
    db: Session = Depends(get_db),
    cache: ViewCache = Depends(get_history_cache),
    publisher: EventPublisher = Depends(get_event_publisher)
) -> AdminService:
    """Dependency to get AdminService instance"""
    return AdminService(db, cache, publisher)


def get_catalog_service(
    db: Session = Depends(get_db),
    registry: EditorSessionRegistry = Depends(get_editor_registry),
    publisher: EventPublisher = Depends(get_event_publisher)
) -> CatalogService:
    """Dependency to get CatalogService instance"""
    return CatalogService(db, registry, publisher)


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    """Dependency to get ProfileService instance"""
    return ProfileService(db)


def get_auth_service(
    db: Session = Depends(get_db),
    client: AuthClient = Depends(get_auth_client),
    limiter: RateLimiter = Depends(get_rate_limiter)
) -> AuthService:
    """Dependency to get AuthService instance"""
    return AuthService(db, client, limiter)


def respond(result: ActionResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Serialize an action result with the HTTP status for its outcome"""
    if result.success:
        status_code = success_status
    else:
        status_code = HTTP_STATUS_BY_CODE.get(result.error_code, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result))
