"""
Services package
"""
from bakery.services.order_service import OrderService
from bakery.services.admin_service import AdminService
from bakery.services.catalog_service import CatalogService
from bakery.services.profile_service import ProfileService
from bakery.services.auth_service import AuthService
from bakery.services.auth_client import AuthClient
from bakery.services.rate_limiter import RateLimiter, InMemoryRateLimitStore

__all__ = [
    "OrderService",
    "AdminService",
    "CatalogService",
    "ProfileService",
    "AuthService",
    "AuthClient",
    "RateLimiter",
    "InMemoryRateLimitStore"
]
