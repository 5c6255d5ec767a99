"""
Schemas package
"""
from bakery.schemas.common import ActionResult
from bakery.schemas.order import (
    LineItem,
    OrderItemIn,
    OrderCreate,
    OrderStatusUpdate,
    OrderArchiveUpdate,
    OrderResponse,
    OrderListResponse,
    OrderStats,
    OrderResult,
    AdminOrderResult,
    AdminOrderListResult,
    OrderStatsResult
)
from bakery.schemas.catalog import (
    BreadItem,
    BreadCategory,
    CatalogResponse,
    CatalogUpdate,
    CatalogRevisionResponse,
    CatalogResult,
    CatalogRevisionsResult,
    CartQuoteRequest,
    CartQuoteResponse,
    EditorOperation,
    EditorState,
    EditorResult
)
from bakery.schemas.profile import (
    ProfileResponse,
    ProfileUpdate,
    ProfileResult,
    AdminLoginRequest,
    AdminLoginResult
)
from bakery.schemas.delivery import DeliveryOptionResponse

__all__ = [
    "ActionResult",
    "LineItem",
    "OrderItemIn",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderArchiveUpdate",
    "OrderResponse",
    "OrderListResponse",
    "OrderStats",
    "OrderResult",
    "AdminOrderResult",
    "AdminOrderListResult",
    "OrderStatsResult",
    "BreadItem",
    "BreadCategory",
    "CatalogResponse",
    "CatalogUpdate",
    "CatalogRevisionResponse",
    "CatalogResult",
    "CatalogRevisionsResult",
    "CartQuoteRequest",
    "CartQuoteResponse",
    "EditorOperation",
    "EditorState",
    "EditorResult",
    "ProfileResponse",
    "ProfileUpdate",
    "ProfileResult",
    "AdminLoginRequest",
    "AdminLoginResult",
    "DeliveryOptionResponse"
]
