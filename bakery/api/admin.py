"""
Admin dashboard API endpoints

Every endpoint checks the admin role server-side through the service layer.
"""
from datetime import date
from fastapi import APIRouter, Depends, Query
from typing import Optional

from bakery.api.deps import (
    get_admin_service,
    get_catalog_service,
    get_current_user,
    respond
)
from bakery.schemas.catalog import (
    CatalogResult,
    CatalogRevisionsResult,
    CatalogUpdate,
    EditorOperation,
    EditorResult
)
from bakery.schemas.order import (
    AdminOrderListResult,
    AdminOrderResult,
    OrderArchiveUpdate,
    OrderStatsResult,
    OrderStatusUpdate
)
from bakery.services.admin_service import AdminService
from bakery.services.auth_client import AuthUser
from bakery.services.catalog_service import CatalogService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/orders", response_model=AdminOrderListResult, summary="List orders")
def list_orders(
    order_status: Optional[str] = Query(None, alias="status", description="Filter by status"),
    delivery_date: Optional[date] = Query(None, description="Filter by delivery date"),
    archived: bool = Query(False, description="Show archived orders instead of active ones"),
    skip: int = Query(0, ge=0, description="Number of orders to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of orders to return"),
    user: Optional[AuthUser] = Depends(get_current_user),
    service: AdminService = Depends(get_admin_service)
):
    """
    Retrieve orders for the dashboard
    
    - **status**: Only orders in this status
    - **delivery_date**: Only orders for this delivery date
    - **archived**: Show the archive (default: active orders)
    """
    return respond(service.list_orders(
        user,
        status=order_status,
        delivery_date=delivery_date,
        archived=archived,
        skip=skip,
        limit=limit
    ))


@router.get("/orders/stats", response_model=OrderStatsResult, summary="Order statistics")
def order_stats(
    user: Optional[AuthUser] = Depends(get_current_user),
    service: AdminService = Depends(get_admin_service)
):
    """Counts and income for active orders and the next delivery"""
    return respond(service.get_stats(user))


@router.patch("/orders/{order_id}/status", response_model=AdminOrderResult, summary="Update order status")
def update_order_status(
    order_id: str,
    status_data: OrderStatusUpdate,
    user: Optional[AuthUser] = Depends(get_current_user),
    service: AdminService = Depends(get_admin_service)
):
    """
    Update order status
    
    - **order_id**: Order ID
    - **status**: New status (pending, confirmed, preparing, ready, delivered, cancelled)
    """
    return respond(service.update_status(user, order_id, status_data.status))


@router.patch("/orders/{order_id}/archive", response_model=AdminOrderResult, summary="Archive or restore order")
def set_order_archived(
    order_id: str,
    archive_data: OrderArchiveUpdate,
    user: Optional[AuthUser] = Depends(get_current_user),
    service: AdminService = Depends(get_admin_service)
):
    """
    Move an order into or out of the archive
    
    - **order_id**: Order ID
    - **archived**: Target archive flag
    """
    return respond(service.set_archived(user, order_id, archive_data.archived))


@router.get("/catalog/revisions", response_model=CatalogRevisionsResult, summary="Catalog history")
def catalog_revisions(
    user: Optional[AuthUser] = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    """All catalog revisions, newest first"""
    return respond(service.list_revisions(user))


@router.put("/catalog", response_model=CatalogResult, summary="Replace catalog")
def update_catalog(
    catalog: CatalogUpdate,
    user: Optional[AuthUser] = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    """Save a complete catalog as the next active revision"""
    return respond(service.update_catalog(user, catalog.categories))


@router.post("/catalog/editor", response_model=EditorResult, summary="Start editing catalog")
def enter_editor(
    user: Optional[AuthUser] = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    """Open (or resume) an edit session over the active catalog"""
    return respond(service.enter_editor(user))


@router.get("/catalog/editor", response_model=EditorResult, summary="Get editor state")
def editor_state(
    user: Optional[AuthUser] = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    return respond(service.editor_state(user))


@router.post("/catalog/editor/ops", response_model=EditorResult, summary="Apply editor operation")
def apply_editor_operation(
    operation: EditorOperation,
    user: Optional[AuthUser] = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Apply one edit to the working copy
    
    - **op**: add_category, remove_category, move_category, update_category,
      add_item, remove_item, move_item, rename_item
    """
    return respond(service.apply_editor_operation(user, operation))


@router.post("/catalog/editor/save", response_model=EditorResult, summary="Save edited catalog")
def save_editor(
    user: Optional[AuthUser] = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    return respond(service.save_editor(user))


@router.post("/catalog/editor/discard", response_model=EditorResult, summary="Discard catalog edits")
def discard_editor(
    confirm: bool = Query(False, description="Discard even when there are unsaved changes"),
    user: Optional[AuthUser] = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service)
):
    """Unsaved changes require confirm=true; otherwise 409 with needs_confirmation"""
    return respond(service.discard_editor(user, confirmed=confirm))
