"""
Order API endpoints (customer)
"""
from fastapi import APIRouter, Depends, status
from typing import Optional

from bakery.api.deps import get_current_user, get_order_service, respond
from bakery.errors import ErrorCode
from bakery.schemas.order import OrderCreate, OrderListResponse, OrderResult
from bakery.services.auth_client import AuthUser
from bakery.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResult,
    status_code=status.HTTP_201_CREATED,
    summary="Submit order"
)
def create_order(
    order_data: OrderCreate,
    user: Optional[AuthUser] = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Submit a delivery order
    
    Process:
    1. Require sign-in (401 with redirect_to for the login page)
    2. Rate limit: 10 orders per hour per user
    3. Validate contact fields, phone, delivery date and items
    4. Check the total against the items
    5. Allow only one pending order per user
    6. Save the order as pending
    """
    return respond(service.create_order(user, order_data), status.HTTP_201_CREATED)


@router.get("/mine", response_model=OrderListResponse, summary="Get my orders")
def get_my_orders(
    user: Optional[AuthUser] = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """Order history of the signed-in customer, newest first"""
    if user is None:
        return respond(OrderResult.fail(
            ErrorCode.AUTH_REQUIRED,
            "יש להתחבר כדי לצפות בהזמנות",
            redirect_to="/login?returnTo=/orders"
        ))
    orders = service.list_my_orders(user)
    return OrderListResponse(orders=orders, total=len(orders))


@router.post("/{order_id}/cancel", response_model=OrderResult, summary="Cancel my order")
def cancel_order(
    order_id: str,
    user: Optional[AuthUser] = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Cancel an own order
    
    Only pending or confirmed orders can be cancelled.
    
    - **order_id**: Order ID
    """
    return respond(service.cancel_order(user, order_id))
