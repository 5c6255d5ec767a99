"""
Admin Service - order dashboard actions

Every method re-reads the caller's role from the database before acting.
"""
import logging
from datetime import date
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bakery.constants import SETTABLE_STATUSES
from bakery.errors import ErrorCode, report_error, get_user_error_message
from bakery.publishers.event_publisher import EventPublisher
from bakery.repositories.order_repository import OrderRepository
from bakery.schemas.order import (
    AdminOrderListResult,
    AdminOrderResult,
    OrderResponse,
    OrderStats,
    OrderStatsResult
)
from bakery.services.access import admin_denial
from bakery.services.auth_client import AuthUser
from bakery.services.view_cache import ViewCache
from bakery.utils.delivery import get_next_delivery_day, today_local

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND = "ההזמנה לא נמצאה"
INVALID_STATUS = "סטטוס לא תקין"
LOAD_FAILED = "שגיאה בטעינת ההזמנות"
STATUS_FAILED = "שגיאה בעדכון סטטוס ההזמנה"
ARCHIVE_FAILED = "שגיאה בעדכון הארכיון"

# Upper bound for dashboard statistics
STATS_LIMIT = 10000


class AdminService:
    """Service layer for the admin order dashboard"""
    
    def __init__(
        self,
        db: Session,
        history_cache: ViewCache,
        event_publisher: Optional[EventPublisher] = None,
        today: Callable[[], date] = today_local,
    ):
        self.db = db
        self.repository = OrderRepository(db)
        self.history_cache = history_cache
        self.event_publisher = event_publisher or EventPublisher()
        self.today = today
    
    def list_orders(
        self,
        user: Optional[AuthUser],
        status: Optional[str] = None,
        delivery_date: Optional[date] = None,
        archived: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> AdminOrderListResult:
        """
        Orders for the dashboard, newest first
        
        Args:
            status: Only orders in this status
            delivery_date: Only orders for this delivery date
            archived: Show the archive instead of active orders
        """
        denied = admin_denial(self.db, user)
        if denied:
            return AdminOrderListResult.fail(*denied)
        
        try:
            orders = self.repository.get_all(
                skip=skip,
                limit=limit,
                status=status,
                delivery_date=delivery_date,
                archived=archived
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "admin_list_orders", user.id, {"status": status})
            return AdminOrderListResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, LOAD_FAILED))
        
        return AdminOrderListResult(
            success=True,
            orders=[OrderResponse.model_validate(o) for o in orders],
            total=len(orders)
        )
    
    def get_stats(self, user: Optional[AuthUser]) -> OrderStatsResult:
        """Counts and income over active orders and the next delivery"""
        denied = admin_denial(self.db, user)
        if denied:
            return OrderStatsResult.fail(*denied)
        
        try:
            orders = self.repository.get_all(limit=STATS_LIMIT, archived=None)
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "admin_order_stats", user.id)
            return OrderStatsResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, LOAD_FAILED))
        
        next_delivery_date = get_next_delivery_day(self.today())
        
        active = [o for o in orders if not o.archived]
        upcoming = [o for o in active if o.delivery_date == next_delivery_date]
        
        stats = OrderStats(
            total=len(active),
            pending=sum(1 for o in active if o.status == "pending"),
            confirmed=sum(1 for o in active if o.status == "confirmed"),
            delivered=sum(1 for o in active if o.status == "delivered"),
            archived=sum(1 for o in orders if o.archived),
            total_income=sum(o.total_price for o in active if o.status != "cancelled"),
            next_delivery_date=next_delivery_date,
            next_delivery=len(upcoming),
            next_delivery_pending=sum(1 for o in upcoming if o.status == "pending"),
            next_delivery_cancelled=sum(1 for o in upcoming if o.status == "cancelled"),
            next_delivery_income=sum(o.total_price for o in upcoming if o.status != "cancelled"),
            next_delivery_pending_income=sum(o.total_price for o in upcoming if o.status == "pending")
        )
        return OrderStatsResult(success=True, stats=stats)
    
    def update_status(self, user: Optional[AuthUser], order_id: str, new_status: str) -> AdminOrderResult:
        """
        Set an order's status
        
        Legacy statuses (completed, archived) are readable but not settable.
        Returns the persisted order so an optimistic client can reconcile or
        roll back.
        """
        denied = admin_denial(self.db, user)
        if denied:
            return AdminOrderResult.fail(*denied)
        
        if new_status not in SETTABLE_STATUSES:
            return AdminOrderResult.fail(ErrorCode.VALIDATION_FAILED, INVALID_STATUS)
        
        try:
            existing = self.repository.get_by_id(order_id)
            if not existing:
                return AdminOrderResult.fail(ErrorCode.NOT_FOUND, ORDER_NOT_FOUND)
            old_status = existing.status
            order = self.repository.update_status(order_id, new_status)
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "admin_update_status", user.id, {"order_id": order_id, "status": new_status})
            return AdminOrderResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, STATUS_FAILED))
        
        logger.info("Order %s status %s -> %s by %s", order_id, old_status, new_status, user.id)
        self.history_cache.invalidate(order.user_id)
        try:
            self.event_publisher.publish_order_status_changed({
                'order_id': order.id,
                'old_status': old_status,
                'new_status': order.status,
                'updated_at': order.updated_at.isoformat()
            })
        except Exception as e:
            logger.warning("Failed to publish OrderStatusChanged event: %s", e)
        
        return AdminOrderResult(success=True, order=OrderResponse.model_validate(order))
    
    def set_archived(self, user: Optional[AuthUser], order_id: str, archived: bool) -> AdminOrderResult:
        """Move an order into or out of the archive"""
        denied = admin_denial(self.db, user)
        if denied:
            return AdminOrderResult.fail(*denied)
        
        try:
            order = self.repository.set_archived(order_id, archived)
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "admin_set_archived", user.id, {"order_id": order_id, "archived": archived})
            return AdminOrderResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, ARCHIVE_FAILED))
        
        if not order:
            return AdminOrderResult.fail(ErrorCode.NOT_FOUND, ORDER_NOT_FOUND)
        
        self.history_cache.invalidate(order.user_id)
        try:
            self.event_publisher.publish_order_archived({'order_id': order.id, 'archived': order.archived})
        except Exception as e:
            logger.warning("Failed to publish OrderArchived event: %s", e)
        
        return AdminOrderResult(success=True, order=OrderResponse.model_validate(order))
