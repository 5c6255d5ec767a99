"""
Order Service - Business Logic Layer
"""
import logging
from datetime import date
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bakery.config import settings
from bakery.constants import CANCELLABLE_STATUSES
from bakery.errors import ErrorCode, report_error, get_user_error_message
from bakery.publishers.event_publisher import EventPublisher
from bakery.repositories.order_repository import OrderRepository
from bakery.schemas.order import (
    LineItem,
    OrderCreate,
    OrderResponse,
    OrderResult,
    serialize_line_items
)
from bakery.services.auth_client import AuthUser
from bakery.services.rate_limiter import RateLimiter, RATE_LIMITS
from bakery.services.view_cache import ViewCache
from bakery.utils.delivery import today_local
from bakery.utils.phone import validate_israeli_phone

logger = logging.getLogger(__name__)

LOGIN_URL = "/login?returnTo=/"
ORDERS_URL = "/orders"

PRICE_TOLERANCE = 0.01
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100

AUTH_ERROR = "אירעה שגיאה באימות. אנא התחבר מחדש"
CANCEL_AUTH_ERROR = "יש להתחבר כדי לבטל הזמנה"
RATE_LIMITED = "ביצעת יותר מדי הזמנות. ניתן לנסות שוב אחרי השעה {reset}"
REQUIRED_FIELDS = "יש למלא את כל השדות הנדרשים"
NAME_LENGTH = "השם חייב להכיל בין 2 ל-100 תווים"
DATE_PAST = "תאריך המשלוח שנבחר כבר עבר"
EMPTY_CART = "העגלה ריקה"
INVALID_ITEM = "אחד הפריטים בהזמנה אינו תקין"
TOTAL_MISMATCH = "הסכום הכולל אינו תואם לפריטים בהזמנה"
DUPLICATE_PENDING = (
    "יש לך כבר הזמנה ממתינה. אנא המתן לאישור ההזמנה הקיימת או בטל אותה לפני ביצוע "
    "הזמנה חדשה. לצפייה בהזמנות שלך לחץ על 'ההזמנות שלי'"
)
SUBMIT_FAILED = "שגיאה בשליחת ההזמנה. אנא נסה שוב"
ORDER_NOT_FOUND = "ההזמנה לא נמצאה"
NOT_OWNER = "אין לך הרשאה לבטל הזמנה זו"
NOT_CANCELLABLE = "לא ניתן לבטל הזמנה בסטטוס זה"
CANCEL_FAILED = "שגיאה בביטול ההזמנה"
UNEXPECTED_ERROR = "שגיאה בלתי צפויה"


class OrderService:
    """Service layer for customer order actions"""
    
    def __init__(
        self,
        db: Session,
        rate_limiter: RateLimiter,
        history_cache: ViewCache,
        event_publisher: Optional[EventPublisher] = None,
        today: Callable[[], date] = today_local,
    ):
        self.db = db
        self.repository = OrderRepository(db)
        self.rate_limiter = rate_limiter
        self.history_cache = history_cache
        self.event_publisher = event_publisher or EventPublisher()
        self.today = today
    
    def create_order(self, user: Optional[AuthUser], order_data: OrderCreate) -> OrderResult:
        """
        Submit a delivery order
        
        Steps (first failure wins):
        1. Require an authenticated user
        2. Enforce the per-user order creation rate limit
        3. Validate customer fields, delivery date and items
        4. Verify the submitted total against the items
        5. Reject if the user already has a pending order
        6. Save the order as pending with the server-known owner
        7. Invalidate the user's order history and publish OrderCreated
        
        Args:
            user: Authenticated caller, None if anonymous
            order_data: Order submission
        
        Returns:
            OrderResult with order_id, or a failure value
        """
        try:
            return self._create_order(user, order_data)
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "create_order", user.id if user else None, self._summary(order_data))
            return OrderResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, SUBMIT_FAILED))
        except Exception as e:
            report_error(e, "create_order", user.id if user else None, self._summary(order_data))
            return OrderResult.fail(ErrorCode.UNEXPECTED, get_user_error_message(e, UNEXPECTED_ERROR))
    
    def _create_order(self, user: Optional[AuthUser], order_data: OrderCreate) -> OrderResult:
        if user is None:
            return OrderResult.fail(ErrorCode.AUTH_REQUIRED, AUTH_ERROR, redirect_to=LOGIN_URL)
        
        limit = self.rate_limiter.check(user.id, RATE_LIMITS["ORDER_CREATION"])
        if not limit.success:
            reset_local = limit.reset_at.astimezone(ZoneInfo(settings.TIMEZONE))
            logger.info("Order rate limit hit for user %s", user.id)
            return OrderResult.fail(
                ErrorCode.RATE_LIMITED,
                RATE_LIMITED.format(reset=reset_local.strftime("%H:%M")),
                reset_time=limit.reset_at
            )
        
        failure = self._validate(order_data)
        if failure:
            return failure
        
        phone = validate_israeli_phone(order_data.customer_phone)
        
        # Check-then-insert; concurrent submissions from one user can both pass
        if self.repository.has_pending(user.id):
            return OrderResult.fail(ErrorCode.DUPLICATE_PENDING, DUPLICATE_PENDING, redirect_to=ORDERS_URL)
        
        items = [
            LineItem(
                product_id=item.product_id,
                name=item.name.strip(),
                quantity=item.quantity,
                unit_price=item.price
            )
            for item in order_data.items
        ]
        
        order = self.repository.create({
            'user_id': user.id,
            'customer_name': order_data.customer_name.strip(),
            'customer_phone': phone.normalized,
            'customer_address': order_data.customer_address,
            'customer_city': order_data.customer_city,
            'delivery_date': order_data.delivery_date,
            'items': serialize_line_items(items),
            'total_price': order_data.total_price,
            'status': 'pending',
            'archived': False,
            'notes': order_data.notes or None
        })
        logger.info("Order %s created for user %s", order.id, user.id)
        
        self.history_cache.invalidate(user.id)
        self._publish(self.event_publisher.publish_order_created, {
            'order_id': order.id,
            'user_id': order.user_id,
            'delivery_date': order.delivery_date.isoformat(),
            'total_price': order.total_price,
            'status': order.status
        })
        
        return OrderResult(success=True, order_id=order.id)
    
    def _validate(self, order_data: OrderCreate) -> Optional[OrderResult]:
        name = order_data.customer_name.strip()
        if not name or not order_data.customer_phone.strip() or not order_data.delivery_date:
            return OrderResult.fail(ErrorCode.VALIDATION_FAILED, REQUIRED_FIELDS, field="required")
        
        phone = validate_israeli_phone(order_data.customer_phone)
        if not phone.is_valid:
            return OrderResult.fail(ErrorCode.VALIDATION_FAILED, phone.error, field="customer_phone")
        
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            return OrderResult.fail(ErrorCode.VALIDATION_FAILED, NAME_LENGTH, field="customer_name")
        
        if order_data.delivery_date < self.today():
            return OrderResult.fail(ErrorCode.VALIDATION_FAILED, DATE_PAST, field="delivery_date")
        
        if not order_data.items:
            return OrderResult.fail(ErrorCode.VALIDATION_FAILED, EMPTY_CART, field="items")
        
        for item in order_data.items:
            if not item.name.strip() or item.quantity <= 0 or item.price < 0:
                return OrderResult.fail(ErrorCode.VALIDATION_FAILED, INVALID_ITEM, field="items")
        
        computed_total = sum(item.quantity * item.price for item in order_data.items)
        if abs(computed_total - order_data.total_price) > PRICE_TOLERANCE:
            logger.warning(
                "Order total mismatch: submitted %.2f, computed %.2f",
                order_data.total_price, computed_total
            )
            return OrderResult.fail(ErrorCode.VALIDATION_FAILED, TOTAL_MISMATCH, field="total_price")
        
        return None
    
    def cancel_order(self, user: Optional[AuthUser], order_id: str) -> OrderResult:
        """
        Cancel the caller's own order while it is pending or confirmed
        
        Args:
            user: Authenticated caller, None if anonymous
            order_id: Order to cancel
        
        Returns:
            OrderResult with order_id, or a failure value
        """
        try:
            return self._cancel_order(user, order_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "cancel_order", user.id if user else None, {"order_id": order_id})
            return OrderResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, CANCEL_FAILED))
        except Exception as e:
            report_error(e, "cancel_order", user.id if user else None, {"order_id": order_id})
            return OrderResult.fail(ErrorCode.UNEXPECTED, get_user_error_message(e, UNEXPECTED_ERROR))
    
    def _cancel_order(self, user: Optional[AuthUser], order_id: str) -> OrderResult:
        if user is None:
            return OrderResult.fail(ErrorCode.AUTH_REQUIRED, CANCEL_AUTH_ERROR, redirect_to=LOGIN_URL)
        
        order = self.repository.get_by_id(order_id)
        if not order:
            return OrderResult.fail(ErrorCode.NOT_FOUND, ORDER_NOT_FOUND)
        
        if order.user_id != user.id:
            return OrderResult.fail(ErrorCode.FORBIDDEN, NOT_OWNER)
        
        if order.status not in CANCELLABLE_STATUSES:
            return OrderResult.fail(ErrorCode.INVALID_TRANSITION, NOT_CANCELLABLE)
        
        old_status = order.status
        if not self.repository.cancel_owned(order_id, user.id):
            return OrderResult.fail(ErrorCode.FORBIDDEN, NOT_OWNER)
        logger.info("Order %s cancelled by owner %s", order_id, user.id)
        
        self.history_cache.invalidate(user.id)
        self._publish(self.event_publisher.publish_order_cancelled, {
            'order_id': order_id,
            'user_id': user.id,
            'old_status': old_status,
            'new_status': 'cancelled'
        })
        
        return OrderResult(success=True, order_id=order_id)
    
    def list_my_orders(self, user: AuthUser) -> List[OrderResponse]:
        """Order history for the caller, newest first"""
        cached = self.history_cache.get(user.id)
        if cached is not None:
            return cached
        
        orders = [OrderResponse.model_validate(o) for o in self.repository.get_by_user(user.id)]
        self.history_cache.set(user.id, orders)
        return orders
    
    @staticmethod
    def _summary(order_data: OrderCreate) -> dict:
        return {
            'items': len(order_data.items),
            'total_price': order_data.total_price,
            'delivery_date': str(order_data.delivery_date)
        }
    
    @staticmethod
    def _publish(publish, payload: dict) -> None:
        try:
            publish(payload)
        except Exception as e:
            # Publishing never fails the action
            logger.warning("Failed to publish event: %s", e)
