"""
Error taxonomy and reporting for service actions

Expected failures travel as values (``ErrorCode`` on a result schema).
Unexpected exceptions are caught at the outer edge of each action and passed
to ``report_error`` which logs them with context and counts them for the
Prometheus collector.
"""
import enum
import logging
from typing import Any, Dict, Optional

from prometheus_client import Counter

from bakery.config import settings

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    """Failure kinds returned by service actions"""
    AUTH_REQUIRED = "auth_required"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    VALIDATION_FAILED = "validation_failed"
    DUPLICATE_PENDING = "duplicate_pending"
    INVALID_TRANSITION = "invalid_transition"
    NOT_FOUND = "not_found"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    UNEXPECTED = "unexpected"


# HTTP status used by the API layer for each failure kind
HTTP_STATUS_BY_CODE = {
    ErrorCode.AUTH_REQUIRED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.DUPLICATE_PENDING: 409,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.BACKEND_UNAVAILABLE: 503,
    ErrorCode.UNEXPECTED: 500,
}


ACTION_ERRORS = Counter(
    "bakery_action_errors_total",
    "Unexpected errors raised inside service actions",
    ["action", "error_type"],
)


def extract_error_details(error: BaseException) -> Dict[str, Any]:
    """Pull message/code/details out of driver and library exceptions"""
    details = {
        "message": str(error) or error.__class__.__name__,
        "code": getattr(error, "code", None),
        "details": None,
    }
    # psycopg2 errors wrapped by SQLAlchemy keep the server message on .orig
    orig = getattr(error, "orig", None)
    if orig is not None:
        details["code"] = getattr(orig, "pgcode", None) or details["code"]
        details["details"] = str(orig)
    return details


def report_error(
    error: BaseException,
    action: str,
    user_id: Optional[str] = None,
    data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log an unexpected error with context and count it
    
    Args:
        error: The caught exception
        action: Name of the action that failed
        user_id: Acting user, if known
        data: Non-sensitive summary of the input
    """
    details = extract_error_details(error)
    logger.error(
        "Action %s failed: %s",
        action,
        details["message"],
        exc_info=error,
        extra={
            "action": action,
            "user_id": user_id,
            "error_code": details["code"],
            "context": data or {},
        },
    )
    ACTION_ERRORS.labels(action=action, error_type=error.__class__.__name__).inc()


def get_user_error_message(error: BaseException, fallback_message: str) -> str:
    """Generic localized message; adds diagnostics in development only"""
    if settings.ENVIRONMENT == "development":
        details = extract_error_details(error)
        code = f" ({details['code']})" if details["code"] else ""
        return f"{fallback_message}\n[Dev] {details['message']}{code}"
    return fallback_message
