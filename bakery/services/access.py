"""
Server-side role checks

The role stored in ``profiles`` is the only authority for admin access.
Clients may hide admin controls from customers, but that is a display hint.
"""
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bakery.constants import ROLE_ADMIN
from bakery.errors import ErrorCode, report_error, get_user_error_message
from bakery.repositories.profile_repository import ProfileRepository
from bakery.services.auth_client import AuthUser

NOT_LOGGED_IN = "לא מחובר"
NOT_ADMIN = "אין הרשאות מנהל"
ROLE_CHECK_FAILED = "שגיאה בבדיקת הרשאות"


def admin_denial(db: Session, user: Optional[AuthUser]) -> Optional[Tuple[ErrorCode, str]]:
    """
    Return the failure for a non-admin caller, or None for an admin
    
    A database error during the role lookup is reported and denies access
    with BACKEND_UNAVAILABLE.
    """
    if user is None:
        return ErrorCode.AUTH_REQUIRED, NOT_LOGGED_IN
    try:
        role = ProfileRepository(db).get_role(user.id)
    except SQLAlchemyError as e:
        db.rollback()
        report_error(e, "admin_role_check", user.id)
        return ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, ROLE_CHECK_FAILED)
    if role != ROLE_ADMIN:
        return ErrorCode.FORBIDDEN, NOT_ADMIN
    return None
