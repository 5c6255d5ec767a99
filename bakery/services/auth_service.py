"""
Auth Service - admin sign-in
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bakery.constants import ROLE_ADMIN
from bakery.errors import ErrorCode, report_error, get_user_error_message
from bakery.repositories.profile_repository import ProfileRepository
from bakery.schemas.profile import AdminLoginResult
from bakery.services.auth_client import AuthClient, AuthServiceError
from bakery.services.rate_limiter import RateLimiter, RATE_LIMITS

logger = logging.getLogger(__name__)

LOGIN_FAILED = "שגיאה בהתחברות. אנא בדוק את הפרטים ונסה שוב."
NO_ADMIN_ACCESS = "אין לך הרשאות גישה למערכת הניהול"
TOO_MANY_ATTEMPTS = "יותר מדי ניסיונות התחברות. נסה שוב מאוחר יותר"
AUTH_UNAVAILABLE = "שירות ההתחברות אינו זמין כרגע"


class AuthService:
    """Admin login with a server-side role check"""
    
    def __init__(self, db: Session, auth_client: AuthClient, rate_limiter: RateLimiter):
        self.db = db
        self.auth_client = auth_client
        self.rate_limiter = rate_limiter
    
    async def admin_login(self, email: str, password: str) -> AdminLoginResult:
        """
        Sign in and require the admin role
        
        Steps:
        1. Enforce the login rate limit for the email
        2. Sign in with the auth provider
        3. Read the role from profiles; sign a non-admin out again
        """
        identifier = email.strip().lower()
        limit = self.rate_limiter.check(identifier, RATE_LIMITS["LOGIN"])
        if not limit.success:
            logger.warning("Login rate limit hit for %s", identifier)
            return AdminLoginResult.fail(ErrorCode.RATE_LIMITED, TOO_MANY_ATTEMPTS, reset_time=limit.reset_at)
        
        try:
            session = await self.auth_client.sign_in_with_password(identifier, password)
        except AuthServiceError as e:
            report_error(e, "admin_login", data={"email": identifier})
            return AdminLoginResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, AUTH_UNAVAILABLE))
        
        if session is None:
            return AdminLoginResult.fail(ErrorCode.AUTH_REQUIRED, LOGIN_FAILED)
        
        try:
            role = ProfileRepository(self.db).get_role(session.user.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "admin_login", session.user.id)
            await self.auth_client.sign_out(session.access_token)
            return AdminLoginResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, LOGIN_FAILED))
        
        if role != ROLE_ADMIN:
            logger.warning("Non-admin %s attempted admin login", session.user.id)
            await self.auth_client.sign_out(session.access_token)
            return AdminLoginResult.fail(ErrorCode.FORBIDDEN, NO_ADMIN_ACCESS)
        
        logger.info("Admin %s signed in", session.user.id)
        return AdminLoginResult(
            success=True,
            access_token=session.access_token,
            refresh_token=session.refresh_token
        )
