"""
Profile Service - customer settings
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bakery.constants import ROLE_CUSTOMER
from bakery.errors import ErrorCode, report_error, get_user_error_message
from bakery.models.profile import Profile
from bakery.repositories.profile_repository import ProfileRepository
from bakery.schemas.profile import ProfileResponse, ProfileResult, ProfileUpdate
from bakery.services.auth_client import AuthUser
from bakery.utils.phone import validate_israeli_phone

logger = logging.getLogger(__name__)

LOGIN_REQUIRED = "יש להתחבר כדי לצפות בפרופיל"
LOAD_FAILED = "שגיאה בטעינת הפרופיל"
UPDATE_FAILED = "שגיאה בעדכון הפרופיל"


class ProfileService:
    """Service layer for user profiles"""
    
    def __init__(self, db: Session):
        self.db = db
        self.repository = ProfileRepository(db)
    
    def get_or_create(self, user: AuthUser) -> Profile:
        """Profile row for an identity, created as a customer on first sight"""
        profile = self.repository.get_by_id(user.id)
        if profile:
            return profile
        logger.info("Creating profile for user %s", user.id)
        return self.repository.create({
            'id': user.id,
            'email': user.email,
            'full_name': user.full_name,
            'role': ROLE_CUSTOMER
        })
    
    def get_profile(self, user: Optional[AuthUser]) -> ProfileResult:
        if user is None:
            return ProfileResult.fail(ErrorCode.AUTH_REQUIRED, LOGIN_REQUIRED)
        try:
            profile = self.get_or_create(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "get_profile", user.id)
            return ProfileResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, LOAD_FAILED))
        return ProfileResult(success=True, profile=ProfileResponse.model_validate(profile))
    
    def update_profile(self, user: Optional[AuthUser], data: ProfileUpdate) -> ProfileResult:
        """
        Update the caller's contact details
        
        A phone number, when given, is validated and stored normalized.
        Blank optional fields are stored as NULL.
        """
        if user is None:
            return ProfileResult.fail(ErrorCode.AUTH_REQUIRED, LOGIN_REQUIRED)
        
        phone = None
        if data.phone and data.phone.strip():
            result = validate_israeli_phone(data.phone)
            if not result.is_valid:
                return ProfileResult.fail(ErrorCode.VALIDATION_FAILED, result.error)
            phone = result.normalized
        
        try:
            self.get_or_create(user)
            profile = self.repository.update(user.id, {
                'full_name': data.full_name.strip(),
                'phone': phone,
                'address': (data.address or "").strip() or None,
                'city': (data.city or "").strip() or None
            })
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "update_profile", user.id)
            return ProfileResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, UPDATE_FAILED))
        
        return ProfileResult(success=True, profile=ProfileResponse.model_validate(profile))
