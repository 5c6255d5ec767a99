"""
Profile API endpoints
"""
from fastapi import APIRouter, Depends
from typing import Optional

from bakery.api.deps import get_current_user, get_profile_service, respond
from bakery.schemas.profile import ProfileResult, ProfileUpdate
from bakery.services.auth_client import AuthUser
from bakery.services.profile_service import ProfileService

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResult, summary="Get my profile")
def get_profile(
    user: Optional[AuthUser] = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Profile of the signed-in user, created on first access"""
    return respond(service.get_profile(user))


@router.put("", response_model=ProfileResult, summary="Update my profile")
def update_profile(
    data: ProfileUpdate,
    user: Optional[AuthUser] = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """
    Update contact details used to prefill orders
    
    - **full_name**, **phone**, **address**, **city**
    """
    return respond(service.update_profile(user, data))
