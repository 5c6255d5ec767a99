"""
Auth API endpoints
"""
from fastapi import APIRouter, Depends

from bakery.api.deps import get_auth_service, respond
from bakery.schemas.profile import AdminLoginRequest, AdminLoginResult
from bakery.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/admin/login", response_model=AdminLoginResult, summary="Admin sign-in")
async def admin_login(
    credentials: AdminLoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """
    Sign in to the admin dashboard
    
    Limited to 5 attempts per 15 minutes per email. Accounts without the
    admin role are signed out again and refused.
    """
    return respond(await service.admin_login(credentials.email, credentials.password))
