"""
Pydantic schemas for profiles and admin login
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from bakery.schemas.common import ActionResult


class ProfileResponse(BaseModel):
    id: str
    full_name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    city: Optional[str]
    role: Literal["admin", "customer"]
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Self-service fields; the role is not part of this schema"""
    full_name: str = Field("", max_length=100)
    phone: Optional[str] = None
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)


class ProfileResult(ActionResult):
    profile: Optional[ProfileResponse] = None


class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str


class AdminLoginResult(ActionResult):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    reset_time: Optional[datetime] = None
