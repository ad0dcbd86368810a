from pydantic import ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from storefront.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Registration request; presence is checked by the controller so the
    response can list every missing field at once."""
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = None


class SigninRequest(CamelModel):
    """Email/password sign-in request"""
    email: Optional[str] = None
    password: Optional[str] = None
    remember_me: bool = False


class ChangePasswordRequest(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class PasswordStrengthRequest(CamelModel):
    password: Optional[str] = None


class UserResponse(CamelModel):
    """Sanitized user; the password hash is never part of it"""
    id: int
    email: str
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: str
    is_admin: bool = False
    email_verified: bool = False
    phone_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(CamelModel):
    id: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
    last_activity_at: Optional[datetime] = None
    expires_at: datetime
    current: bool = False

    model_config = ConfigDict(from_attributes=True)


class PasswordStrengthResponse(CamelModel):
    success: bool = True
    valid: bool
    strength: str
    score: int
    errors: List[str]
