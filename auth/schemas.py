# src/auth/schemas.py
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Literal, Optional

from config import settings


class UserCreate(BaseModel):
    """Schema for user registration."""
    name: str
    email: EmailStr
    password: str


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Schema for user response."""
    id: int
    name: str
    email: str
    role: str
    is_blocked: bool
    is_premium: bool
    subscription_expiry_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    """Schema for token response."""
    access_token: str
    token_type: str


class PremiumStatusUpdate(BaseModel):
    is_premium: bool
    subscription_duration: int = Field(default=settings.DEFAULT_PREMIUM_DURATION_DAYS, gt=0)


class UserUpdate(BaseModel):
    """Admin changes to a user account. Unset fields are left alone."""
    name: Optional[str] = None
    is_blocked: Optional[bool] = None
    role: Optional[Literal["USER", "PREMIUM", "ADMIN"]] = None


class AdminActionLogResponse(BaseModel):
    """Schema for admin action log response."""
    id: int
    admin_id: Optional[int]
    action: str
    timestamp: datetime

    class Config:
        from_attributes = True
