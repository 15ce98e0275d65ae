from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)


class AdminSummary(BaseModel):
    id: int
    username: str
    email: Optional[str] = None

    class Config:
        from_attributes = True


class AdminProfile(AdminSummary):
    created_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    admin: AdminSummary


class ProfileResponse(BaseModel):
    admin: AdminProfile


class TokenClaims(BaseModel):
    """Полезная нагрузка токена администратора"""
    adminId: int
    username: str
