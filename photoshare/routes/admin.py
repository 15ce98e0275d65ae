from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from photoshare.config.database import get_db
from photoshare.models.admin import (
    LoginRequest, LoginResponse, ProfileResponse, AdminSummary, AdminProfile, TokenClaims
)
from photoshare.routes.dependencies import get_auth_service, require_admin
from photoshare.routes.errors import handle_api_error
from photoshare.services.auth_service import AuthService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse)
async def login(
        credentials: LoginRequest,
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    """Вход администратора, выдает bearer-токен на 24 часа"""
    try:
        token, admin = auth_service.login(db, credentials.username, credentials.password)
        return LoginResponse(token=token, admin=AdminSummary.model_validate(admin))

    except Exception as e:
        raise handle_api_error(e, "Login failed")


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
        claims: TokenClaims = Depends(require_admin),
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    try:
        admin = auth_service.get_profile(db, claims.adminId)
        return ProfileResponse(admin=AdminProfile.model_validate(admin))

    except Exception as e:
        raise handle_api_error(e, "Failed to fetch profile")
