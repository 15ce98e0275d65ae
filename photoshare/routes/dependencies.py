from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from photoshare.models.admin import TokenClaims
from photoshare.services.auth_service import AuthService
from photoshare.services.event_service import EventService
from photoshare.services.photo_service import PhotoService
from photoshare.services.search_service import GuestSearchService
from photoshare.utils.exceptions import PhotoShareError

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_event_service(request: Request) -> EventService:
    return request.app.state.event_service


def get_photo_service(request: Request) -> PhotoService:
    return request.app.state.photo_service


def get_search_service(request: Request) -> GuestSearchService:
    return request.app.state.search_service


def require_admin(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        auth_service: AuthService = Depends(get_auth_service)
) -> TokenClaims:
    """Проверка токена администратора"""
    token = credentials.credentials if credentials else None
    try:
        return auth_service.authenticate(token)
    except PhotoShareError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


def optional_admin(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        auth_service: AuthService = Depends(get_auth_service)
) -> Optional[TokenClaims]:
    """Токен необязателен, но если передан, он должен быть валидным"""
    if credentials is None:
        return None
    try:
        return auth_service.authenticate(credentials.credentials)
    except PhotoShareError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
