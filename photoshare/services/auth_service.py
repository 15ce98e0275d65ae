from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import structlog
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from photoshare.models.admin import TokenClaims
from photoshare.models.database import Admin
from photoshare.utils.exceptions import (
    UnauthorizedError, ForbiddenError, AdminNotFoundError
)

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class AuthService:
    """Аутентификация администраторов: bcrypt + JWT без серверных сессий"""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_hours: int = 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.token_lifetime = timedelta(hours=expire_hours)
        self._dummy_hash: Optional[str] = None

    def _verify_against_dummy(self, password: str) -> None:
        # Выравнивание времени ответа для несуществующего пользователя
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("photoshare-dummy-password")
        verify_password(password, self._dummy_hash)

    def create_access_token(self, admin: Admin, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "adminId": admin.id,
            "username": admin.username,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.token_lifetime).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def login(self, db: Session, username: str, password: str) -> Tuple[str, Admin]:
        admin = db.query(Admin).filter(Admin.username == username).first()
        if not admin:
            self._verify_against_dummy(password)
            logger.info("Login rejected", reason="invalid_credentials")
            raise UnauthorizedError("Invalid credentials")

        if not verify_password(password, admin.password_hash):
            logger.info("Login rejected", reason="invalid_credentials", admin_id=admin.id)
            raise UnauthorizedError("Invalid credentials")

        token = self.create_access_token(admin)
        logger.info("Admin logged in", admin_id=admin.id)
        return token, admin

    def authenticate(self, token: Optional[str], now: Optional[datetime] = None) -> TokenClaims:
        """Проверить bearer-токен и вернуть claims"""
        if not token:
            raise UnauthorizedError("Access token required")

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            raise ForbiddenError("Invalid or expired token")

        expires = payload.get("exp")
        current = (now or datetime.now(timezone.utc)).timestamp()
        if not isinstance(expires, (int, float)) or current >= expires:
            raise ForbiddenError("Invalid or expired token")

        try:
            return TokenClaims(adminId=payload["adminId"], username=payload["username"])
        except (KeyError, ValueError):
            raise ForbiddenError("Invalid or expired token")

    def get_profile(self, db: Session, admin_id: int) -> Admin:
        admin = db.query(Admin).filter(Admin.id == admin_id).first()
        if not admin:
            raise AdminNotFoundError("Admin not found")
        return admin

    def create_admin(self, db: Session, username: str, password: str, email: Optional[str] = None) -> Admin:
        """Создание администратора (только через скрипт провижининга)"""
        admin = Admin(username=username, password_hash=hash_password(password), email=email)
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info("Admin created", admin_id=admin.id)
        return admin
