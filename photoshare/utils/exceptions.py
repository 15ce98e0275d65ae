from typing import Optional, Dict, Any


class PhotoShareError(Exception):
    """Базовое исключение приложения"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class UnauthorizedError(PhotoShareError):
    """Неверные учетные данные или отсутствует токен"""
    status_code = 401


class ForbiddenError(PhotoShareError):
    """Токен недействителен или истек"""
    status_code = 403


class NotFoundError(PhotoShareError):
    status_code = 404


class EventNotFoundError(NotFoundError):
    """Событие не найдено"""
    pass


class AdminNotFoundError(NotFoundError):
    """Администратор не найден"""
    pass


class ConflictError(PhotoShareError):
    """Нарушение уникальности (например, slug события)"""
    # Клиенты исторически ожидают 400
    status_code = 400


class InvalidInputError(PhotoShareError):
    """Ошибка валидации входных данных"""
    status_code = 400


class FileValidationError(InvalidInputError):
    """Ошибка валидации файла"""
    pass


class FileStorageError(PhotoShareError):
    """Ошибка сохранения файла"""
    pass


class DatabaseError(PhotoShareError):
    """Ошибка базы данных"""
    pass
