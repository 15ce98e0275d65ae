from fastapi import HTTPException
import structlog

from photoshare.utils.exceptions import PhotoShareError

logger = structlog.get_logger()


def handle_api_error(e: Exception, fallback_message: str) -> HTTPException:
    """Преобразовать исключение сервиса в HTTP-ответ"""
    if isinstance(e, HTTPException):
        return e

    if isinstance(e, PhotoShareError) and e.status_code < 500:
        return HTTPException(status_code=e.status_code, detail=e.message)

    logger.error("Unexpected API error", error=str(e), error_type=type(e).__name__)
    return HTTPException(status_code=500, detail=fallback_message)
