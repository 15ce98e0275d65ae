from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session
import structlog

from photoshare.config.database import get_db

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Проверка состояния системы"""
    try:
        db.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "services": {
                "database": "ok"
            }
        }

    except Exception as e:
        logger.error("Health check failed", error=str(e))
        raise HTTPException(status_code=503, detail="Service unavailable")
