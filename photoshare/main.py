import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from photoshare.config.database import create_db_engine, create_session_factory, create_tables
from photoshare.config.settings import Settings, get_settings
from photoshare.routes import admin, events, health, photos
from photoshare.services.auth_service import AuthService
from photoshare.services.event_service import EventService
from photoshare.services.file_service import FileService
from photoshare.services.photo_service import PhotoService
from photoshare.services.search_service import FaceMatcher, GuestSearchService
from photoshare.utils.exceptions import PhotoShareError

logger = structlog.get_logger()


def configure_logging(log_level: str = "INFO") -> None:
    """Настройка structlog с JSON-выводом"""
    logging.basicConfig(format="%(message)s", level=log_level.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    logger.info("Starting photo sharing API")

    try:
        create_tables(app.state.engine)
        await app.state.file_service.cleanup_temp_files()
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        raise

    yield

    logger.info("Shutting down photo sharing API")
    app.state.engine.dispose()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())[1:])
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request: " + "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Все ошибки отдаются клиенту в виде {"error": "..."}"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(PhotoShareError)
    async def photoshare_exception_handler(request: Request, exc: PhotoShareError):
        if exc.status_code >= 500:
            logger.error("Unhandled service error", error=exc.message, path=request.url.path)
            return JSONResponse(status_code=500, content={"error": "Internal server error"})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app(settings: Optional[Settings] = None, matcher: Optional[FaceMatcher] = None) -> FastAPI:
    """Создание и настройка FastAPI приложения"""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Wedding Photo Share",
        description="Events, photo batches and guest selfie search",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan
    )

    # Состояние приложения передается явно, без глобальных объектов
    engine = create_db_engine(settings.database_url, echo=settings.debug)
    file_service = FileService(settings.upload_path, settings.max_upload_size)
    event_service = EventService(file_service)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.file_service = file_service
    app.state.auth_service = AuthService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_hours=settings.access_token_expire_hours,
    )
    app.state.event_service = event_service
    app.state.photo_service = PhotoService(
        file_service,
        event_service,
        max_files_per_upload=settings.max_files_per_upload,
    )
    app.state.search_service = GuestSearchService(file_service, event_service, matcher=matcher)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Подключение маршрутов
    app.include_router(health.router)
    app.include_router(admin.router)
    app.include_router(events.router)
    app.include_router(photos.router)

    # Загруженные фотографии событий
    app.mount(
        "/uploads/events",
        StaticFiles(directory=str(file_service.upload_path / "events")),
        name="uploads"
    )

    return app
