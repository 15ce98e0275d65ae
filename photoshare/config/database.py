from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator
from fastapi import Request
import structlog

logger = structlog.get_logger()

# Базовый класс для моделей
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Создать движок базы данных"""
    kwargs = {"echo": echo}

    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory база должна жить в одном соединении
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Получить сессию базы данных"""
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()


def create_tables(engine: Engine):
    """Создать все таблицы"""
    # Регистрация моделей в метаданных
    from photoshare.models import database  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
