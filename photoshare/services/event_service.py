from typing import List, Optional, Dict, Any
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import structlog

from photoshare.models.database import (
    Admin as AdminDB, Event as EventDB, Photo as PhotoDB, GuestSearch as GuestSearchDB, ProcessingStatus
)
from photoshare.models.event import Event, EventCreate, EventUpdate, EventWithCounts, PublicEvent
from photoshare.services.file_service import FileService
from photoshare.utils.exceptions import (
    AdminNotFoundError, ConflictError, EventNotFoundError, DatabaseError, InvalidInputError
)
from photoshare.utils.validators import EventValidator

logger = structlog.get_logger()


def _photo_count():
    return (
        select(func.count(PhotoDB.id))
        .where(PhotoDB.event_id == EventDB.id)
        .correlate(EventDB)
        .scalar_subquery()
    )


def _processed_count():
    return (
        select(func.count(PhotoDB.id))
        .where(
            PhotoDB.event_id == EventDB.id,
            PhotoDB.processing_status == ProcessingStatus.READY.value
        )
        .correlate(EventDB)
        .scalar_subquery()
    )


def _search_count():
    return (
        select(func.count(GuestSearchDB.id))
        .where(GuestSearchDB.event_id == EventDB.id)
        .correlate(EventDB)
        .scalar_subquery()
    )


class EventService:
    """Сервис для работы с событиями"""

    def __init__(self, file_service: FileService):
        self.file_service = file_service

    def list_events(self, db: Session) -> List[EventWithCounts]:
        """Все события со счетчиками, новые первыми"""
        rows = db.query(
            EventDB,
            _photo_count().label("photo_count"),
            _processed_count().label("processed_photos"),
            _search_count().label("total_searches"),
        ).order_by(EventDB.created_at.desc(), EventDB.id.desc()).all()

        events = []
        for event, photo_count, processed_photos, total_searches in rows:
            data = Event.model_validate(event).model_dump()
            events.append(EventWithCounts(
                **data,
                photo_count=photo_count or 0,
                processed_photos=processed_photos or 0,
                total_searches=total_searches or 0,
            ))
        return events

    def get_event(self, db: Session, event_id: int) -> EventDB:
        event = db.query(EventDB).filter(EventDB.id == event_id).first()
        if not event:
            raise EventNotFoundError("Event not found")
        return event

    def get_active_event_by_slug(self, db: Session, slug: str) -> EventDB:
        event = db.query(EventDB).filter(
            EventDB.event_slug == slug,
            EventDB.is_active.is_(True)
        ).first()
        if not event:
            raise EventNotFoundError("Event not found")
        return event

    def get_event_by_slug(self, db: Session, slug: str) -> PublicEvent:
        """Публичное представление активного события, без admin_id"""
        row = db.query(
            EventDB,
            _photo_count().label("photo_count"),
            _processed_count().label("processed_photos"),
        ).filter(
            EventDB.event_slug == slug,
            EventDB.is_active.is_(True)
        ).first()

        if not row:
            raise EventNotFoundError("Event not found")

        event, photo_count, processed_photos = row
        data = Event.model_validate(event).model_dump(exclude={"admin_id"})
        return PublicEvent(
            **data,
            photo_count=photo_count or 0,
            processed_photos=processed_photos or 0,
        )

    def create_event(self, db: Session, event_data: EventCreate, admin_id: Optional[int] = None) -> Event:
        """Создать событие. Уникальность slug обеспечивает ограничение БД."""
        errors = (
            EventValidator.validate_event_name(event_data.event_name)['errors']
            + EventValidator.validate_slug(event_data.event_slug)['errors']
        )
        if errors:
            raise InvalidInputError('; '.join(errors))

        if admin_id is not None and db.get(AdminDB, admin_id) is None:
            logger.warning("Event creation with token of missing admin", admin_id=admin_id)
            raise AdminNotFoundError("Admin not found")

        db_event = EventDB(
            event_name=event_data.event_name.strip(),
            event_slug=event_data.event_slug,
            event_date=event_data.event_date,
            description=event_data.description,
            admin_id=admin_id,
        )
        try:
            db.add(db_event)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if 'event_slug' not in str(e.orig):
                logger.error("Failed to create event", error=str(e))
                raise DatabaseError(f"Failed to create event: {e.orig}")
            logger.info("Duplicate event slug rejected", event_slug=event_data.event_slug)
            raise ConflictError("Event slug already exists")
        except Exception as e:
            db.rollback()
            logger.error("Failed to create event", error=str(e))
            raise DatabaseError(f"Failed to create event: {e}")

        db.refresh(db_event)
        logger.info("Event created", event_id=db_event.id, event_slug=db_event.event_slug, admin_id=admin_id)
        return Event.model_validate(db_event)

    def update_event(self, db: Session, event_id: int, changes: EventUpdate) -> Event:
        """Обновить событие. Slug неизменяем."""
        db_event = self.get_event(db, event_id)

        updates: Dict[str, Any] = changes.model_dump(exclude_unset=True)
        if "event_name" in updates:
            validation = EventValidator.validate_event_name(updates["event_name"])
            if not validation['is_valid']:
                raise InvalidInputError('; '.join(validation['errors']))
            updates["event_name"] = updates["event_name"].strip()
        if updates.get("is_active", True) is None:
            updates.pop("is_active")

        for field, value in updates.items():
            setattr(db_event, field, value)

        try:
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error("Failed to update event", error=str(e), event_id=event_id)
            raise DatabaseError(f"Failed to update event: {e}")

        db.refresh(db_event)
        logger.info("Event updated", event_id=event_id, fields=sorted(updates))
        return Event.model_validate(db_event)

    def delete_event(self, db: Session, event_id: int) -> None:
        """Удалить событие вместе с фотографиями и их файлами"""
        db_event = self.get_event(db, event_id)
        try:
            db.delete(db_event)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error("Failed to delete event", error=str(e), event_id=event_id)
            raise DatabaseError(f"Failed to delete event: {e}")

        try:
            self.file_service.delete_event_directory(event_id)
        except OSError as e:
            # Строки уже удалены; оставшиеся файлы подберет ручная очистка
            logger.error("Failed to delete event directory", error=str(e), event_id=event_id)

        logger.info("Event deleted", event_id=event_id)
