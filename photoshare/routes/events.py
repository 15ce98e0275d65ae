from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from photoshare.config.database import get_db
from photoshare.models.admin import TokenClaims
from photoshare.models.event import (
    EventCreate, EventUpdate, EventListResponse, EventResponse, EventCreatedResponse
)
from photoshare.routes.dependencies import get_event_service, require_admin, optional_admin
from photoshare.routes.errors import handle_api_error
from photoshare.services.event_service import EventService

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=EventListResponse)
async def list_events(
        db: Session = Depends(get_db),
        event_service: EventService = Depends(get_event_service)
):
    """Все события со счетчиками (для админки)"""
    try:
        return EventListResponse(events=event_service.list_events(db))

    except Exception as e:
        raise handle_api_error(e, "Failed to fetch events")


@router.get("/{slug}", response_model=EventResponse)
async def get_event(
        slug: str,
        db: Session = Depends(get_db),
        event_service: EventService = Depends(get_event_service)
):
    """Публичная страница события"""
    try:
        return EventResponse(event=event_service.get_event_by_slug(db, slug))

    except Exception as e:
        raise handle_api_error(e, "Failed to fetch event")


@router.post("", response_model=EventCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
        event_data: EventCreate,
        claims: Optional[TokenClaims] = Depends(optional_admin),
        db: Session = Depends(get_db),
        event_service: EventService = Depends(get_event_service)
):
    try:
        admin_id = claims.adminId if claims else None
        event = event_service.create_event(db, event_data, admin_id=admin_id)
        return EventCreatedResponse(event=event)

    except Exception as e:
        raise handle_api_error(e, "Failed to create event")


@router.put("/{event_id}", response_model=EventCreatedResponse)
async def update_event(
        event_id: int,
        changes: EventUpdate,
        claims: TokenClaims = Depends(require_admin),
        db: Session = Depends(get_db),
        event_service: EventService = Depends(get_event_service)
):
    try:
        event = event_service.update_event(db, event_id, changes)
        return EventCreatedResponse(event=event)

    except Exception as e:
        raise handle_api_error(e, "Failed to update event")


@router.delete("/{event_id}")
async def delete_event(
        event_id: int,
        claims: TokenClaims = Depends(require_admin),
        db: Session = Depends(get_db),
        event_service: EventService = Depends(get_event_service)
):
    try:
        event_service.delete_event(db, event_id)
        return {"success": True, "message": "Event deleted"}

    except Exception as e:
        raise handle_api_error(e, "Failed to delete event")
