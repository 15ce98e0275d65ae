from typing import Optional, List
from datetime import date, datetime
from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    event_name: str = Field(..., min_length=1, max_length=255)
    event_slug: str = Field(..., min_length=1, max_length=255)
    event_date: Optional[date] = None
    description: Optional[str] = None


class EventUpdate(BaseModel):
    event_name: Optional[str] = Field(None, min_length=1, max_length=255)
    event_date: Optional[date] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class Event(BaseModel):
    id: int
    event_name: str
    event_slug: str
    event_date: Optional[date] = None
    description: Optional[str] = None
    admin_id: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventWithCounts(Event):
    photo_count: int = 0
    processed_photos: int = 0
    total_searches: int = 0


class PublicEvent(BaseModel):
    """Событие для гостей: без admin_id"""
    id: int
    event_name: str
    event_slug: str
    event_date: Optional[date] = None
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    photo_count: int = 0
    processed_photos: int = 0


class EventListResponse(BaseModel):
    events: List[EventWithCounts]


class EventResponse(BaseModel):
    event: PublicEvent


class EventCreatedResponse(BaseModel):
    success: bool = True
    event: Event
