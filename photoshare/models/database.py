import enum

from sqlalchemy import (
    Column, Integer, BigInteger, String, Text, Date, Boolean, DateTime, LargeBinary, ForeignKey
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from photoshare.config.database import Base


class ProcessingStatus(str, enum.Enum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    events = relationship("Event", back_populates="admin")

    def __repr__(self):
        return f"<Admin id={self.id} username={self.username}>"


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    event_name = Column(String(255), nullable=False)
    event_slug = Column(String(255), unique=True, nullable=False, index=True)
    event_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    admin_id = Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    admin = relationship("Admin", back_populates="events")
    # Фотографии и поиски удаляются вместе с событием
    photos = relationship("Photo", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)
    searches = relationship("GuestSearch", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Event id={self.id} slug={self.event_slug}>"


class Photo(Base):
    __tablename__ = "photos"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = Column(String(255), nullable=False, unique=True)
    original_filename = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(BigInteger, nullable=False, default=0)
    mime_type = Column(String(100), nullable=False)
    upload_batch = Column(String(64), nullable=False, index=True)
    processing_status = Column(String(20), nullable=False, default=ProcessingStatus.UPLOADED.value)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    event = relationship("Event", back_populates="photos")
    face_encodings = relationship(
        "FaceEncoding", back_populates="photo", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<Photo id={self.id} filename={self.filename}>"


class FaceEncoding(Base):
    """Эмбеддинг лица. Заполняется внешним конвейером распознавания."""
    __tablename__ = "face_encodings"

    id = Column(Integer, primary_key=True, index=True)
    photo_id = Column(Integer, ForeignKey("photos.id", ondelete="CASCADE"), nullable=False, index=True)
    encoding = Column(LargeBinary, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    photo = relationship("Photo", back_populates="face_encodings")


class GuestSearch(Base):
    __tablename__ = "guest_searches"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_photo_filename = Column(String(255), nullable=False)
    matches_found = Column(Integer, nullable=False, default=0)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="searches")
