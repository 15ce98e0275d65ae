from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field

from photoshare.models.database import ProcessingStatus


class Photo(BaseModel):
    id: int
    event_id: int
    filename: str
    original_filename: str
    file_path: str
    file_size: int
    mime_type: str
    upload_batch: str
    processing_status: ProcessingStatus
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        use_enum_values = True


class PhotoWithFaces(Photo):
    face_count: int = 0


class UploadItemResult(BaseModel):
    """Итог обработки одного файла из пакета"""
    original_filename: str
    status: str  # accepted | rejected
    reason: Optional[str] = None
    photo_id: Optional[int] = None


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    uploadBatch: str
    photos: List[Photo]
    results: List[UploadItemResult]


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int
    total_matching: int


class PhotoListResponse(BaseModel):
    photos: List[PhotoWithFaces]
    pagination: Pagination


class SearchMatch(BaseModel):
    photo_id: int
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class SearchResponse(BaseModel):
    success: bool = True
    searchId: int
    message: str
    matches: List[SearchMatch] = []
