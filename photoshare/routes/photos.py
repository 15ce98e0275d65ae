from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from sqlalchemy.orm import Session

from photoshare.config.database import get_db
from photoshare.models.database import ProcessingStatus
from photoshare.models.photo import UploadResponse, PhotoListResponse, SearchResponse
from photoshare.routes.dependencies import get_photo_service, get_search_service
from photoshare.routes.errors import handle_api_error
from photoshare.services.photo_service import PhotoService
from photoshare.services.search_service import GuestSearchService

router = APIRouter(prefix="/api/photos", tags=["photos"])


@router.post("/upload/{event_id}", response_model=UploadResponse, status_code=201)
async def upload_photos(
        event_id: int,
        photos: Optional[List[UploadFile]] = File(None),
        db: Session = Depends(get_db),
        photo_service: PhotoService = Depends(get_photo_service)
):
    """Загрузить пакет фотографий (до 50 файлов) в событие"""
    try:
        batch = await photo_service.upload_batch(db, event_id, photos)
        accepted = batch['photos']
        return UploadResponse(
            message=f"{len(accepted)} photos uploaded successfully",
            uploadBatch=batch['upload_batch'],
            photos=accepted,
            results=batch['results'],
        )

    except Exception as e:
        raise handle_api_error(e, "Failed to upload photos")


@router.get("/event/{event_id}", response_model=PhotoListResponse)
async def list_event_photos(
        event_id: int,
        status: Optional[ProcessingStatus] = None,
        limit: int = Query(50, ge=1, le=500),
        offset: int = Query(0, ge=0),
        db: Session = Depends(get_db),
        photo_service: PhotoService = Depends(get_photo_service)
):
    try:
        return photo_service.list_event_photos(
            db,
            event_id,
            status=status.value if status else None,
            limit=limit,
            offset=offset
        )

    except Exception as e:
        raise handle_api_error(e, "Failed to fetch photos")


@router.post("/search/{event_slug}", response_model=SearchResponse)
async def search_photos(
        event_slug: str,
        request: Request,
        guestPhoto: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        search_service: GuestSearchService = Depends(get_search_service)
):
    """Поиск фотографий гостя по селфи"""
    try:
        ip_address = request.client.host if request.client else None
        result = await search_service.search(db, event_slug, guestPhoto, ip_address=ip_address)
        return SearchResponse(
            searchId=result['search_id'],
            message="Face recognition processing started",
            matches=result['matches'],
        )

    except Exception as e:
        raise handle_api_error(e, "Search failed")
