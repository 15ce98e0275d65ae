import time
from typing import List, Optional, Dict, Any

import structlog
from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from photoshare.models.database import Photo as PhotoDB, FaceEncoding as FaceEncodingDB, ProcessingStatus
from photoshare.models.photo import Photo, PhotoWithFaces, UploadItemResult
from photoshare.services.event_service import EventService
from photoshare.services.file_service import FileService
from photoshare.utils.exceptions import FileValidationError, PhotoShareError
from photoshare.utils.validators import validate_upload_batch

logger = structlog.get_logger()


class PhotoService:
    """Загрузка пакетов фотографий и выдача списков фото события"""

    def __init__(
            self,
            file_service: FileService,
            event_service: EventService,
            max_files_per_upload: int = 50
    ):
        self.file_service = file_service
        self.event_service = event_service
        self.max_files_per_upload = max_files_per_upload

    @staticmethod
    def new_batch_id() -> str:
        return f"batch-{int(time.time() * 1000)}"

    async def upload_batch(
            self,
            db: Session,
            event_id: int,
            uploads: Optional[List[UploadFile]]
    ) -> Dict[str, Any]:
        """Принять пакет файлов для события.

        Пакет целиком отклоняется, если событие не существует или хотя бы один
        файл не проходит проверку типа/размера. Ошибки записи отдельных файлов
        не прерывают пакет и попадают в результат как ``rejected``.
        """
        # Событие проверяется до любых записей на диск
        self.event_service.get_event(db, event_id)

        uploads = [u for u in (uploads or []) if u is not None]
        named = [u for u in uploads if u.filename]
        validation = validate_upload_batch(
            [(u.filename, u.content_type, getattr(u, 'size', None)) for u in named],
            max_files=self.max_files_per_upload,
            max_size=self.file_service.max_file_size,
        )
        if not validation['is_valid']:
            raise FileValidationError('; '.join(validation['errors']))

        upload_batch = self.new_batch_id()
        photos: List[Photo] = []
        results: List[UploadItemResult] = []

        for upload in uploads:
            if not upload.filename:
                results.append(UploadItemResult(
                    original_filename='',
                    status='rejected',
                    reason='missing filename',
                ))
                continue
            outcome = await self._ingest_file(db, event_id, upload_batch, upload)
            results.append(outcome['result'])
            if outcome['photo'] is not None:
                photos.append(outcome['photo'])

        logger.info("Upload batch processed",
                    event_id=event_id,
                    upload_batch=upload_batch,
                    submitted=len(uploads),
                    accepted=len(photos))

        return {
            'upload_batch': upload_batch,
            'photos': photos,
            'results': results,
        }

    async def _ingest_file(
            self,
            db: Session,
            event_id: int,
            upload_batch: str,
            upload: UploadFile
    ) -> Dict[str, Any]:
        """staging -> строка в БД -> перенос в каталог события -> commit"""
        staged = None
        final_path = None
        try:
            staged = await self.file_service.stage_upload(upload)
            final_path = self.file_service.final_path(event_id, staged['filename'])

            db_photo = PhotoDB(
                event_id=event_id,
                filename=staged['filename'],
                original_filename=staged['original_filename'],
                file_path=self.file_service.relative_path(final_path),
                file_size=staged['file_size'],
                mime_type=staged['mime_type'],
                upload_batch=upload_batch,
                processing_status=ProcessingStatus.UPLOADED.value,
            )
            db.add(db_photo)
            db.flush()

            self.file_service.promote(staged['staged_path'], event_id, staged['filename'])
            db.commit()
            db.refresh(db_photo)

            logger.info("Photo uploaded",
                        event_id=event_id,
                        photo_id=db_photo.id,
                        filename=db_photo.filename)

            photo = Photo.model_validate(db_photo)
            return {
                'photo': photo,
                'result': UploadItemResult(
                    original_filename=upload.filename,
                    status='accepted',
                    photo_id=photo.id,
                ),
            }

        except Exception as e:
            db.rollback()
            if staged is not None:
                await self.file_service.delete_file(staged['staged_path'])
            if final_path is not None:
                await self.file_service.delete_file(final_path)

            reason = e.message if isinstance(e, PhotoShareError) else 'internal error'
            logger.error("Failed to ingest photo",
                         event_id=event_id,
                         original_filename=upload.filename,
                         error=str(e),
                         error_type=type(e).__name__)
            return {
                'photo': None,
                'result': UploadItemResult(
                    original_filename=upload.filename,
                    status='rejected',
                    reason=reason,
                ),
            }

    def list_event_photos(
            self,
            db: Session,
            event_id: int,
            status: Optional[str] = None,
            limit: int = 50,
            offset: int = 0
    ) -> Dict[str, Any]:
        """Фотографии события с количеством лиц, новые первыми"""
        face_count = (
            select(func.count(FaceEncodingDB.id))
            .where(FaceEncodingDB.photo_id == PhotoDB.id)
            .correlate(PhotoDB)
            .scalar_subquery()
        )

        query = db.query(PhotoDB, face_count.label("face_count")).filter(PhotoDB.event_id == event_id)
        count_query = db.query(func.count(PhotoDB.id)).filter(PhotoDB.event_id == event_id)
        if status:
            query = query.filter(PhotoDB.processing_status == status)
            count_query = count_query.filter(PhotoDB.processing_status == status)

        rows = query.order_by(
            PhotoDB.uploaded_at.desc(),
            PhotoDB.id.desc()
        ).limit(limit).offset(offset).all()

        photos = []
        for db_photo, faces in rows:
            data = Photo.model_validate(db_photo).model_dump()
            photos.append(PhotoWithFaces(**data, face_count=faces or 0))

        return {
            'photos': photos,
            'pagination': {
                'limit': limit,
                'offset': offset,
                'total': len(photos),
                'total_matching': count_query.scalar() or 0,
            }
        }
