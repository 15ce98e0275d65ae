from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple, Dict, Any

import structlog
from fastapi import UploadFile
from sqlalchemy.orm import Session

from photoshare.models.database import GuestSearch as GuestSearchDB
from photoshare.models.photo import SearchMatch
from photoshare.services.event_service import EventService
from photoshare.services.file_service import FileService
from photoshare.utils.exceptions import InvalidInputError, DatabaseError
from photoshare.utils.validators import validate_probe_image

logger = structlog.get_logger()


class FaceMatcher(ABC):
    """Поиск фотографий события, на которых есть лицо с фото гостя"""

    @abstractmethod
    def match(self, probe_path: Path, event_id: int) -> List[Tuple[int, float]]:
        """Вернуть пары (photo_id, confidence)"""


class NullFaceMatcher(FaceMatcher):
    """Распознавание лиц не подключено: совпадений нет"""

    def match(self, probe_path: Path, event_id: int) -> List[Tuple[int, float]]:
        return []


class GuestSearchService:
    """Поиск гостя по селфи с записью в журнал поисков"""

    def __init__(
            self,
            file_service: FileService,
            event_service: EventService,
            matcher: Optional[FaceMatcher] = None
    ):
        self.file_service = file_service
        self.event_service = event_service
        self.matcher = matcher or NullFaceMatcher()

    async def search(
            self,
            db: Session,
            event_slug: str,
            probe: Optional[UploadFile],
            ip_address: Optional[str] = None
    ) -> Dict[str, Any]:
        if probe is None or not probe.filename:
            raise InvalidInputError('No photo uploaded')

        event = self.event_service.get_active_event_by_slug(db, event_slug)

        errors = validate_probe_image(probe.filename, probe.content_type)
        if errors:
            raise InvalidInputError('; '.join(errors))

        probe_path = await self.file_service.save_temp_file(probe)
        try:
            raw_matches = self.matcher.match(probe_path, event.id)
            matches = [
                SearchMatch(photo_id=photo_id, confidence=confidence)
                for photo_id, confidence in raw_matches
            ]

            search = GuestSearchDB(
                event_id=event.id,
                guest_photo_filename=probe_path.name,
                matches_found=len(matches),
                ip_address=ip_address,
            )
            try:
                db.add(search)
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error("Failed to record guest search", error=str(e), event_id=event.id)
                raise DatabaseError(f"Failed to record search: {e}")
            db.refresh(search)

            logger.info("Guest search recorded",
                        search_id=search.id,
                        event_id=event.id,
                        matches_found=search.matches_found)

            return {
                'search_id': search.id,
                'matches': matches,
            }

        finally:
            await self.file_service.delete_file(probe_path)
