import os
import shutil
import aiofiles
from pathlib import Path
from typing import Dict, Any
import structlog
from datetime import datetime
import time
import uuid

from fastapi import UploadFile

from photoshare.utils.exceptions import FileValidationError, FileStorageError
from photoshare.utils.validators import FileValidator

logger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024


class FileService:
    """Сервис для работы с файлами на диске.

    Раскладка каталога загрузок:
        events/{event_id}/  - фотографии события
        staging/            - файлы, для которых еще не записана строка в БД
        temp/               - фото гостей на время поиска
    """

    def __init__(self, upload_path: str, max_file_size: int):
        self.upload_path = Path(upload_path).resolve()
        self.max_file_size = max_file_size

        self._create_directories()

    def _create_directories(self):
        """Создать необходимые директории"""
        directories = [
            self.upload_path,
            self.upload_path / 'events',
            self.upload_path / 'staging',
            self.upload_path / 'temp'
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def generate_unique_filename(self, original_filename: str) -> str:
        """Имя файла: метка времени + случайный суффикс + исходное расширение"""
        extension = FileValidator.safe_extension(original_filename)
        timestamp = int(time.time() * 1000)
        unique_id = uuid.uuid4().hex[:8]
        return f"{timestamp}-{unique_id}{extension}"

    def event_directory(self, event_id: int) -> Path:
        return self.upload_path / 'events' / str(event_id)

    def relative_path(self, path: Path) -> str:
        return path.relative_to(self.upload_path).as_posix()

    async def _write_upload(self, upload: UploadFile, destination: Path) -> int:
        """Потоковая запись файла с контролем размера"""
        written = 0
        await upload.seek(0)
        try:
            async with aiofiles.open(destination, 'wb') as f:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_file_size:
                        raise FileValidationError(
                            f"File too large. Maximum size: "
                            f"{self.max_file_size / (1024 * 1024):.1f} MB"
                        )
                    await f.write(chunk)
        except FileValidationError:
            await self.delete_file(destination)
            raise
        except Exception as e:
            await self.delete_file(destination)
            logger.error("Failed to write file", error=str(e), destination=str(destination))
            raise FileStorageError(f"Failed to store file: {e}")

        return written

    async def stage_upload(self, upload: UploadFile) -> Dict[str, Any]:
        """Сохранить файл в staging до записи строки в БД"""
        filename = self.generate_unique_filename(upload.filename or '')
        staged_path = self.upload_path / 'staging' / filename

        size = await self._write_upload(upload, staged_path)

        logger.debug("File staged", filename=filename, size=size)
        return {
            'filename': filename,
            'original_filename': upload.filename,
            'staged_path': staged_path,
            'file_size': size,
            'mime_type': upload.content_type,
        }

    def final_path(self, event_id: int, filename: str) -> Path:
        return self.event_directory(event_id) / filename

    def promote(self, staged_path: Path, event_id: int, filename: str) -> Path:
        """Переместить файл из staging в каталог события"""
        destination_dir = self.event_directory(event_id)
        destination_dir.mkdir(parents=True, exist_ok=True)
        destination = destination_dir / filename
        try:
            os.replace(staged_path, destination)
        except OSError as e:
            logger.error("Failed to move staged file", error=str(e), filename=filename)
            raise FileStorageError(f"Failed to store file: {e}")
        return destination

    async def save_temp_file(self, upload: UploadFile) -> Path:
        """Сохранить временный файл (фото гостя)"""
        filename = self.generate_unique_filename(upload.filename or '')
        temp_path = self.upload_path / 'temp' / filename
        await self._write_upload(upload, temp_path)
        return temp_path

    async def delete_file(self, file_path) -> bool:
        """Удалить файл"""
        try:
            path = Path(file_path)
            if path.exists():
                path.unlink()
                logger.debug("File deleted", file_path=str(file_path))
                return True
            return False

        except Exception as e:
            logger.error("Failed to delete file", error=str(e), file_path=str(file_path))
            return False

    def delete_event_directory(self, event_id: int) -> None:
        directory = self.event_directory(event_id)
        if directory.exists():
            shutil.rmtree(directory)
            logger.info("Event directory deleted", event_id=event_id)

    async def cleanup_temp_files(self, older_than_hours: int = 24) -> int:
        """Очистить старые временные и незавершенные файлы"""
        deleted_count = 0
        cutoff_time = datetime.now().timestamp() - (older_than_hours * 3600)

        for directory in (self.upload_path / 'temp', self.upload_path / 'staging'):
            if not directory.exists():
                continue
            try:
                for file_path in directory.iterdir():
                    if file_path.is_file() and file_path.stat().st_mtime < cutoff_time:
                        if await self.delete_file(file_path):
                            deleted_count += 1
            except OSError as e:
                logger.error("Failed to cleanup temp files", error=str(e), directory=str(directory))

        logger.info("Temp files cleanup completed",
                    deleted_count=deleted_count,
                    older_than_hours=older_than_hours)

        return deleted_count
