import re
from typing import List, Optional, Dict, Any, Sequence, Tuple
from pathlib import Path

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


class FileValidator:
    """Валидатор для файлов"""

    @staticmethod
    def validate_content_type(content_type: Optional[str]) -> bool:
        """Принимаются только image/* типы"""
        if not content_type:
            return False
        return content_type.lower().startswith('image/')

    @staticmethod
    def validate_file_size(size: Optional[int], max_size: int) -> bool:
        """Валидация размера файла. Неизвестный размер проверяется при записи."""
        if size is None:
            return True
        return size <= max_size

    @staticmethod
    def safe_extension(filename: Optional[str]) -> str:
        """Расширение исходного файла в нижнем регистре"""
        if not filename:
            return ''
        extension = Path(filename).suffix.lower()
        if not re.fullmatch(r'\.[a-z0-9]{1,10}', extension):
            return ''
        return extension


class EventValidator:
    """Валидатор для данных о событиях"""

    @staticmethod
    def validate_event_name(name: Optional[str]) -> Dict[str, Any]:
        result = {
            'is_valid': True,
            'errors': []
        }

        if not name or len(name.strip()) == 0:
            result['is_valid'] = False
            result['errors'].append('Event name is required')
            return result

        if len(name.strip()) > 255:
            result['is_valid'] = False
            result['errors'].append('Event name is too long (max 255 characters)')

        return result

    @staticmethod
    def validate_slug(slug: Optional[str]) -> Dict[str, Any]:
        result = {
            'is_valid': True,
            'errors': []
        }

        if not slug:
            result['is_valid'] = False
            result['errors'].append('Event slug is required')
            return result

        if len(slug) > 255:
            result['is_valid'] = False
            result['errors'].append('Event slug is too long (max 255 characters)')

        if not SLUG_PATTERN.match(slug):
            result['is_valid'] = False
            result['errors'].append(
                'Event slug may only contain lowercase letters, digits and single hyphens'
            )

        return result


def validate_upload_batch(
    files: Sequence[Tuple[Optional[str], Optional[str], Optional[int]]],
    max_files: int,
    max_size: int
) -> Dict[str, Any]:
    """Комплексная валидация пакета файлов: (имя, content-type, размер)"""
    result = {
        'is_valid': True,
        'errors': []
    }

    if not files:
        result['is_valid'] = False
        result['errors'].append('No files uploaded')
        return result

    if len(files) > max_files:
        result['is_valid'] = False
        result['errors'].append(f'Too many files. Maximum per upload: {max_files}')
        return result

    max_size_mb = max_size / (1024 * 1024)
    for filename, content_type, size in files:
        label = filename or '<unnamed>'

        if not FileValidator.validate_content_type(content_type):
            result['is_valid'] = False
            result['errors'].append(f'{label}: only image files are allowed')

        if not FileValidator.validate_file_size(size, max_size):
            result['is_valid'] = False
            result['errors'].append(f'{label}: file is larger than {max_size_mb:.1f} MB')

    return result


def validate_probe_image(filename: Optional[str], content_type: Optional[str]) -> List[str]:
    """Проверка фото гостя перед поиском"""
    errors = []
    if not filename:
        errors.append('No photo uploaded')
    elif not FileValidator.validate_content_type(content_type):
        errors.append('Only image files are allowed')
    return errors
