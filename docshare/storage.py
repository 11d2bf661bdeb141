import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

from fastapi import UploadFile

from docshare.config import ALLOWED_MIME_TYPES, MAX_FILE_SIZE
from docshare.errors import ValidationError
from docshare.utils import generate_stored_name

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class StoredFile:
    filename: str
    path: str
    size: int
    mime_type: str


class FileStorage:
    """Хранение загруженных файлов на диске"""

    def __init__(
        self,
        upload_dir: str,
        max_file_size: int = MAX_FILE_SIZE,
        allowed_types: Optional[Sequence[str]] = ALLOWED_MIME_TYPES,
    ):
        self.upload_dir = os.path.abspath(upload_dir)
        self.max_file_size = max_file_size
        self.allowed_types = allowed_types

    def save(self, upload: UploadFile) -> StoredFile:
        """Сохраняет загруженный файл и возвращает его параметры.

        Поток читается блоками и не дочитывается после превышения лимита.
        При любой ошибке частично записанный файл удаляется.
        """
        mime_type = upload.content_type or "application/octet-stream"
        if self.allowed_types is not None and mime_type not in self.allowed_types:
            raise ValidationError(f"File type not allowed: {mime_type}")

        # Создаем директорию для загрузок, если её нет
        os.makedirs(self.upload_dir, exist_ok=True)

        stored_name = generate_stored_name(upload.filename)
        file_path = os.path.join(self.upload_dir, stored_name)
        size = 0
        try:
            with open(file_path, "wb") as buffer:
                while True:
                    chunk = upload.file.read(min(CHUNK_SIZE, self.max_file_size - size + 1))
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise ValidationError(f"File too large: limit is {self.max_file_size} bytes")
                    buffer.write(chunk)
        except Exception:
            self.remove(file_path)
            raise

        return StoredFile(filename=stored_name, path=file_path, size=size, mime_type=mime_type)

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def remove(self, path: str) -> bool:
        """Удаляет файл с диска. Ошибки только логируются"""
        try:
            if os.path.exists(path):
                os.remove(path)
                return True
        except OSError as e:
            logger.warning("Failed to delete stored file %s: %s", path, e)
        return False
