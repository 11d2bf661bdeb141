import logging
from datetime import timedelta
from typing import Callable, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from docshare.models import Document
from docshare.storage import FileStorage, StoredFile
from docshare.utils import utcnow

logger = logging.getLogger(__name__)

RECENT_UPLOADS_DAYS = 7


class DocumentService:
    """Хранилище метаданных документов. Удаление мягкое (is_deleted)"""

    def __init__(self, db: Session, storage: Optional[FileStorage] = None, clock: Callable = utcnow):
        self.db = db
        self.storage = storage
        self.clock = clock

    def _visible(self):
        return self.db.query(Document).filter(Document.is_deleted.is_(False))

    def find(self, document_id: int, owner_id: int) -> Optional[Document]:
        """Документ владельца (не удаленный)"""
        return self._visible().filter(Document.id == document_id, Document.owner_id == owner_id).first()

    def exists(self, document_id: int, owner_id: int) -> bool:
        return self.find(document_id, owner_id) is not None

    def get(self, document_id: int) -> Optional[Document]:
        """Документ по id без проверки владельца (для доступа по ссылке)"""
        return self._visible().filter(Document.id == document_id).first()

    def create(
        self,
        owner_id: int,
        stored: StoredFile,
        original_filename: str,
        description: Optional[str] = None,
    ) -> Document:
        document = Document(
            owner_id=owner_id,
            filename=stored.filename,
            original_filename=original_filename,
            file_path=stored.path,
            file_size=stored.size,
            mime_type=stored.mime_type,
            description=description or None,
        )
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)
        logger.info("Document %s uploaded by user %s (%d bytes)", document.id, owner_id, document.file_size)
        return document

    def list_for_owner(self, owner_id: int) -> List[Document]:
        return (
            self._visible()
            .filter(Document.owner_id == owner_id)
            .order_by(Document.created_at.desc(), Document.id.desc())
            .all()
        )

    def update(self, document_id: int, owner_id: int, description: Optional[str]) -> Optional[Document]:
        """Обновляет описание. None в description оставляет старое значение"""
        document = self.find(document_id, owner_id)
        if not document:
            return None
        if description is not None:
            document.description = description
            self.db.commit()
            self.db.refresh(document)
        return document

    def delete(self, document_id: int, owner_id: int) -> bool:
        """Мягкое удаление; файл на диске удаляется по возможности"""
        document = self.find(document_id, owner_id)
        if not document:
            return False

        document.is_deleted = True
        self.db.commit()
        logger.info("Document %s marked deleted by user %s", document_id, owner_id)

        # Запись в БД уже помечена удаленной, ошибка здесь ее не откатывает
        if self.storage is not None:
            self.storage.remove(document.file_path)
        return True

    def stats(self, owner_id: int) -> dict:
        since = self.clock() - timedelta(days=RECENT_UPLOADS_DAYS)
        total, total_size, recent = (
            self.db.query(
                func.count(Document.id),
                func.coalesce(func.sum(Document.file_size), 0),
                func.coalesce(func.sum(case((Document.created_at > since, 1), else_=0)), 0),
            )
            .filter(Document.owner_id == owner_id, Document.is_deleted.is_(False))
            .one()
        )
        return {
            "totalDocuments": int(total),
            "totalSize": int(total_size),
            "recentUploads": int(recent),
        }
