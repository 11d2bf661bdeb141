"""Жизненный цикл ссылок: выпуск токена, проверка ограничений, учет доступа.

Проверка (verify_access) только читает данные и может вызываться сколько
угодно раз. Расход просмотра (record_access) отделен от проверки и
увеличивает счетчик одним условным UPDATE, поэтому параллельные запросы
не могут превысить max_views.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docshare.errors import NotFoundOrForbidden, ValidationError
from docshare.models import USER_AGENT_MAX_LENGTH, AccessLog, AccessType, Document, SharedLink
from docshare.security import get_password_hash, verify_password
from docshare.services.documents import DocumentService
from docshare.utils import generate_link_token, is_link_expired, is_view_limit_reached, parse_expires_at, utcnow

logger = logging.getLogger(__name__)

LINK_NOT_FOUND = "Link not found"
LINK_EXPIRED = "Link has expired"
MAX_VIEWS_REACHED = "Maximum views reached"
PASSWORD_REQUIRED = "Password required"
INVALID_PASSWORD = "Invalid password"
DOCUMENT_NOT_FOUND = "Document not found"

ACCESS_LOG_LIMIT = 100

# Типы доступа, которые расходуют просмотр
COUNTED_ACCESS_TYPES = (AccessType.VIEW, AccessType.DOWNLOAD)


@dataclass
class LinkVerification:
    valid: bool
    reason: Optional[str] = None
    link: Optional[SharedLink] = None
    document: Optional[Document] = None


class LinkService:
    def __init__(
        self,
        db: Session,
        documents: Optional[DocumentService] = None,
        clock: Callable = utcnow,
    ):
        self.db = db
        self.documents = documents or DocumentService(db, clock=clock)
        self.clock = clock

    def create_link(
        self,
        document_id: int,
        owner_id: int,
        password: Optional[str] = None,
        expires_in_hours: Optional[int] = None,
        max_views: Optional[int] = None,
        allow_download: bool = True,
    ) -> SharedLink:
        """Создает ссылку на документ владельца"""
        if not self.documents.exists(document_id, owner_id):
            raise NotFoundOrForbidden("Document not found or access denied")

        if max_views is not None and max_views <= 0:
            raise ValidationError("maxViews must be a positive integer")

        link = SharedLink(
            document_id=document_id,
            owner_id=owner_id,
            token=generate_link_token(),
            password_hash=get_password_hash(password) if password else None,
            expires_at=parse_expires_at(expires_in_hours, self.clock()),
            max_views=max_views,
            view_count=0,
            allow_download=True if allow_download is None else allow_download,
            is_active=True,
        )
        self.db.add(link)
        self.db.commit()
        self.db.refresh(link)

        logger.info(
            "Link %s created for document %s (password=%s, expires_at=%s, max_views=%s)",
            link.id, document_id, link.password_hash is not None, link.expires_at, max_views,
        )
        return link

    def list_links(self, owner_id: int) -> List[Tuple[SharedLink, Document]]:
        """Активные ссылки пользователя вместе с документами"""
        return (
            self.db.query(SharedLink, Document)
            .join(Document, SharedLink.document_id == Document.id)
            .filter(SharedLink.owner_id == owner_id, SharedLink.is_active.is_(True))
            .order_by(SharedLink.created_at.desc(), SharedLink.id.desc())
            .all()
        )

    def get_link_by_token(self, token: str) -> Optional[SharedLink]:
        return (
            self.db.query(SharedLink)
            .filter(SharedLink.token == token, SharedLink.is_active.is_(True))
            .first()
        )

    def is_expired(self, link: SharedLink) -> bool:
        return is_link_expired(link.expires_at, self.clock())

    def verify_access(self, token: str, password: Optional[str] = None) -> LinkVerification:
        """Проверяет ограничения ссылки. Первая неудачная проверка определяет причину"""
        link = self.get_link_by_token(token)
        if not link:
            return LinkVerification(valid=False, reason=LINK_NOT_FOUND)

        if self.is_expired(link):
            return LinkVerification(valid=False, reason=LINK_EXPIRED, link=link)

        if is_view_limit_reached(link.view_count, link.max_views):
            return LinkVerification(valid=False, reason=MAX_VIEWS_REACHED, link=link)

        if link.password_hash:
            if not password:
                return LinkVerification(valid=False, reason=PASSWORD_REQUIRED, link=link)
            if not verify_password(password, link.password_hash):
                return LinkVerification(valid=False, reason=INVALID_PASSWORD, link=link)

        document = self.documents.get(link.document_id)
        if not document:
            return LinkVerification(valid=False, reason=DOCUMENT_NOT_FOUND, link=link)

        return LinkVerification(valid=True, link=link, document=document)

    def record_access(
        self,
        link_id: int,
        ip_address: Optional[str],
        user_agent: Optional[str],
        access_type: AccessType,
        success: bool = True,
    ) -> bool:
        """Записывает попытку доступа и при успехе расходует просмотр.

        Запись в журнал и увеличение счетчика выполняются в одной транзакции.
        Возвращает True, только если просмотр засчитан.
        """
        access_type = AccessType(access_type)
        now = self.clock()
        entry = AccessLog(
            link_id=link_id,
            ip_address=ip_address,
            user_agent=user_agent[:USER_AGENT_MAX_LENGTH] if user_agent else user_agent,
            access_type=access_type.value,
            success=success,
            accessed_at=now,
        )

        counted = False
        try:
            self.db.add(entry)
            self.db.flush()

            if success and access_type in COUNTED_ACCESS_TYPES:
                updated = (
                    self.db.query(SharedLink)
                    .filter(
                        SharedLink.id == link_id,
                        or_(SharedLink.max_views.is_(None), SharedLink.view_count < SharedLink.max_views),
                    )
                    .update(
                        {
                            SharedLink.view_count: SharedLink.view_count + 1,
                            SharedLink.last_accessed: now,
                        },
                        synchronize_session=False,
                    )
                )
                if updated:
                    counted = True
                else:
                    # Последний просмотр уже израсходован параллельным запросом
                    entry.success = False
                    logger.warning("Link %s: view limit reached while recording %s", link_id, access_type.value)

            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        return counted

    def deactivate_link(self, link_id: int, owner_id: int) -> bool:
        """Отключает ссылку владельца. Повторно включить нельзя"""
        updated = (
            self.db.query(SharedLink)
            .filter(
                SharedLink.id == link_id,
                SharedLink.owner_id == owner_id,
                SharedLink.is_active.is_(True),
            )
            .update({SharedLink.is_active: False}, synchronize_session=False)
        )
        self.db.commit()
        if updated:
            logger.info("Link %s deactivated by user %s", link_id, owner_id)
        return bool(updated)

    def get_access_logs(self, link_id: int, owner_id: int) -> List[AccessLog]:
        owned = (
            self.db.query(SharedLink.id)
            .filter(SharedLink.id == link_id, SharedLink.owner_id == owner_id)
            .first()
        )
        if not owned:
            raise NotFoundOrForbidden("Link not found or access denied")

        return (
            self.db.query(AccessLog)
            .filter(AccessLog.link_id == link_id)
            .order_by(AccessLog.accessed_at.desc(), AccessLog.id.desc())
            .limit(ACCESS_LOG_LIMIT)
            .all()
        )
