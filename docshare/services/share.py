import logging
from dataclasses import dataclass
from typing import Optional

from docshare.errors import AccessDenied, NotFoundOrForbidden, StoredFileMissing
from docshare.models import AccessType, Document, SharedLink
from docshare.services.links import LINK_NOT_FOUND, MAX_VIEWS_REACHED, LinkService
from docshare.storage import FileStorage
from docshare.utils import is_view_limit_reached

logger = logging.getLogger(__name__)

DOWNLOAD_NOT_ALLOWED = "Download not allowed for this link"
FILE_NOT_FOUND = "File not found on server"


@dataclass
class ShareAccess:
    link: SharedLink
    document: Document
    action: AccessType


class ShareService:
    """Публичный доступ к документу по токену: проверка, действие, запись в журнал"""

    def __init__(self, links: LinkService, storage: FileStorage):
        self.links = links
        self.storage = storage

    def access(
        self,
        token: str,
        password: Optional[str],
        action: AccessType,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> ShareAccess:
        action = AccessType(action)
        verification = self.links.verify_access(token, password)

        if not verification.valid:
            # Неудачную попытку можно записать только если ссылка найдена
            if verification.link is not None:
                self.links.record_access(
                    verification.link.id, ip_address, user_agent, AccessType.FAILED_PASSWORD, success=False
                )
            logger.warning("Shared access denied: %s", verification.reason)
            raise AccessDenied(verification.reason)

        link, document = verification.link, verification.document

        if action == AccessType.DOWNLOAD and not link.allow_download:
            raise AccessDenied(DOWNLOAD_NOT_ALLOWED)

        if not self.storage.exists(document.file_path):
            logger.warning("Document %s is missing on disk: %s", document.id, document.file_path)
            raise StoredFileMissing(FILE_NOT_FOUND)

        if not self.links.record_access(link.id, ip_address, user_agent, action, success=True):
            raise AccessDenied(MAX_VIEWS_REACHED)

        return ShareAccess(link=link, document=document, action=action)

    def status(self, token: str) -> dict:
        """Состояние ссылки без записи в журнал"""
        link = self.links.get_link_by_token(token)
        if not link:
            raise NotFoundOrForbidden(LINK_NOT_FOUND)

        expired = self.links.is_expired(link)
        limit_reached = is_view_limit_reached(link.view_count, link.max_views)
        return {
            "valid": not expired and not limit_reached,
            "requiresPassword": link.password_hash is not None,
            "expiresAt": link.expires_at,
            "viewCount": link.view_count,
            "maxViews": link.max_views,
            "allowDownload": link.allow_download,
        }
