from fastapi import APIRouter, Depends

from docshare.config import FRONTEND_URL
from docshare.deps import get_link_service
from docshare.errors import NotFoundOrForbidden
from docshare.models import User
from docshare.schemas import (
    AccessLogEntry,
    AccessLogListResponse,
    LinkCreate,
    LinkCreated,
    LinkCreateResponse,
    LinkInfo,
    LinkListResponse,
    MessageResponse,
)
from docshare.security import get_current_user
from docshare.services.links import LinkService

router = APIRouter(prefix="/api/links", tags=["links"])


def build_share_url(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/share/{token}"


@router.post("", response_model=LinkCreateResponse, status_code=201)
async def create_link(
    data: LinkCreate,
    current_user: User = Depends(get_current_user),
    links: LinkService = Depends(get_link_service),
):
    """Создает ссылку для документа"""
    link = links.create_link(
        document_id=data.document_id,
        owner_id=current_user.id,
        password=data.password,
        expires_in_hours=data.expires_in,
        max_views=data.max_views,
        allow_download=data.allow_download,
    )
    return LinkCreateResponse(
        message="Shareable link created successfully",
        link=LinkCreated.from_link(link, build_share_url(link.token)),
    )


@router.get("", response_model=LinkListResponse)
async def list_links(
    current_user: User = Depends(get_current_user),
    links: LinkService = Depends(get_link_service),
):
    """Активные ссылки пользователя"""
    result = []
    for link, document in links.list_links(current_user.id):
        result.append(LinkInfo(
            id=link.id,
            document_id=link.document_id,
            filename=document.original_filename,
            file_size=document.file_size,
            mime_type=document.mime_type,
            token=link.token,
            has_password=link.password_hash is not None,
            expires_at=link.expires_at,
            max_views=link.max_views,
            view_count=link.view_count,
            allow_download=link.allow_download,
            created_at=link.created_at,
            last_accessed=link.last_accessed,
            # Вычисляется при чтении, в БД не хранится
            is_expired=links.is_expired(link),
        ))
    return LinkListResponse(links=result)


@router.delete("/{link_id}", response_model=MessageResponse)
async def deactivate_link(
    link_id: int,
    current_user: User = Depends(get_current_user),
    links: LinkService = Depends(get_link_service),
):
    if not links.deactivate_link(link_id, current_user.id):
        raise NotFoundOrForbidden("Link not found")
    return MessageResponse(message="Link deactivated successfully")


@router.get("/{link_id}/logs", response_model=AccessLogListResponse)
async def get_link_logs(
    link_id: int,
    current_user: User = Depends(get_current_user),
    links: LinkService = Depends(get_link_service),
):
    """Журнал доступа к ссылке (последние 100 записей)"""
    entries = links.get_access_logs(link_id, current_user.id)
    return AccessLogListResponse(logs=[AccessLogEntry.from_log(e) for e in entries])
