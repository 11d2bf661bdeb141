from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse

from docshare.deps import get_share_service
from docshare.models import AccessType
from docshare.schemas import LinkStatus, ShareAccessRequest, SharedDocument, SharedDocumentResponse
from docshare.services.share import ShareService

# Публичные роуты, авторизация не нужна
router = APIRouter(prefix="/api/share", tags=["share"])


def client_info(request: Request) -> tuple[str, str]:
    ip_address = request.client.host if request.client else "unknown"
    user_agent = request.headers.get("user-agent", "unknown")
    return ip_address, user_agent


@router.get("/{token}/status", response_model=LinkStatus)
async def check_link_status(token: str, share: ShareService = Depends(get_share_service)):
    """Состояние ссылки без учета просмотра"""
    return LinkStatus(**share.status(token))


@router.post("/{token}")
async def access_shared_document(
    token: str,
    request: Request,
    body: Optional[ShareAccessRequest] = None,
    action: Literal["view", "download"] = Query("view"),
    share: ShareService = Depends(get_share_service),
):
    """Просмотр метаданных или скачивание документа по ссылке"""
    ip_address, user_agent = client_info(request)
    password = body.password if body else None

    result = share.access(token, password, AccessType(action), ip_address, user_agent)
    document = result.document

    if result.action == AccessType.DOWNLOAD:
        return FileResponse(
            path=document.file_path,
            filename=document.original_filename,
            media_type=document.mime_type,
        )

    return SharedDocumentResponse(
        document=SharedDocument(
            filename=document.original_filename,
            size=document.file_size,
            type=document.mime_type,
            allow_download=result.link.allow_download,
            view_count=result.link.view_count,
        )
    )
