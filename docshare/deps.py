from fastapi import Depends, Request
from sqlalchemy.orm import Session

from docshare.database import get_db
from docshare.services.auth import AuthService
from docshare.services.documents import DocumentService
from docshare.services.links import LinkService
from docshare.services.share import ShareService
from docshare.storage import FileStorage


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_document_service(
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> DocumentService:
    return DocumentService(db, storage)


def get_link_service(
    db: Session = Depends(get_db),
    documents: DocumentService = Depends(get_document_service),
) -> LinkService:
    return LinkService(db, documents)


def get_share_service(
    links: LinkService = Depends(get_link_service),
    storage: FileStorage = Depends(get_storage),
) -> ShareService:
    return ShareService(links, storage)
