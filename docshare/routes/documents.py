from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from docshare.deps import get_document_service, get_storage
from docshare.errors import NotFoundOrForbidden, ValidationError
from docshare.models import User
from docshare.schemas import (
    DocumentInfo,
    DocumentListResponse,
    DocumentMessageResponse,
    DocumentResponse,
    DocumentStats,
    DocumentStatsResponse,
    DocumentUpdate,
    MessageResponse,
)
from docshare.security import get_current_user
from docshare.services.documents import DocumentService
from docshare.storage import FileStorage

router = APIRouter(prefix="/api/documents", tags=["documents"])

DOCUMENT_NOT_FOUND = "Document not found"


@router.post("/upload", response_model=DocumentMessageResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    description: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
    storage: FileStorage = Depends(get_storage),
):
    """Загружает файл и создает документ"""
    if description is not None and len(description) > 500:
        raise ValidationError("Description must be at most 500 characters")

    stored = storage.save(file)
    try:
        document = documents.create(current_user.id, stored, file.filename or stored.filename, description)
    except Exception:
        # Файл без записи в БД никому не доступен
        storage.remove(stored.path)
        raise
    return DocumentMessageResponse(
        message="File uploaded successfully",
        document=DocumentInfo.from_document(document),
    )


@router.get("/", response_model=DocumentListResponse)
async def list_documents(
    current_user: User = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    """Список документов пользователя"""
    return DocumentListResponse(
        documents=[DocumentInfo.from_document(d) for d in documents.list_for_owner(current_user.id)]
    )


@router.get("/stats/summary", response_model=DocumentStatsResponse)
async def get_stats(
    current_user: User = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    return DocumentStatsResponse(stats=DocumentStats(**documents.stats(current_user.id)))


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    document = documents.find(document_id, current_user.id)
    if not document:
        raise NotFoundOrForbidden(DOCUMENT_NOT_FOUND)
    return DocumentResponse(document=DocumentInfo.from_document(document))


@router.patch("/{document_id}", response_model=DocumentMessageResponse)
async def update_document(
    document_id: int,
    update: DocumentUpdate,
    current_user: User = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    """Обновляет описание документа"""
    document = documents.update(document_id, current_user.id, update.description)
    if not document:
        raise NotFoundOrForbidden(DOCUMENT_NOT_FOUND)
    return DocumentMessageResponse(
        message="Document updated successfully",
        document=DocumentInfo.from_document(document),
    )


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    documents: DocumentService = Depends(get_document_service),
):
    """Удаляет документ (мягко)"""
    if not documents.delete(document_id, current_user.id):
        raise NotFoundOrForbidden(DOCUMENT_NOT_FOUND)
    return MessageResponse(message="Document deleted successfully")
