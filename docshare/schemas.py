from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from docshare.models import AccessLog, Document, SharedLink


class CamelModel(BaseModel):
    """Схемы API в camelCase (как ожидает фронтенд)"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ---------- Документы ----------


class DocumentInfo(CamelModel):
    id: int
    filename: str
    size: int
    type: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Document) -> "DocumentInfo":
        return cls(
            id=document.id,
            filename=document.original_filename,
            size=document.file_size,
            type=document.mime_type,
            description=document.description,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class DocumentUpdate(BaseModel):
    description: Optional[str] = Field(None, max_length=500)


class DocumentResponse(BaseModel):
    document: DocumentInfo


class DocumentMessageResponse(BaseModel):
    message: str
    document: DocumentInfo


class DocumentListResponse(BaseModel):
    documents: List[DocumentInfo]


class DocumentStats(CamelModel):
    total_documents: int
    total_size: int
    recent_uploads: int


class DocumentStatsResponse(BaseModel):
    stats: DocumentStats


# ---------- Ссылки ----------


class LinkCreate(CamelModel):
    document_id: int = Field(..., gt=0)
    password: Optional[str] = Field(None, min_length=4, max_length=100)
    # Максимум год, в часах
    expires_in: Optional[int] = Field(None, gt=0, le=8760)
    max_views: Optional[int] = Field(None, gt=0)
    allow_download: Optional[bool] = None


class LinkCreated(CamelModel):
    id: int
    token: str
    share_url: str
    has_password: bool
    expires_at: Optional[datetime] = None
    max_views: Optional[int] = None
    allow_download: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_link(cls, link: SharedLink, share_url: str) -> "LinkCreated":
        return cls(
            id=link.id,
            token=link.token,
            share_url=share_url,
            has_password=link.password_hash is not None,
            expires_at=link.expires_at,
            max_views=link.max_views,
            allow_download=link.allow_download,
            created_at=link.created_at,
        )


class LinkCreateResponse(BaseModel):
    message: str
    link: LinkCreated


class LinkInfo(CamelModel):
    id: int
    document_id: int
    filename: str
    file_size: int
    mime_type: str
    token: str
    has_password: bool
    expires_at: Optional[datetime] = None
    max_views: Optional[int] = None
    view_count: int
    allow_download: bool
    created_at: Optional[datetime] = None
    last_accessed: Optional[datetime] = None
    is_expired: bool


class LinkListResponse(BaseModel):
    links: List[LinkInfo]


class AccessLogEntry(BaseModel):
    id: int
    link_id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    access_type: str
    success: bool
    accessed_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_log(cls, entry: AccessLog) -> "AccessLogEntry":
        return cls.model_validate(entry)


class AccessLogListResponse(BaseModel):
    logs: List[AccessLogEntry]


class MessageResponse(BaseModel):
    message: str


# ---------- Публичный доступ ----------


class ShareAccessRequest(BaseModel):
    password: Optional[str] = None


class SharedDocument(CamelModel):
    filename: str
    size: int
    type: str
    allow_download: bool
    view_count: int


class SharedDocumentResponse(BaseModel):
    document: SharedDocument


class LinkStatus(CamelModel):
    valid: bool
    requires_password: bool
    expires_at: Optional[datetime] = None
    view_count: int
    max_views: Optional[int] = None
    allow_download: bool
