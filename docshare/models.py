import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from docshare.database import Base


class AccessType(str, enum.Enum):
    VIEW = "view"
    DOWNLOAD = "download"
    FAILED_PASSWORD = "failed_password"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())
    last_login = Column(DateTime, nullable=True)


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    filename = Column(String(255), nullable=False, unique=True)  # имя на диске
    original_filename = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class SharedLink(Base):
    __tablename__ = "shared_links"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id"), nullable=False, index=True)
    # Дублирует documents.owner_id для быстрой проверки владельца
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    token = Column(String(64), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    expires_at = Column(DateTime, nullable=True)
    max_views = Column(Integer, nullable=True)
    view_count = Column(Integer, nullable=False, default=0)
    allow_download = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())
    last_accessed = Column(DateTime, nullable=True)


USER_AGENT_MAX_LENGTH = 500


class AccessLog(Base):
    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True, index=True)
    link_id = Column(Integer, ForeignKey("shared_links.id"), nullable=False, index=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(USER_AGENT_MAX_LENGTH), nullable=True)
    access_type = Column(String(20), nullable=False)
    success = Column(Boolean, nullable=False, default=True)
    accessed_at = Column(DateTime, nullable=False, default=func.now())
