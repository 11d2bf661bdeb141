import os
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Текущее время в UTC (без tzinfo, как хранится в БД)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_link_token() -> str:
    """Генерирует токен ссылки: 32 случайных байта в hex"""
    return secrets.token_hex(32)


def generate_stored_name(filename: str) -> str:
    """Генерирует уникальное имя для хранения файла"""
    base = os.path.basename(filename or "file")
    stem, ext = os.path.splitext(base)
    return f"{int(time.time() * 1000)}-{secrets.token_hex(16)}-{stem}{ext}"


def parse_expires_at(hours: Optional[int], now: datetime) -> Optional[datetime]:
    """Считает срок действия ссылки в часах от текущего момента"""
    if hours is None:
        return None
    return now + timedelta(hours=hours)


def is_link_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    """Проверяет, истек ли срок действия ссылки"""
    if expires_at is None:
        return False
    return expires_at < now


def is_view_limit_reached(view_count: int, max_views: Optional[int]) -> bool:
    """Проверяет, достигнут ли лимит просмотров"""
    if max_views is None:
        return False
    return view_count >= max_views
