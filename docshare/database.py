import os
from pathlib import Path

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def _ensure_sqlite_dir(database_url: str) -> None:
    """Создает каталог для файла SQLite, если его нет"""
    if "sqlite" not in database_url or ":///" not in database_url:
        return
    db_path = database_url.split(":///", 1)[1]
    if not db_path or db_path == ":memory:":
        return
    # Обрабатываем относительные пути
    if not os.path.isabs(db_path):
        db_path = os.path.join(os.getcwd(), db_path)
    db_dir = os.path.dirname(db_path)
    if db_dir:
        Path(db_dir).mkdir(parents=True, exist_ok=True)


class Database:
    """Пул соединений с БД: создается при старте приложения и закрывается при остановке"""

    def __init__(self, database_url: str):
        self.url = database_url
        _ensure_sqlite_dir(database_url)
        connect_args = {}
        if "sqlite" in database_url:
            connect_args = {"check_same_thread": False, "timeout": 30}
        self.engine = create_engine(database_url, connect_args=connect_args)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        """Создание таблиц"""
        # Регистрируем модели в метаданных
        from docshare import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self):
        return self.SessionLocal()

    def ping(self) -> bool:
        """Проверяет доступность БД"""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    """Dependency для получения сессии БД"""
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
