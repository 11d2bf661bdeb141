"""Общие фикстуры: временная SQLite БД, хранилище файлов, приложение FastAPI."""

import io
from datetime import datetime, timedelta

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from docshare.database import Database
from docshare.main import create_app
from docshare.services.auth import AuthService
from docshare.services.documents import DocumentService
from docshare.storage import FileStorage


class FakeClock:
    """Управляемые часы для проверки сроков действия"""

    def __init__(self, now: datetime = datetime(2026, 1, 1, 12, 0, 0)):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_upload(content: bytes = b"hello world", filename: str = "report.pdf", mime_type: str = "application/pdf"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": mime_type}),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def database(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'test.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def owner(db):
    user, _ = AuthService(db).register("owner@example.com", "owner-password", "Document Owner")
    return user


@pytest.fixture
def stranger(db):
    user, _ = AuthService(db).register("stranger@example.com", "stranger-password", "Someone Else")
    return user


@pytest.fixture
def document(db, storage, owner):
    stored = storage.save(make_upload())
    return DocumentService(db, storage).create(owner.id, stored, "report.pdf", "Quarterly report")


@pytest.fixture
def app(tmp_path):
    return create_app(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        upload_dir=str(tmp_path / "api_uploads"),
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register(client: TestClient, email: str = "alice@example.com", password: str = "alice-password") -> dict:
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "fullName": "Alice Example"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


def upload(client: TestClient, headers: dict, content: bytes = b"%PDF-1.4 test", filename: str = "report.pdf") -> dict:
    response = client.post(
        "/api/documents/upload",
        files={"file": (filename, content, "application/pdf")},
        data={"description": "Quarterly report"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["document"]


@pytest.fixture
def auth_headers(client) -> dict:
    return register(client)
