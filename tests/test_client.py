"""Тесты DocShareClient поверх ASGI-приложения (без сети)."""

import httpx
import pytest

from docshare.client import DocShareClient
from docshare.database import Database
from docshare.main import create_app


@pytest.fixture
async def asgi_app(tmp_path):
    """Приложение без lifespan: состояние задаем вручную"""
    app = create_app(
        database_url=f"sqlite:///{tmp_path / 'client.db'}",
        upload_dir=str(tmp_path / "client_uploads"),
    )
    database = Database(app.state.database_url)
    database.create_all()
    app.state.db = database
    yield app
    database.dispose()


def make_client(app, token=None) -> DocShareClient:
    return DocShareClient(base_url="http://test", token=token, transport=httpx.ASGITransport(app=app))


@pytest.mark.asyncio
async def test_full_sharing_flow(asgi_app):
    owner = make_client(asgi_app)
    await owner.register("owner@example.com", "owner-password", "Owner")
    assert (await owner.me())["email"] == "owner@example.com"

    document = await owner.upload_document(b"shared bytes", "notes.txt", "text/plain", "Notes")
    assert document["filename"] == "notes.txt"
    assert [d["id"] for d in await owner.list_documents()] == [document["id"]]

    link = await owner.create_link(document["id"], password="s3cret", max_views=2)
    assert link["hasPassword"] is True

    guest = make_client(asgi_app)
    status = await guest.link_status(link["token"])
    assert status["requiresPassword"] is True
    assert status["viewCount"] == 0

    viewed = await guest.view_shared(link["token"], password="s3cret")
    assert viewed["viewCount"] == 1

    content, filename = await guest.download_shared(link["token"], password="s3cret")
    assert content == b"shared bytes"
    assert filename == "notes.txt"

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await guest.view_shared(link["token"], password="s3cret")
    assert exc_info.value.response.status_code == 403
    assert exc_info.value.response.json() == {"error": "Maximum views reached"}

    logs = await owner.get_link_logs(link["id"])
    assert [entry["access_type"] for entry in logs] == ["failed_password", "download", "view"]

    listed = await owner.list_links()
    assert listed[0]["viewCount"] == 2

    await owner.deactivate_link(link["id"])
    assert await owner.list_links() == []


@pytest.mark.asyncio
async def test_login_and_documents(asgi_app):
    first = make_client(asgi_app)
    await first.register("user@example.com", "user-password", "User")

    client = make_client(asgi_app)
    data = await client.login("user@example.com", "user-password")
    assert client.token == data["token"]

    document = await client.upload_document(b"%PDF", "a.pdf", "application/pdf")
    updated = await client.update_document(document["id"], "described")
    assert updated["description"] == "described"
    assert (await client.get_document(document["id"]))["description"] == "described"
    assert (await client.get_stats())["totalDocuments"] == 1

    await client.delete_document(document["id"])
    assert await client.list_documents() == []


@pytest.mark.asyncio
async def test_errors_raise(asgi_app):
    client = make_client(asgi_app)
    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await client.login("ghost@example.com", "whatever")
    assert exc_info.value.response.status_code == 401
