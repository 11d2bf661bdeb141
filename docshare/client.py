import httpx
from typing import List, Optional

from docshare.config import API_URL


class DocShareClient:
    """Клиент для взаимодействия с DocShare API"""

    def __init__(
        self,
        base_url: str = API_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.transport = transport
        self.timeout = timeout

    def _client(self, **kwargs) -> httpx.AsyncClient:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            transport=self.transport,
            timeout=self.timeout,
            **kwargs,
        )

    # ---------- Авторизация ----------

    async def register(self, email: str, password: str, full_name: str) -> dict:
        """Регистрация; токен сохраняется в клиенте"""
        async with self._client() as client:
            response = await client.post(
                "/api/auth/register",
                json={"email": email, "password": password, "fullName": full_name},
            )
            response.raise_for_status()
            data = response.json()
        self.token = data["token"]
        return data

    async def login(self, email: str, password: str) -> dict:
        """Авторизация; токен сохраняется в клиенте"""
        async with self._client() as client:
            response = await client.post("/api/auth/login", json={"email": email, "password": password})
            response.raise_for_status()
            data = response.json()
        self.token = data["token"]
        return data

    async def me(self) -> dict:
        async with self._client() as client:
            response = await client.get("/api/auth/me")
            response.raise_for_status()
            return response.json()["user"]

    # ---------- Документы ----------

    async def upload_document(
        self,
        file_content: bytes,
        filename: str,
        mime_type: str = "application/octet-stream",
        description: Optional[str] = None,
    ) -> dict:
        """Загружает файл через API"""
        async with self._client() as client:
            files = {"file": (filename, file_content, mime_type)}
            data = {}
            if description:
                data["description"] = description
            response = await client.post("/api/documents/upload", files=files, data=data)
            response.raise_for_status()
            return response.json()["document"]

    async def list_documents(self) -> List[dict]:
        async with self._client() as client:
            response = await client.get("/api/documents/")
            response.raise_for_status()
            return response.json()["documents"]

    async def get_document(self, document_id: int) -> dict:
        async with self._client() as client:
            response = await client.get(f"/api/documents/{document_id}")
            response.raise_for_status()
            return response.json()["document"]

    async def update_document(self, document_id: int, description: str) -> dict:
        async with self._client() as client:
            response = await client.patch(f"/api/documents/{document_id}", json={"description": description})
            response.raise_for_status()
            return response.json()["document"]

    async def delete_document(self, document_id: int) -> dict:
        async with self._client() as client:
            response = await client.delete(f"/api/documents/{document_id}")
            response.raise_for_status()
            return response.json()

    async def get_stats(self) -> dict:
        async with self._client() as client:
            response = await client.get("/api/documents/stats/summary")
            response.raise_for_status()
            return response.json()["stats"]

    # ---------- Ссылки ----------

    async def create_link(
        self,
        document_id: int,
        password: Optional[str] = None,
        expires_in_hours: Optional[int] = None,
        max_views: Optional[int] = None,
        allow_download: Optional[bool] = None,
    ) -> dict:
        """Создает ссылку для документа"""
        data = {"documentId": document_id}
        if password:
            data["password"] = password
        if expires_in_hours is not None:
            data["expiresIn"] = expires_in_hours
        if max_views is not None:
            data["maxViews"] = max_views
        if allow_download is not None:
            data["allowDownload"] = allow_download

        async with self._client() as client:
            response = await client.post("/api/links", json=data)
            response.raise_for_status()
            return response.json()["link"]

    async def list_links(self) -> List[dict]:
        async with self._client() as client:
            response = await client.get("/api/links")
            response.raise_for_status()
            return response.json()["links"]

    async def deactivate_link(self, link_id: int) -> dict:
        async with self._client() as client:
            response = await client.delete(f"/api/links/{link_id}")
            response.raise_for_status()
            return response.json()

    async def get_link_logs(self, link_id: int) -> List[dict]:
        async with self._client() as client:
            response = await client.get(f"/api/links/{link_id}/logs")
            response.raise_for_status()
            return response.json()["logs"]

    # ---------- Публичный доступ ----------

    async def link_status(self, token: str) -> dict:
        async with self._client() as client:
            response = await client.get(f"/api/share/{token}/status")
            response.raise_for_status()
            return response.json()

    async def view_shared(self, token: str, password: Optional[str] = None) -> dict:
        """Метаданные документа по ссылке (расходует просмотр)"""
        async with self._client() as client:
            response = await client.post(
                f"/api/share/{token}",
                params={"action": "view"},
                json={"password": password} if password else None,
            )
            response.raise_for_status()
            return response.json()["document"]

    async def download_shared(self, token: str, password: Optional[str] = None) -> tuple[bytes, str]:
        """Скачивает файл и возвращает содержимое и имя файла"""
        async with self._client(follow_redirects=True) as client:
            response = await client.post(
                f"/api/share/{token}",
                params={"action": "download"},
                json={"password": password} if password else None,
            )
            response.raise_for_status()

        # Получаем имя файла из заголовков Content-Disposition
        filename = "file"
        content_disposition = response.headers.get("content-disposition", "")
        if "filename=" in content_disposition:
            filename_part = content_disposition.split("filename=")[1].split(";")[0]
            # Убираем кавычки и пробелы
            filename = filename_part.strip().strip('"').strip("'")
        return response.content, filename
