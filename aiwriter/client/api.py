import logging
from typing import Optional, List, Iterable, Any

import httpx

from aiwriter.core.exceptions import (
    DocumentValidationError, DocumentNotFound, StorageFault
)
from aiwriter.domains.documents.entities import Document, DocumentOrder
from aiwriter.domains.documents.schemas import DocumentResponse

logger = logging.getLogger(__name__)

API_BASE = "/api/documents"


def _error_detail(response: httpx.Response) -> str:
    try:
        return response.json().get("detail") or "Request failed"
    except ValueError:
        return "Request failed"


def _to_document(payload: dict) -> Document:
    data = DocumentResponse.model_validate(payload)
    return Document(**data.model_dump())


class DocumentApiClient:
    """Клиент HTTP API документов с тем же контрактом, что и DocumentStore"""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def connect(cls, base_url: str, timeout: float = 10.0) -> "DocumentApiClient":
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout))

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, document_id: Any = None, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise StorageFault(f"Request failed: {e}") from e

        if response.status_code == 400:
            raise DocumentValidationError(_error_detail(response))
        if response.status_code == 404:
            raise DocumentNotFound(document_id)
        if response.is_error:
            raise StorageFault(_error_detail(response))
        return response

    async def list(self) -> List[Document]:
        """Получение всех документов"""
        response = await self._request("GET", API_BASE)
        return [_to_document(item) for item in response.json()]

    async def get(self, document_id: Any) -> Document:
        """Получение документа"""
        response = await self._request("GET", f"{API_BASE}/{document_id}", document_id)
        return _to_document(response.json())

    async def create(
        self,
        title: str,
        content: str,
        preview: Optional[str] = None,
        title_manually_set: bool = False
    ) -> Document:
        """Создание документа"""
        response = await self._request("POST", API_BASE, json={
            "title": title,
            "content": content,
            "preview": preview or "",
            "titleManuallySet": title_manually_set,
        })
        return _to_document(response.json())

    async def update(
        self,
        document_id: Any,
        title: str,
        content: str,
        preview: Optional[str] = None,
        title_manually_set: bool = False
    ) -> Document:
        """Обновление документа"""
        response = await self._request("PUT", f"{API_BASE}/{document_id}", document_id, json={
            "title": title,
            "content": content,
            "preview": preview or "",
            "titleManuallySet": title_manually_set,
        })
        return _to_document(response.json())

    async def delete(self, document_id: Any) -> bool:
        """Удаление документа; False если его уже нет"""
        try:
            await self._request("DELETE", f"{API_BASE}/{document_id}", document_id)
        except DocumentNotFound:
            return False
        return True

    async def reorder(self, orders: Iterable[DocumentOrder]) -> None:
        """Сохранение порядка документов"""
        await self._request("PUT", f"{API_BASE}/order", json={
            "documentOrders": [
                {"id": str(document_id), "order": order} for document_id, order in orders
            ]
        })
