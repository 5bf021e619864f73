from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from aiwriter.api.deps import get_store
from aiwriter.core.exceptions import DocumentValidationError, DocumentNotFound, StorageFault
from aiwriter.domains.documents.entities import DocumentOrder
from aiwriter.domains.documents.schemas import (
    DocumentWrite, DocumentResponse, DocumentOrderRequest, DocumentOrderResponse
)
from aiwriter.domains.documents.services import DocumentStore

router = APIRouter(prefix="/api/documents", tags=["documents"])


def _storage_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail
    )


@router.get("", response_model=List[DocumentResponse])
async def list_documents(store: DocumentStore = Depends(get_store)):
    """Список документов в порядке отображения"""
    try:
        documents = await store.list()
    except StorageFault:
        raise _storage_error("Failed to fetch documents")
    return [DocumentResponse.model_validate(doc) for doc in documents]


# Должен быть объявлен раньше маршрута /{document_id}
@router.put("/order", response_model=DocumentOrderResponse)
async def update_document_order(
    order_request: DocumentOrderRequest,
    store: DocumentStore = Depends(get_store)
):
    """Атомарное сохранение нового порядка документов"""
    try:
        await store.reorder(
            DocumentOrder(item.id, item.order) for item in order_request.document_orders
        )
    except DocumentNotFound as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except StorageFault:
        raise _storage_error("Failed to update document order")
    return DocumentOrderResponse(success=True)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    store: DocumentStore = Depends(get_store)
):
    """Получение документа по идентификатору"""
    try:
        document = await store.get(document_id)
    except DocumentNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    except StorageFault:
        raise _storage_error("Failed to fetch document")
    return DocumentResponse.model_validate(document)


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentWrite,
    store: DocumentStore = Depends(get_store)
):
    """Создание нового документа в начале списка"""
    try:
        document = await store.create(
            document_data.title,
            document_data.content,
            document_data.preview or None,
            document_data.title_manually_set
        )
    except DocumentValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except StorageFault:
        raise _storage_error("Failed to create document")
    return DocumentResponse.model_validate(document)


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    document_data: DocumentWrite,
    store: DocumentStore = Depends(get_store)
):
    """Обновление документа"""
    try:
        document = await store.update(
            document_id,
            document_data.title,
            document_data.content,
            document_data.preview or None,
            document_data.title_manually_set
        )
    except DocumentValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except DocumentNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    except StorageFault:
        raise _storage_error("Failed to update document")
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    store: DocumentStore = Depends(get_store)
):
    """Удаление документа"""
    try:
        deleted = await store.delete(document_id)
    except StorageFault:
        raise _storage_error("Failed to delete document")
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
