from aiwriter.domains.documents.entities import (
    Document, DocumentOrder, infer_title, build_preview
)
from aiwriter.domains.documents.schemas import (
    DocumentWrite, DocumentResponse, DocumentOrderItem, DocumentOrderRequest,
    DocumentOrderResponse
)
from aiwriter.domains.documents.ordering import DropPosition
from aiwriter.domains.documents.services import DocumentStore

__all__ = [
    "Document", "DocumentOrder", "infer_title", "build_preview",
    "DocumentWrite", "DocumentResponse", "DocumentOrderItem", "DocumentOrderRequest",
    "DocumentOrderResponse",
    "DropPosition",
    "DocumentStore"
]
