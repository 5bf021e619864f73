import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional, List, Iterable, Tuple, Union, Any, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError

from aiwriter.core.db import Database
from aiwriter.core.exceptions import (
    DocumentStoreError, DocumentValidationError, DocumentNotFound, StorageFault
)
from aiwriter.db.models.document import Document as DocumentModel
from aiwriter.db.repositories.document_repository import DocumentRepository
from aiwriter.domains.documents.entities import (
    Document, DocumentOrder, build_preview, utcnow
)

logger = logging.getLogger(__name__)

DocumentId = Union[uuid.UUID, str]

# Длина колонки documents.title
TITLE_COLUMN_LENGTH = 255


def _validate(title: str, content: str) -> None:
    if not title or not title.strip():
        raise DocumentValidationError("Title and content are required")
    if len(title) > TITLE_COLUMN_LENGTH:
        raise DocumentValidationError(f"Title must be at most {TITLE_COLUMN_LENGTH} characters")
    if not content or not content.strip():
        raise DocumentValidationError("Title and content are required")


def _coerce_id(document_id: Any) -> uuid.UUID:
    if isinstance(document_id, uuid.UUID):
        return document_id
    try:
        return uuid.UUID(str(document_id))
    except ValueError:
        # Некорректный идентификатор не может указывать на существующий документ
        raise DocumentNotFound(document_id)


class DocumentStore:
    """Хранилище документов.

    Каждая операция выполняется в собственной транзакции. Ошибки SQLAlchemy
    логируются и поднимаются как `StorageFault`; повторов нет.
    """

    def __init__(self, database: Database):
        self.database = database

    @asynccontextmanager
    async def _unit_of_work(self, action: str) -> AsyncIterator[DocumentRepository]:
        try:
            async with self.database.session() as session:
                async with session.begin():
                    yield DocumentRepository(session)
        except DocumentStoreError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Storage fault during {action}: {e}")
            raise StorageFault(f"Failed to {action}") from e

    async def list(self) -> List[Document]:
        """Все документы: display_order по возрастанию, затем updated_at по убыванию"""
        async with self._unit_of_work("fetch documents") as repository:
            return await repository.list_ordered()

    async def get(self, document_id: DocumentId) -> Document:
        """Получение документа; DocumentNotFound если его нет"""
        document_uuid = _coerce_id(document_id)
        async with self._unit_of_work("fetch document") as repository:
            document = await repository.get_by_id(document_uuid)
        if document is None:
            raise DocumentNotFound(document_uuid)
        return document

    async def create(
        self,
        title: str,
        content: str,
        preview: Optional[str] = None,
        title_manually_set: bool = False
    ) -> Document:
        """Создание документа в начале списка.

        Новый ключ порядка на единицу меньше текущего минимума, поэтому
        существующие строки не перенумеровываются.
        """
        _validate(title, content)
        if preview is None:
            preview = build_preview(content)

        async with self._unit_of_work("create document") as repository:
            current_min = await repository.min_display_order()
            display_order = 0 if current_min is None else current_min - 1
            now = utcnow()
            document = await repository.add(DocumentModel(
                id=uuid.uuid4(),
                title=title,
                content=content,
                preview=preview,
                title_manually_set=title_manually_set,
                display_order=display_order,
                created_at=now,
                updated_at=now
            ))

        logger.info(f"Created document {document.id} at display_order {display_order}")
        return document

    async def update(
        self,
        document_id: DocumentId,
        title: str,
        content: str,
        preview: Optional[str] = None,
        title_manually_set: bool = False
    ) -> Document:
        """Обновление содержимого и метаданных документа.

        Заголовок, заданный пользователем вручную, не перезаписывается, пока
        вызывающий код явно не передаст title_manually_set=True. Позиция в
        списке не меняется.
        """
        _validate(title, content)
        document_uuid = _coerce_id(document_id)
        if preview is None:
            preview = build_preview(content)

        async with self._unit_of_work("update document") as repository:
            db_document = await repository.get_model(document_uuid)
            if db_document is None:
                raise DocumentNotFound(document_uuid)

            if db_document.title_manually_set and not title_manually_set:
                title = db_document.title
                title_manually_set = True

            db_document.title = title
            db_document.content = content
            db_document.preview = preview
            db_document.title_manually_set = title_manually_set
            db_document.updated_at = max(utcnow(), db_document.created_at)
            document = await repository.add(db_document)

        logger.debug(f"Updated document {document.id}")
        return document

    async def delete(self, document_id: DocumentId) -> bool:
        """Удаление документа; False если его уже нет"""
        try:
            document_uuid = _coerce_id(document_id)
        except DocumentNotFound:
            return False

        async with self._unit_of_work("delete document") as repository:
            deleted = await repository.delete(document_uuid)

        if deleted:
            logger.info(f"Deleted document {document_uuid}")
        return deleted

    async def reorder(self, orders: Iterable[Union[DocumentOrder, Tuple[Any, int]]]) -> None:
        """Атомарная запись новых позиций.

        Либо записываются все пары, либо ни одна: любая ошибка откатывает
        транзакцию целиком.
        """
        pairs = [DocumentOrder(_coerce_id(document_id), int(order)) for document_id, order in orders]
        if not pairs:
            return

        async with self._unit_of_work("update document order") as repository:
            for pair in pairs:
                if not await repository.set_display_order(pair.id, pair.order):
                    raise DocumentNotFound(pair.id)

        logger.info(f"Reordered {len(pairs)} documents")
