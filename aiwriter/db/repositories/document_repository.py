from typing import Optional, List, TYPE_CHECKING
import uuid

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from aiwriter.db.models.document import Document as DocumentModel

if TYPE_CHECKING:
    from aiwriter.domains.documents.entities import Document


class DocumentRepository:
    """Репозиторий для работы с документами.

    Не управляет транзакциями: границы единицы работы задает вызывающий код.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_ordered(self) -> List["Document"]:
        """Все документы в порядке отображения"""
        result = await self.session.execute(
            select(DocumentModel).order_by(
                DocumentModel.display_order.asc(),
                DocumentModel.updated_at.desc(),
                DocumentModel.id.asc()
            )
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def get_model(self, document_id: uuid.UUID) -> Optional[DocumentModel]:
        result = await self.session.execute(
            select(DocumentModel).where(DocumentModel.id == document_id)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, document_id: uuid.UUID) -> Optional["Document"]:
        """Получение документа по идентификатору"""
        db_document = await self.get_model(document_id)
        return self._to_domain(db_document) if db_document else None

    async def min_display_order(self) -> Optional[int]:
        """Наименьший ключ порядка или None для пустого хранилища"""
        result = await self.session.execute(select(func.min(DocumentModel.display_order)))
        return result.scalar()

    async def add(self, db_document: DocumentModel) -> "Document":
        self.session.add(db_document)
        await self.session.flush()
        return self._to_domain(db_document)

    async def set_display_order(self, document_id: uuid.UUID, order: int) -> bool:
        """Изменение позиции одного документа; updated_at не трогаем"""
        result = await self.session.execute(
            update(DocumentModel)
            .where(DocumentModel.id == document_id)
            .values(display_order=order)
        )
        return result.rowcount > 0

    async def delete(self, document_id: uuid.UUID) -> bool:
        """Удаление документа"""
        result = await self.session.execute(
            delete(DocumentModel).where(DocumentModel.id == document_id)
        )
        return result.rowcount > 0

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from aiwriter.domains.documents.entities import Document

        return Document(
            id=db_document.id,
            title=db_document.title,
            content=db_document.content,
            preview=db_document.preview,
            title_manually_set=bool(db_document.title_manually_set),
            display_order=db_document.display_order,
            created_at=db_document.created_at,
            updated_at=db_document.updated_at
        )
