import asyncio
import logging
from enum import Enum
from typing import Optional, List, Callable, Any, Iterable, Protocol

from aiwriter.core.exceptions import (
    DocumentStoreError, DocumentNotFound, ReconciliationFailure
)
from aiwriter.domains.documents import ordering
from aiwriter.domains.documents.entities import Document, DocumentOrder
from aiwriter.domains.documents.ordering import DropPosition

logger = logging.getLogger(__name__)


class DocumentGateway(Protocol):
    """Операции хранилища, доступные клиенту (локально или по HTTP)"""

    async def list(self) -> List[Document]: ...

    async def get(self, document_id: Any) -> Document: ...

    async def create(
        self, title: str, content: str, preview: Optional[str] = None,
        title_manually_set: bool = False
    ) -> Document: ...

    async def update(
        self, document_id: Any, title: str, content: str, preview: Optional[str] = None,
        title_manually_set: bool = False
    ) -> Document: ...

    async def delete(self, document_id: Any) -> bool: ...

    async def reorder(self, orders: Iterable[DocumentOrder]) -> None: ...


class SyncState(str, Enum):
    """Состояния списка при перетаскивании"""
    IDLE = "idle"
    DRAGGING = "dragging"
    RECONCILING = "reconciling"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


def _log_failure(error: ReconciliationFailure) -> None:
    logger.error(f"Document order rolled back: {error}")


class SyncController:
    """Локальный список документов с оптимистичным переупорядочиванием.

    Новый порядок показывается сразу после сброса, затем сохраняется через
    шлюз. При ошибке список возвращается к снимку, сделанному в начале
    перетаскивания, без слияния и без повторной попытки.
    """

    def __init__(
        self,
        gateway: DocumentGateway,
        on_error: Optional[Callable[[ReconciliationFailure], None]] = None
    ):
        self.gateway = gateway
        self.on_error = on_error or _log_failure
        self._documents: List[Document] = []
        self._snapshot: Optional[List[Document]] = None
        self._dragged_id: Any = None
        self._state = SyncState.IDLE
        self._delete_listeners: List[Callable[[Any], None]] = []
        self.last_outcome: Optional[SyncState] = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def documents(self) -> List[Document]:
        return list(self._documents)

    def _transition(self, new_state: SyncState) -> None:
        logger.debug(f"Sync state {self._state.value} -> {new_state.value}")
        self._state = new_state

    def _index_of(self, document_id: Any) -> int:
        for index, document in enumerate(self._documents):
            if document.id == document_id or str(document.id) == str(document_id):
                return index
        raise DocumentNotFound(document_id)

    def find(self, document_id: Any) -> Optional[Document]:
        """Документ из локального списка"""
        try:
            return self._documents[self._index_of(document_id)]
        except DocumentNotFound:
            return None

    async def load(self) -> List[Document]:
        """Загрузка списка из хранилища"""
        self._documents = await self.gateway.list()
        logger.info(f"Loaded {len(self._documents)} documents")
        return self.documents

    def apply_saved(self, document: Document, created: bool) -> None:
        """Учет подтвержденного сохранения в локальном списке"""
        if created:
            self._documents.insert(0, document)
            return
        try:
            self._documents[self._index_of(document.id)] = document
        except DocumentNotFound:
            self._documents.insert(0, document)

    async def rename(self, document_id: Any, title: str) -> Document:
        """Ручное переименование; заголовок больше не выводится из текста"""
        current = self._documents[self._index_of(document_id)]
        updated = await self.gateway.update(
            current.id, title.strip(), current.content, current.preview, True
        )
        self.apply_saved(updated, created=False)
        return updated

    async def delete(self, document_id: Any) -> bool:
        """Удаление документа; отсутствующий в хранилище считается удаленным"""
        deleted = await self.gateway.delete(document_id)
        try:
            del self._documents[self._index_of(document_id)]
        except DocumentNotFound:
            pass
        for listener in self._delete_listeners:
            listener(document_id)
        return deleted

    def add_delete_listener(self, listener: Callable[[Any], None]) -> None:
        """Подписка на удаление документов (например, открытого в редакторе)"""
        self._delete_listeners.append(listener)

    def begin_drag(self, document_id: Any) -> bool:
        """Начало перетаскивания; игнорируется, пока предыдущее не завершено"""
        if self._state in (SyncState.DRAGGING, SyncState.RECONCILING):
            logger.info(f"Drag of {document_id} ignored while {self._state.value}")
            return False

        self._index_of(document_id)
        self._snapshot = list(self._documents)
        self._dragged_id = document_id
        self._transition(SyncState.DRAGGING)
        return True

    def cancel_drag(self) -> None:
        if self._state is not SyncState.DRAGGING:
            return
        self._snapshot = None
        self._dragged_id = None
        self._transition(SyncState.IDLE)

    async def drop(self, target_id: Any, position: Optional[DropPosition] = None) -> SyncState:
        """Сброс на целевой документ: оптимистичное применение и согласование"""
        if self._state is not SyncState.DRAGGING:
            raise RuntimeError(f"Cannot drop while {self._state.value}")

        source = self._index_of(self._dragged_id)
        target = self._index_of(target_id)
        if source == target:
            self.cancel_drag()
            return SyncState.IDLE

        if position is None:
            position = ordering.drop_position_for(source, target)

        snapshot = self._snapshot
        self._documents, orders = ordering.reorder(self._documents, source, target, position)
        self._transition(SyncState.RECONCILING)

        try:
            await self.gateway.reorder(orders)
        except asyncio.CancelledError:
            self._documents = list(snapshot)
            self._finish(SyncState.ROLLED_BACK)
            raise
        except Exception as e:
            self._documents = list(snapshot)
            outcome = SyncState.ROLLED_BACK
            self._finish(outcome)
            self.on_error(ReconciliationFailure(orders, e))
            if not isinstance(e, DocumentStoreError):
                raise
            return outcome

        outcome = SyncState.COMMITTED
        self._finish(outcome)
        return outcome

    def _finish(self, outcome: SyncState) -> None:
        self._transition(outcome)
        self.last_outcome = outcome
        self._snapshot = None
        self._dragged_id = None
        self._transition(SyncState.IDLE)
