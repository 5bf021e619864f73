import asyncio
import logging
from enum import Enum
from typing import Optional

from aiwriter.core.config import settings
from aiwriter.core.exceptions import DocumentStoreError
from aiwriter.domains.documents.entities import Document, infer_title, build_preview
from aiwriter.domains.sync.controller import DocumentGateway, SyncController

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"
    SAVED = "saved"
    FAILED = "failed"


class AutosaveScheduler:
    """Отложенное сохранение текущего документа.

    Каждое изменение текста перезапускает единственный таймер; сохранение
    выполняется после `delay` секунд без изменений. Ручное сохранение идет
    в обход таймера по тем же правилам создания/обновления.
    """

    def __init__(
        self,
        gateway: DocumentGateway,
        controller: Optional[SyncController] = None,
        delay: Optional[float] = None
    ):
        self.gateway = gateway
        self.controller = controller
        self.delay = settings.autosave_delay_seconds if delay is None else delay
        self.document: Optional[Document] = None
        self.content = ""
        self.status = SaveStatus.IDLE
        self.last_error: Optional[DocumentStoreError] = None
        self._pending: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        if controller is not None:
            controller.add_delete_listener(self._document_deleted)

    @property
    def has_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def open(self, document: Document) -> None:
        """Переход к редактированию существующего документа"""
        self.cancel()
        self.document = document
        self.content = document.content

    def new_document(self) -> None:
        """Новый документ будет создан при первом сохранении"""
        self.cancel()
        self.document = None
        self.content = ""

    def _document_deleted(self, document_id) -> None:
        # Открытый документ удален: редактор очищается
        if self.document is None or str(self.document.id) != str(document_id):
            return
        self.new_document()
        self.status = SaveStatus.IDLE
        self.last_error = None

    def on_change(self, content: str) -> None:
        """Изменение текста: перезапуск таймера"""
        self.content = content
        self.cancel()
        if not content.strip():
            return
        self.status = SaveStatus.PENDING
        self._pending = asyncio.get_running_loop().create_task(self._fire())

    def cancel(self) -> None:
        """Отмена отложенного сохранения; уже начатая запись доводится до конца"""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        if self.status is SaveStatus.PENDING:
            self.status = SaveStatus.IDLE

    async def flush(self) -> None:
        """Ожидание отложенного и текущего сохранения"""
        tasks = [task for task in (self._pending, self._in_flight) if task is not None]
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def save_now(self) -> Optional[Document]:
        """Ручное сохранение; ошибки передаются вызывающему коду"""
        self.cancel()
        return await self._save()

    async def _fire(self) -> None:
        await asyncio.sleep(self.delay)
        # Таймер сработал: дальнейшие изменения текста не должны прерывать запись
        self._pending = None
        self._in_flight = asyncio.current_task()
        try:
            await self._save()
        except DocumentStoreError as e:
            logger.error(f"Autosave failed: {e}")

    def _current_document(self) -> Optional[Document]:
        if self.document is None:
            return None
        if self.controller is not None:
            # Список контроллера свежее: там видны ручные переименования
            latest = self.controller.find(self.document.id)
            if latest is not None:
                return latest
        return self.document

    async def _save(self) -> Optional[Document]:
        async with self._lock:
            content = self.content
            if not content.strip():
                return None

            self.status = SaveStatus.SAVING
            session_document = self.document
            existing = self._current_document()
            preview = build_preview(content)
            try:
                if existing is None:
                    saved = await self.gateway.create(infer_title(content), content, preview, False)
                else:
                    title = existing.title if existing.title_manually_set else infer_title(content)
                    saved = await self.gateway.update(
                        existing.id, title, content, preview, existing.title_manually_set
                    )
            except DocumentStoreError as e:
                self.status = SaveStatus.FAILED
                self.last_error = e
                raise

            if self.document is session_document:
                # Пока шла запись, сессия могла переключиться на другой документ
                self.document = saved
            self.last_error = None
            self.status = SaveStatus.PENDING if self.has_pending else SaveStatus.SAVED
            if self.controller is not None:
                self.controller.apply_saved(saved, created=existing is None)
            logger.debug(f"Saved document {saved.id}")
            return saved
