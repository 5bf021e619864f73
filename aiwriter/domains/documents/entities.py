import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import NamedTuple

TITLE_MAX_LENGTH = 50
PREVIEW_LENGTH = 50
DEFAULT_TITLE = "Untitled Document"


def utcnow() -> datetime:
    """Текущее время в UTC без tzinfo (в таком виде его хранит SQLite)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def infer_title(content: str) -> str:
    """Заголовок из первой строки содержимого"""
    first_line = content.split("\n", 1)[0]
    return first_line[:TITLE_MAX_LENGTH] or DEFAULT_TITLE


def build_preview(content: str) -> str:
    """Короткий фрагмент для списка документов"""
    preview = content[:PREVIEW_LENGTH]
    if len(content) > PREVIEW_LENGTH:
        preview += "..."
    return preview


class DocumentOrder(NamedTuple):
    """Пара (документ, позиция) для пакетного переупорядочивания"""
    id: uuid.UUID
    order: int


@dataclass
class Document:
    """Сущность документа"""
    id: uuid.UUID
    title: str
    content: str
    preview: str
    title_manually_set: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

    def with_order(self, order: int) -> "Document":
        """Копия документа с другой позицией в списке"""
        return replace(self, display_order=order)

    def __repr__(self) -> str:
        return f"Document(id={self.id}, title={self.title!r}, display_order={self.display_order})"
