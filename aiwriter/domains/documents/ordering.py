"""Вычисление нового порядка документов после перетаскивания.

Чистые функции без ввода-вывода. Позиции считаются по индексам текущего
списка; результат всегда перенумеровывается подряд 0..N-1.
"""
from enum import Enum
from typing import List, Sequence, Tuple, TypeVar

from aiwriter.domains.documents.entities import Document, DocumentOrder

T = TypeVar("T")


class DropPosition(str, Enum):
    """Где показан индикатор сброса относительно целевого документа"""
    BEFORE = "before"
    AFTER = "after"


def drop_position_for(source: int, target: int) -> DropPosition:
    """Индикатор при наведении: ниже цели при перетаскивании вниз, выше при перетаскивании вверх"""
    return DropPosition.AFTER if source < target else DropPosition.BEFORE


def insertion_index(source: int, target: int, position: DropPosition) -> int:
    """Индекс вставки в списке, из которого перетаскиваемый элемент уже удален.

    Удаление сдвигает все элементы после source на одну позицию влево,
    поэтому при source < target цель оказывается на target - 1.
    """
    position = DropPosition(position)
    if position is DropPosition.AFTER:
        return target if source < target else target + 1
    return target - 1 if source < target else target


def _check_index(name: str, index: int, size: int) -> None:
    if not 0 <= index < size:
        raise IndexError(f"{name} index {index} out of range for {size} items")


def move(items: Sequence[T], source: int, target: int, position: DropPosition) -> List[T]:
    """Новый список после перемещения элемента source относительно target"""
    _check_index("source", source, len(items))
    _check_index("target", target, len(items))

    reordered = list(items)
    if source == target:
        return reordered

    dragged = reordered.pop(source)
    reordered.insert(insertion_index(source, target, position), dragged)
    return reordered


def assign_orders(documents: Sequence[Document]) -> List[DocumentOrder]:
    """Сплошная перенумерация 0..N-1"""
    return [DocumentOrder(document.id, index) for index, document in enumerate(documents)]


def reorder(
    documents: Sequence[Document],
    source: int,
    target: int,
    position: DropPosition
) -> Tuple[List[Document], List[DocumentOrder]]:
    """Перемещение с перенумерацией: документы с новыми ключами и пары для хранилища"""
    moved = move(documents, source, target, position)
    renumbered = [document.with_order(index) for index, document in enumerate(moved)]
    return renumbered, assign_orders(renumbered)
