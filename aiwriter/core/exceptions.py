from typing import Optional, List, Any


class DocumentStoreError(Exception):
    """Базовая ошибка хранилища документов"""


class DocumentValidationError(DocumentStoreError):
    """Пустой заголовок или содержимое; запись не выполнялась"""


class DocumentNotFound(DocumentStoreError):
    """Документ с указанным идентификатором не существует"""

    def __init__(self, document_id: Any):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class StorageFault(DocumentStoreError):
    """Хранилище недоступно или транзакция не удалась"""


class ReconciliationFailure(DocumentStoreError):
    """Оптимистичный порядок не подтвержден хранилищем и был откатан"""

    def __init__(
        self,
        orders: List[Any],
        cause: Optional[BaseException] = None
    ):
        self.orders = orders
        self.cause = cause
        message = "Failed to save document order"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
