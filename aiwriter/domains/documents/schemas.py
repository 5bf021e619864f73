from pydantic import BaseModel, Field, ConfigDict
from typing import List
import uuid
from datetime import datetime


class DocumentWrite(BaseModel):
    """Схема для создания и обновления документа.

    Пустые значения и длинный заголовок пропускаются схемой и отклоняются
    хранилищем, чтобы клиент получил 400, а не 422.
    """
    title: str = ""
    content: str = Field(default="", max_length=1000000)  # 1MB max content
    preview: str = Field(default="", max_length=255)
    title_manually_set: bool = Field(default=False, alias="titleManuallySet")

    model_config = ConfigDict(populate_by_name=True)


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    id: uuid.UUID
    title: str
    content: str
    preview: str
    title_manually_set: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DocumentOrderItem(BaseModel):
    """Новая позиция одного документа"""
    id: uuid.UUID
    order: int


class DocumentOrderRequest(BaseModel):
    """Схема для пакетного переупорядочивания"""
    document_orders: List[DocumentOrderItem] = Field(..., alias="documentOrders")

    model_config = ConfigDict(populate_by_name=True)


class DocumentOrderResponse(BaseModel):
    success: bool
