import uuid

from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, UUID

from aiwriter.core.db import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    preview = Column(String(255), nullable=False, default="")
    title_manually_set = Column(Boolean, nullable=False, default=False)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    # Временные метки выставляет хранилище: переупорядочивание не должно менять updated_at
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False, index=True)
