import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from aiwriter.core.exceptions import StorageFault

logger = logging.getLogger(__name__)

# Базовый класс для моделей
Base = declarative_base()


class Database:
    """Владелец асинхронного движка и фабрики сессий.

    Хранилище открывается и закрывается явно (или через `async with`),
    а экземпляр передается компонентам, которым нужен доступ к данным.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> "Database":
        """Создание движка и схемы"""
        if self._engine is not None:
            return self

        kwargs: dict = {"future": True, "echo": self.echo}
        if self.url.startswith("sqlite") and ":memory:" in self.url:
            # Одно соединение на процесс, иначе каждая сессия видит пустую БД
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })

        engine = create_async_engine(self.url, **kwargs)
        try:
            async with engine.begin() as conn:
                # Модели должны быть зарегистрированы в Base.metadata
                from aiwriter.db import models  # noqa: F401
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            await engine.dispose()
            logger.error(f"Failed to open database {self.url}: {e}")
            raise StorageFault(f"Storage unavailable: {e}") from e

        self._engine = engine
        self._sessionmaker = sessionmaker(
            bind=engine, class_=AsyncSession, expire_on_commit=False
        )
        logger.info(f"Database opened at {self.url}")
        return self

    async def close(self) -> None:
        """Освобождение соединений"""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database closed")

    def session(self) -> AsyncSession:
        """Новая сессия; хранилище должно быть открыто"""
        if self._sessionmaker is None:
            raise StorageFault("Database is not open")
        return self._sessionmaker()

    async def __aenter__(self) -> "Database":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
