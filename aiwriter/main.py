from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from aiwriter.api.http.health import router as health_router
from aiwriter.api.http.documents import router as documents_router
from aiwriter.core.config import Settings, settings as default_settings
from aiwriter.core.db import Database
from aiwriter.core.logging import configure_logging
from aiwriter.domains.documents.services import DocumentStore


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Фабрика приложения: хранилище открывается и закрывается вместе с ним"""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        database = Database(settings.database_url, echo=settings.database_echo)
        await database.open()
        app.state.store = DocumentStore(database)
        try:
            yield
        finally:
            await database.close()

    app = FastAPI(
        title="AI Writer",
        description="Markdown note-taking backend",
        version="1.0.0",
        lifespan=lifespan
    )

    # Подключаем роутеры
    app.include_router(health_router)
    app.include_router(documents_router)

    return app


app = create_app()
