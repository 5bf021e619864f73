from fastapi import Request

from aiwriter.domains.documents.services import DocumentStore


# Функция для dependency injection в FastAPI
def get_store(request: Request) -> DocumentStore:
    return request.app.state.store
