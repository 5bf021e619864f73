import asyncio
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from aiwriter.client.api import DocumentApiClient
from aiwriter.core.config import Settings
from aiwriter.core.db import Database
from aiwriter.core.exceptions import DocumentNotFound, DocumentValidationError, StorageFault
from aiwriter.domains.documents.ordering import DropPosition
from aiwriter.domains.documents.services import DocumentStore
from aiwriter.domains.sync.autosave import AutosaveScheduler
from aiwriter.domains.sync.controller import SyncController, SyncState
from aiwriter.main import create_app


@pytest.fixture
def client(database_url):
    app = create_app(Settings(database_url=database_url))
    with TestClient(app) as test_client:
        yield test_client


def create(client, title, content, **extra):
    return client.post("/api/documents", json={"title": title, "content": content, **extra})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_requires_title_and_content(client):
    assert create(client, "", "x").status_code == 400
    assert create(client, "Title", "").status_code == 400
    response = client.post("/api/documents", json={"content": "no title"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Title and content are required"


def test_create_list_and_get(client):
    hello = create(client, "Hello", "Hello world")
    assert hello.status_code == 201
    assert hello.json()["display_order"] == 0
    assert hello.json()["preview"] == "Hello world"

    second = create(client, "Second", "more text", preview="custom", titleManuallySet=True)
    assert second.json()["display_order"] == -1
    assert second.json()["title_manually_set"] is True

    listed = client.get("/api/documents").json()
    assert [doc["title"] for doc in listed] == ["Second", "Hello"]

    fetched = client.get(f"/api/documents/{hello.json()['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["content"] == "Hello world"
    assert client.get(f"/api/documents/{uuid.uuid4()}").status_code == 404


def test_update_keeps_manual_title(client):
    doc = create(client, "Chosen", "body", titleManuallySet=True).json()

    response = client.put(f"/api/documents/{doc['id']}", json={
        "title": "New Title", "content": "content", "preview": "prev", "titleManuallySet": False,
    })

    assert response.status_code == 200
    assert response.json()["title"] == "Chosen"
    assert response.json()["content"] == "content"
    assert response.json()["display_order"] == doc["display_order"]


def test_update_errors(client):
    doc = create(client, "Doc", "body").json()
    missing = client.put(f"/api/documents/{uuid.uuid4()}", json={"title": "T", "content": "c"})
    assert missing.status_code == 404
    invalid = client.put(f"/api/documents/{doc['id']}", json={"title": "T", "content": ""})
    assert invalid.status_code == 400


def test_reorder(client):
    a = create(client, "A", "a").json()
    b = create(client, "B", "b").json()
    c = create(client, "C", "c").json()

    response = client.put("/api/documents/order", json={"documentOrders": [
        {"id": a["id"], "order": 0}, {"id": b["id"], "order": 1}, {"id": c["id"], "order": 2},
    ]})
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert [doc["title"] for doc in client.get("/api/documents").json()] == ["A", "B", "C"]

    bad = client.put("/api/documents/order", json={"documentOrders": [
        {"id": c["id"], "order": 0}, {"id": str(uuid.uuid4()), "order": 1},
    ]})
    assert bad.status_code == 404
    assert [doc["title"] for doc in client.get("/api/documents").json()] == ["A", "B", "C"]

    assert client.put("/api/documents/order", json={"orders": []}).status_code == 422


def test_delete(client):
    doc = create(client, "Doomed", "bye").json()
    assert client.delete(f"/api/documents/{doc['id']}").status_code == 204
    assert client.delete(f"/api/documents/{doc['id']}").status_code == 404
    assert client.get("/api/documents").json() == []


def test_client_components_over_http(database_url):
    async def scenario():
        app = create_app(Settings(database_url=database_url))
        async with Database(database_url) as database:
            app.state.store = DocumentStore(database)
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
                gateway = DocumentApiClient(http)
                controller = SyncController(gateway)
                scheduler = AutosaveScheduler(gateway, controller, delay=0.01)

                scheduler.on_change("Hello\nworld")
                await scheduler.flush()
                scheduler.new_document()
                scheduler.on_change("Second\nmore text")
                await scheduler.flush()
                assert [doc.title for doc in controller.documents] == ["Second", "Hello"]

                await controller.load()
                hello, second = controller.documents[1], controller.documents[0]
                assert controller.begin_drag(hello.id)
                assert await controller.drop(second.id, DropPosition.BEFORE) is SyncState.COMMITTED
                assert [doc.title for doc in await gateway.list()] == ["Hello", "Second"]

                fetched = await gateway.get(hello.id)
                assert fetched.display_order == 0
                with pytest.raises(DocumentNotFound):
                    await gateway.get(uuid.uuid4())
                with pytest.raises(DocumentValidationError):
                    await gateway.create("", "x")
                assert await gateway.delete(uuid.uuid4()) is False
                assert await controller.delete(second.id) is True
                assert [doc.title for doc in controller.documents] == ["Hello"]

    asyncio.run(scenario())


def test_client_rolls_back_when_server_fails():
    failures = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=[
                {
                    "id": str(uuid.uuid4()), "title": title, "content": title, "preview": title,
                    "title_manually_set": False, "display_order": index,
                    "created_at": "2024-01-01T10:00:00", "updated_at": "2024-01-01T10:00:00",
                }
                for index, title in enumerate("ABC")
            ])
        return httpx.Response(500, json={"detail": "Failed to update document order"})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://testserver") as http:
            gateway = DocumentApiClient(http)
            with pytest.raises(StorageFault):
                await gateway.reorder([])

            controller = SyncController(gateway, on_error=failures.append)
            before = await controller.load()
            controller.begin_drag(before[2].id)
            assert await controller.drop(before[0].id) is SyncState.ROLLED_BACK
            assert controller.documents == before

    asyncio.run(scenario())
    assert len(failures) == 1
    assert isinstance(failures[0].cause, StorageFault)


def test_malformed_ids_are_not_found(client):
    assert client.get("/api/documents/garbage").status_code == 404
    assert client.put("/api/documents/garbage", json={"title": "T", "content": "c"}).status_code == 404
    assert client.delete("/api/documents/garbage").status_code == 404


def test_long_title_is_rejected_with_400(client):
    doc = create(client, "Short", "body").json()
    assert create(client, "t" * 256, "body").status_code == 400

    response = client.put(f"/api/documents/{doc['id']}", json={
        "title": "t" * 300, "content": "body", "titleManuallySet": True,
    })
    assert response.status_code == 400
    assert "at most 255" in response.json()["detail"]


def test_client_treats_malformed_ids_like_the_store(database_url):
    async def scenario():
        app = create_app(Settings(database_url=database_url))
        async with Database(database_url) as database:
            store = DocumentStore(database)
            app.state.store = store
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
                gateway = DocumentApiClient(http)

                assert await store.delete("garbage") is False
                assert await gateway.delete("garbage") is False
                with pytest.raises(DocumentNotFound):
                    await gateway.get("garbage")
                with pytest.raises(DocumentNotFound):
                    await gateway.update("garbage", "Title", "content")

    asyncio.run(scenario())
