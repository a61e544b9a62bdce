import json
import threading

import pytest

from bookstore.domain.exceptions import StorageError
from bookstore.infrastructure.json_store import JsonFileStore


async def test_start_creates_missing_file(tmp_path):
    path = tmp_path / "db.json"
    await JsonFileStore(path).start()

    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data) == {"books", "users", "carts", "orders", "sessions"}


async def test_start_rejects_corrupt_file(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError):
        await JsonFileStore(path).start()


async def test_numeric_ids_are_exposed_as_strings(store):
    doc = await store.get("books", "3")

    assert doc["id"] == "3"
    assert doc["name"] == "Ulysses"


async def test_insert_and_persist(store, db_path):
    doc = await store.insert("orders", {"userId": "alice", "items": []})
    assert doc["id"]

    reloaded = JsonFileStore(db_path)
    await reloaded.start()
    assert await reloaded.get("orders", doc["id"]) == doc


async def test_insert_duplicate_id(store):
    with pytest.raises(StorageError):
        await store.insert("books", {"id": "1", "name": "Copy"})


async def test_find_filters(store):
    await store.insert("orders", {"id": "o1", "userId": "alice"})
    await store.insert("orders", {"id": "o2", "userId": "bob"})
    await store.insert("orders", {"id": "o3", "userId": "alice"})

    assert [doc["id"] for doc in await store.find("orders", userId="alice")] == ["o1", "o3"]
    assert len(await store.find("orders")) == 3


async def test_ensure_creates_once(store):
    first = await store.ensure("carts", "alice", {"userId": "alice", "items": []})
    second = await store.ensure("carts", "alice", {"userId": "alice", "items": ["ignored"]})

    assert first == second == {"id": "alice", "userId": "alice", "items": []}
    assert len(await store.find("carts")) == 1


async def test_apply_updates_document(store):
    def rename(doc):
        doc["name"] = "Dune Messiah"
        return doc

    updated = await store.apply("books", "1", rename)

    assert updated["name"] == "Dune Messiah"
    assert (await store.get("books", "1"))["name"] == "Dune Messiah"


async def test_apply_missing_document(store):
    assert await store.apply("books", "missing", lambda doc: doc) is None


async def test_failed_mutation_leaves_document_unchanged(store):
    def explode(doc):
        doc["name"] = "half written"
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await store.apply("books", "1", explode)
    assert (await store.get("books", "1"))["name"] == "Dune"


async def test_returned_documents_are_copies(store):
    doc = await store.get("books", "1")
    doc["name"] = "changed locally"

    assert (await store.get("books", "1"))["name"] == "Dune"


async def test_delete(store):
    assert await store.delete("books", "2") is True
    assert await store.get("books", "2") is None
    assert await store.delete("books", "2") is False


async def test_ping_fails_when_file_disappears(store, db_path):
    await store.ping()
    db_path.unlink()

    with pytest.raises(StorageError):
        await store.ping()


async def test_file_writes_leave_the_event_loop(store, monkeypatch):
    loop_thread = threading.get_ident()
    writer_threads = []
    write = JsonFileStore._write

    def recording_write(self, payload):
        writer_threads.append(threading.get_ident())
        write(self, payload)

    monkeypatch.setattr(JsonFileStore, "_write", recording_write)
    await store.insert("orders", {"id": "o1", "userId": "alice"})

    assert writer_threads
    assert loop_thread not in writer_threads
    assert (await store.get("orders", "o1"))["userId"] == "alice"
