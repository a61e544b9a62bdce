import asyncio
import copy
import json
import logging
import os
import uuid
from pathlib import Path
from typing import Dict, Iterable, Optional, List

from bookstore.application.interfaces import DocumentStore, Mutator
from bookstore.domain.exceptions import StorageError
from bookstore.infrastructure.db_schema import COLLECTIONS

logger = logging.getLogger(__name__)


class JsonFileStore(DocumentStore):
    """json-server style database: one file, one top-level array per collection.

    The whole file is held in memory and rewritten after every change.
    A single lock serialises operations, so ``apply`` and ``ensure`` are atomic
    within the process.
    """

    def __init__(self, path, collections: Iterable[str] = COLLECTIONS):
        self._path = Path(path)
        self._collections = tuple(collections)
        self._data: Dict[str, List[dict]] = {}
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        async with self._lock:
            if self._path.exists():
                try:
                    self._data = json.loads(self._path.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    raise StorageError(f"Cannot load {self._path}: {e}") from e
            for name in self._collections:
                self._data.setdefault(name, [])
            await self._flush()
        logger.info(f"JSON store loaded from {self._path}")

    async def close(self) -> None:
        pass

    async def ping(self) -> None:
        if not self._path.exists():
            raise StorageError(f"{self._path} is missing")

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        async with self._lock:
            doc = self._locate(collection, doc_id)
            return self._export(doc) if doc is not None else None

    async def find(self, collection: str, **filters) -> List[dict]:
        async with self._lock:
            return [
                self._export(doc)
                for doc in self._collection(collection)
                if all(doc.get(field) == value for field, value in filters.items())
            ]

    async def insert(self, collection: str, document: dict) -> dict:
        doc = copy.deepcopy(document)
        doc.setdefault("id", str(uuid.uuid4()))
        async with self._lock:
            if self._locate(collection, doc["id"]) is not None:
                raise StorageError(f"Document {collection}/{doc['id']} already exists")
            self._collection(collection).append(doc)
            await self._flush()
            return self._export(doc)

    async def ensure(self, collection: str, doc_id: str, default: dict) -> dict:
        async with self._lock:
            doc = self._locate(collection, doc_id)
            if doc is None:
                doc = dict(copy.deepcopy(default), id=doc_id)
                self._collection(collection).append(doc)
                await self._flush()
            return self._export(doc)

    async def apply(self, collection: str, doc_id: str, mutator: Mutator) -> Optional[dict]:
        async with self._lock:
            docs = self._collection(collection)
            for index, doc in enumerate(docs):
                if str(doc.get("id")) == doc_id:
                    updated = mutator(self._export(doc))
                    updated["id"] = doc["id"]
                    docs[index] = updated
                    await self._flush()
                    return self._export(updated)
            return None

    async def delete(self, collection: str, doc_id: str) -> bool:
        async with self._lock:
            docs = self._collection(collection)
            for index, doc in enumerate(docs):
                if str(doc.get("id")) == doc_id:
                    del docs[index]
                    await self._flush()
                    return True
            return False

    def _collection(self, name: str) -> List[dict]:
        return self._data.setdefault(name, [])

    def _locate(self, collection: str, doc_id: str) -> Optional[dict]:
        # json-server files often carry integer ids
        for doc in self._collection(collection):
            if str(doc.get("id")) == doc_id:
                return doc
        return None

    async def _flush(self) -> None:
        # serialised while the lock is held; only the disk write leaves the loop
        payload = json.dumps(self._data, indent=2, ensure_ascii=False)
        await asyncio.to_thread(self._write, payload)

    def _write(self, payload: str) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Cannot write {self._path}: {e}") from e

    @staticmethod
    def _export(doc: dict) -> dict:
        exported = copy.deepcopy(doc)
        exported["id"] = str(doc["id"])
        return exported
