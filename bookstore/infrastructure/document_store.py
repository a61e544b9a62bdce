import copy
import logging
import uuid
from typing import Optional, List

from sqlalchemy import select, insert, update, delete, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from bookstore.application.interfaces import DocumentStore, Mutator
from bookstore.domain.exceptions import StorageError
from bookstore.infrastructure.db_schema import documents_tbl, metadata

logger = logging.getLogger(__name__)


class SQLAlchemyDocumentStore(DocumentStore):
    """Document collections kept as JSON rows of a single ``documents`` table."""

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            engine, expire_on_commit=False
        )

    async def start(self) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot create documents table: {e}") from e
        logger.info("Documents table ready")

    async def close(self) -> None:
        await self._engine.dispose()

    async def ping(self) -> None:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StorageError(f"Database unavailable: {e}") from e

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(documents_tbl.c.data).where(self._key(collection, doc_id))
                )
                row = result.fetchone()
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot read {collection}/{doc_id}: {e}") from e
        return self._to_document(doc_id, row.data) if row else None

    async def find(self, collection: str, **filters) -> List[dict]:
        stmt = select(documents_tbl.c.id, documents_tbl.c.data).where(
            documents_tbl.c.collection == collection
        )
        for field, value in filters.items():
            stmt = stmt.where(documents_tbl.c.data[field].as_string() == str(value))
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt.order_by(documents_tbl.c.seq.asc()))
                rows = result.fetchall()
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot query {collection}: {e}") from e
        return [self._to_document(row.id, row.data) for row in rows]

    async def insert(self, collection: str, document: dict) -> dict:
        doc = dict(document)
        doc.setdefault("id", str(uuid.uuid4()))
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        insert(documents_tbl).values(collection=collection, id=doc["id"], data=doc)
                    )
        except IntegrityError as e:
            raise StorageError(f"Document {collection}/{doc['id']} already exists") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot insert into {collection}: {e}") from e
        return doc

    async def ensure(self, collection: str, doc_id: str, default: dict) -> dict:
        existing = await self.get(collection, doc_id)
        if existing is not None:
            return existing
        doc = dict(default, id=doc_id)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        insert(documents_tbl).values(collection=collection, id=doc_id, data=doc)
                    )
            return doc
        except IntegrityError:
            # a concurrent request created it first
            pass
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot insert into {collection}: {e}") from e
        return await self.get(collection, doc_id)

    async def apply(self, collection: str, doc_id: str, mutator: Mutator) -> Optional[dict]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        select(documents_tbl.c.data)
                        .where(self._key(collection, doc_id))
                        .with_for_update()
                    )
                    row = result.fetchone()
                    if row is None:
                        return None
                    updated = mutator(self._to_document(doc_id, copy.deepcopy(row.data)))
                    updated["id"] = doc_id
                    await session.execute(
                        update(documents_tbl)
                        .where(self._key(collection, doc_id))
                        .values(data=updated)
                    )
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot update {collection}/{doc_id}: {e}") from e
        return updated

    async def delete(self, collection: str, doc_id: str) -> bool:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(documents_tbl).where(self._key(collection, doc_id))
                    )
                    deleted = result.rowcount > 0
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot delete {collection}/{doc_id}: {e}") from e
        return deleted

    @staticmethod
    def _key(collection: str, doc_id: str):
        return (documents_tbl.c.collection == collection) & (documents_tbl.c.id == doc_id)

    @staticmethod
    def _to_document(doc_id: str, data: dict) -> dict:
        """DB row → document, the row id being authoritative"""
        return {**data, "id": doc_id}
