import logging
from sqlalchemy.ext.asyncio import create_async_engine

from bookstore.application.interfaces import DocumentStore
from bookstore.config import Settings
from bookstore.infrastructure.document_store import SQLAlchemyDocumentStore
from bookstore.infrastructure.json_store import JsonFileStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> DocumentStore:
    """Pick the document store backend named by STORAGE_BACKEND"""
    if settings.STORAGE_BACKEND == "json":
        logger.info(f"Using JSON store at {settings.JSON_DB_PATH}")
        return JsonFileStore(settings.JSON_DB_PATH)

    if settings.STORAGE_BACKEND == "sql":
        if not settings.DATABASE_URL:
            raise ValueError("POSTGRES_CONNECTION_STRING is required for the sql backend")
        engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)
        logger.info("Using SQL document store")
        return SQLAlchemyDocumentStore(engine)

    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
