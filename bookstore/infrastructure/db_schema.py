from sqlalchemy import Table, Column, String, Integer, DateTime, JSON, MetaData, UniqueConstraint
from sqlalchemy.sql import func

metadata = MetaData()

COLLECTIONS = ("books", "users", "carts", "orders", "sessions")


# One JSON document per row; seq keeps insertion order
documents_tbl = Table(
    "documents",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("collection", String(64), nullable=False, index=True),
    Column("id", String(64), nullable=False),
    Column("data", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    UniqueConstraint("collection", "id", name="uq_documents_collection_id"),
)
