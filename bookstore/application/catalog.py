import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, List

from pydantic import BaseModel, ConfigDict, ValidationError

from bookstore.application.interfaces import BookRepository
from bookstore.domain.exceptions import BookNotFoundError, InvalidArgumentError
from bookstore.domain.models import Book

logger = logging.getLogger(__name__)


class BookDTO(BaseModel):
    """Book fields as sent by a client; unknown keys are kept."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    categories: Any = None
    list_price: Optional[float] = None
    original_price: Optional[float] = None
    discount_price: Optional[float] = None


def _build(fields: dict) -> Book:
    try:
        return Book(**fields)
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid book: {e.errors()[0]['msg']}") from e


class ListBooksUseCase:
    def __init__(self, books: BookRepository):
        self._books = books

    async def __call__(self) -> List[Book]:
        return await self._books.list()


class GetBookUseCase:
    def __init__(self, books: BookRepository):
        self._books = books

    async def __call__(self, book_id: str) -> Book:
        book = await self._books.get_by_id(book_id)
        if not book:
            raise BookNotFoundError(book_id)
        return book


class CreateBookUseCase:
    def __init__(self, books: BookRepository):
        self._books = books

    async def __call__(self, data: BookDTO) -> Book:
        if not data.name or data.original_price is None:
            raise InvalidArgumentError("Name and original price are required")

        now = datetime.now(timezone.utc)
        fields = data.model_dump(exclude_none=True)
        fields.pop("id", None)
        fields.update(
            id=str(uuid.uuid4()),
            description=data.description or "",
            categories=data.categories if data.categories is not None else {},
            list_price=data.list_price if data.list_price is not None else data.original_price,
            created_at=now,
            updated_at=now,
        )
        book = await self._books.create(_build(fields))
        logger.info(f"Book {book.id} created: {book.name}")
        return book


class UpdateBookUseCase:
    def __init__(self, books: BookRepository):
        self._books = books

    async def __call__(self, book_id: str, data: BookDTO) -> Book:
        changes = data.model_dump(exclude_unset=True)
        for field in ("id", "created_at"):
            changes.pop(field, None)
        if changes.get("name") == "":
            raise InvalidArgumentError("Name cannot be empty")
        for field in ("name", "original_price", "list_price"):
            if field in changes and changes[field] is None:
                changes.pop(field)
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            book = await self._books.update(book_id, changes)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid book: {e.errors()[0]['msg']}") from e
        if not book:
            raise BookNotFoundError(book_id)
        logger.info(f"Book {book_id} updated")
        return book


class DeleteBookUseCase:
    def __init__(self, books: BookRepository):
        self._books = books

    async def __call__(self, book_id: str) -> None:
        if not await self._books.delete(book_id):
            raise BookNotFoundError(book_id)
        logger.info(f"Book {book_id} deleted")
