from datetime import datetime, timezone
from typing import Callable, Optional, List

from pydantic import ValidationError

from bookstore.application.interfaces import (
    BookRepository,
    CartRepository,
    DocumentStore,
    OrderRepository,
    SessionRepository,
    UserRepository,
)
from bookstore.domain.exceptions import StorageError
from bookstore.domain.models import Book, Cart, Order, Session, User


class DocumentBookRepository(BookRepository):
    collection = "books"

    def __init__(self, store: DocumentStore):
        self._store = store

    async def list(self) -> List[Book]:
        return [_load(Book, doc) for doc in await self._store.find(self.collection)]

    async def get_by_id(self, book_id: str) -> Optional[Book]:
        doc = await self._store.get(self.collection, book_id)
        return _load(Book, doc) if doc else None

    async def create(self, book: Book) -> Book:
        return _load(Book, await self._store.insert(self.collection, book.to_document()))

    async def update(self, book_id: str, changes: dict) -> Optional[Book]:
        def merge(doc: dict) -> dict:
            # validate the merged record before it is written
            return Book(**{**doc, **changes}).to_document()

        doc = await self._store.apply(self.collection, book_id, merge)
        return _load(Book, doc) if doc else None

    async def delete(self, book_id: str) -> bool:
        return await self._store.delete(self.collection, book_id)


class DocumentUserRepository(UserRepository):
    collection = "users"

    def __init__(self, store: DocumentStore):
        self._store = store

    async def list(self) -> List[User]:
        return [_load(User, doc) for doc in await self._store.find(self.collection)]

    async def get_by_id(self, user_id: str) -> Optional[User]:
        doc = await self._store.get(self.collection, user_id)
        return _load(User, doc) if doc else None

    async def get_by_email(self, email: str) -> Optional[User]:
        docs = await self._store.find(self.collection, email=email)
        return _load(User, docs[0]) if docs else None

    async def create(self, user: User) -> User:
        return _load(User, await self._store.insert(self.collection, user.to_document()))

    async def mutate(self, user_id: str, change: Callable[[User], None]) -> Optional[User]:
        doc = await self._store.apply(self.collection, user_id, _mutator(User, change))
        return _load(User, doc) if doc else None

    async def delete(self, user_id: str) -> bool:
        return await self._store.delete(self.collection, user_id)


class DocumentCartRepository(CartRepository):
    collection = "carts"

    def __init__(self, store: DocumentStore):
        self._store = store

    async def get_for_user(self, user_id: str) -> Optional[Cart]:
        doc = await self._store.get(self.collection, user_id)
        return _load(Cart, doc) if doc else None

    async def get_or_create(self, user_id: str) -> Cart:
        empty = Cart.empty(user_id, datetime.now(timezone.utc))
        doc = await self._store.ensure(self.collection, empty.id, empty.to_document())
        return _load(Cart, doc)

    async def mutate(self, user_id: str, change: Callable[[Cart], None]) -> Optional[Cart]:
        doc = await self._store.apply(self.collection, user_id, _mutator(Cart, change))
        return _load(Cart, doc) if doc else None


class DocumentOrderRepository(OrderRepository):
    collection = "orders"

    def __init__(self, store: DocumentStore):
        self._store = store

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        doc = await self._store.get(self.collection, order_id)
        return _load(Order, doc) if doc else None

    async def list(self, user_id: Optional[str] = None) -> List[Order]:
        filters = {"userId": user_id} if user_id is not None else {}
        return [_load(Order, doc) for doc in await self._store.find(self.collection, **filters)]

    async def create(self, order: Order) -> Order:
        return _load(Order, await self._store.insert(self.collection, order.to_document()))

    async def mutate(self, order_id: str, change: Callable[[Order], None]) -> Optional[Order]:
        doc = await self._store.apply(self.collection, order_id, _mutator(Order, change))
        return _load(Order, doc) if doc else None


class DocumentSessionRepository(SessionRepository):
    collection = "sessions"

    def __init__(self, store: DocumentStore):
        self._store = store

    async def get(self, token: str) -> Optional[Session]:
        doc = await self._store.get(self.collection, token)
        return _load(Session, doc) if doc else None

    async def create(self, session: Session) -> Session:
        return _load(Session, await self._store.insert(self.collection, session.to_document()))

    async def delete(self, token: str) -> bool:
        return await self._store.delete(self.collection, token)


def _mutator(model, change):
    """Document mutator that round-trips through the domain model."""
    def apply(doc: dict) -> dict:
        entity = _load(model, doc)
        change(entity)
        return entity.to_document()
    return apply


def _load(model, doc: dict):
    try:
        return model(**doc)
    except ValidationError as e:
        raise StorageError(f"Malformed {model.__name__} document {doc.get('id')}: {e.errors()[0]['msg']}") from e
