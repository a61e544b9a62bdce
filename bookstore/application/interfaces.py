from abc import ABC, abstractmethod
from typing import Callable, Optional, List

from bookstore.domain.models import Book, Cart, Order, Session, User

Mutator = Callable[[dict], dict]


class DocumentStore(ABC):
    """Collections of JSON documents addressed by a string ``id``.

    ``apply`` and ``ensure`` are atomic per document: the engines never
    read a document and overwrite it in two separate steps.
    """

    @abstractmethod
    async def start(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def ping(self) -> None:
        pass

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        pass

    @abstractmethod
    async def find(self, collection: str, **filters) -> List[dict]:
        pass

    @abstractmethod
    async def insert(self, collection: str, document: dict) -> dict:
        pass

    @abstractmethod
    async def ensure(self, collection: str, doc_id: str, default: dict) -> dict:
        pass

    @abstractmethod
    async def apply(self, collection: str, doc_id: str, mutator: Mutator) -> Optional[dict]:
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        pass


class BookRepository(ABC):
    @abstractmethod
    async def list(self) -> List[Book]:
        pass

    @abstractmethod
    async def get_by_id(self, book_id: str) -> Optional[Book]:
        pass

    @abstractmethod
    async def create(self, book: Book) -> Book:
        pass

    @abstractmethod
    async def update(self, book_id: str, changes: dict) -> Optional[Book]:
        pass

    @abstractmethod
    async def delete(self, book_id: str) -> bool:
        pass


class UserRepository(ABC):
    @abstractmethod
    async def list(self) -> List[User]:
        pass

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        pass

    @abstractmethod
    async def mutate(self, user_id: str, change: Callable[[User], None]) -> Optional[User]:
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        pass


class CartRepository(ABC):
    @abstractmethod
    async def get_for_user(self, user_id: str) -> Optional[Cart]:
        pass

    @abstractmethod
    async def get_or_create(self, user_id: str) -> Cart:
        pass

    @abstractmethod
    async def mutate(self, user_id: str, change: Callable[[Cart], None]) -> Optional[Cart]:
        pass


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def list(self, user_id: Optional[str] = None) -> List[Order]:
        pass

    @abstractmethod
    async def create(self, order: Order) -> Order:
        pass

    @abstractmethod
    async def mutate(self, order_id: str, change: Callable[[Order], None]) -> Optional[Order]:
        pass


class SessionRepository(ABC):
    @abstractmethod
    async def get(self, token: str) -> Optional[Session]:
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        pass

    @abstractmethod
    async def delete(self, token: str) -> bool:
        pass


class PasswordHasher(ABC):
    @abstractmethod
    def hash(self, password: str) -> str:
        pass

    @abstractmethod
    def verify(self, password: str, hashed: str) -> bool:
        pass
