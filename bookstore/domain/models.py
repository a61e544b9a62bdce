import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bookstore.domain.exceptions import CartItemNotFoundError


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Document(BaseModel):
    """Base for entities stored with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Book(BaseModel):
    """Catalog entry, stored with the snake_case keys of the original data set"""
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    description: str = ""
    categories: Any = Field(default_factory=dict)
    list_price: float = Field(ge=0)
    original_price: float = Field(ge=0)
    discount_price: Optional[float] = Field(default=None, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def effective_price(self) -> float:
        """Discount wins over the original price whenever it is set."""
        if self.discount_price is not None:
            return self.discount_price
        return self.original_price

    def to_document(self) -> dict:
        return self.model_dump(mode="json")


class User(Document):
    model_config = ConfigDict(extra="allow")

    id: str
    email: str
    password_hash: str = Field(alias="password")
    fullname: Optional[str] = None
    phone: Optional[str] = None
    # json-server-auth records carry neither timestamps nor a role
    role: Role = Role.USER
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Identity(BaseModel):
    """Authenticated caller attached to a request by the auth gate"""
    id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_access(self, owner_id: str) -> bool:
        return self.is_admin or self.id == owner_id


class Session(Document):
    id: str
    user_id: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class CartItem(Document):
    id: str
    book_id: str
    quantity: int = Field(ge=1)
    added_at: datetime


class Cart(Document):
    """One cart per user; every line mutation goes through the methods below."""
    id: str
    user_id: str
    items: List[CartItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def empty(cls, user_id: str, now: datetime) -> "Cart":
        # keyed by the owner so lazy creation can never produce a second cart
        return cls(id=user_id, user_id=user_id, items=[], created_at=now, updated_at=now)

    def find_item(self, item_id: str) -> CartItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise CartItemNotFoundError(f"Cart item {item_id} not found")

    def add_item(self, book_id: str, quantity: int, now: datetime) -> CartItem:
        """Merge into the existing line for the book, or append a new one."""
        for item in self.items:
            if item.book_id == book_id:
                item.quantity += quantity
                break
        else:
            item = CartItem(id=str(uuid.uuid4()), book_id=book_id, quantity=quantity, added_at=now)
            self.items.append(item)
        self.updated_at = now
        return item

    def set_quantity(self, item_id: str, quantity: int, now: datetime) -> None:
        item = self.find_item(item_id)
        if quantity == 0:
            self.items.remove(item)
        else:
            item.quantity = quantity
        self.updated_at = now

    def remove_item(self, item_id: str, now: datetime) -> None:
        self.items.remove(self.find_item(item_id))
        self.updated_at = now

    def clear(self, now: datetime) -> None:
        self.items = []
        self.updated_at = now


class OrderItem(Document):
    """Snapshot of a book at the moment the order was placed"""
    book_id: str
    quantity: int
    price: float
    name: str


class Order(Document):
    id: str
    user_id: str
    items: List[OrderItem]
    total_price: float
    status: OrderStatus = OrderStatus.PENDING
    shipping_address: Any
    payment_method: Any
    created_at: datetime
    updated_at: datetime

    def change_status(self, status: OrderStatus, now: datetime) -> None:
        self.status = status
        self.updated_at = now
