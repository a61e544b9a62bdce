import logging
from datetime import datetime
from typing import Any, Dict, Optional, List

from pydantic import Field

from bookstore.application.interfaces import BookRepository, CartRepository
from bookstore.domain.models import Book, Cart, Document

logger = logging.getLogger(__name__)


class CartLine(Document):
    """Cart item joined with the current catalog record"""
    id: str
    book_id: str
    quantity: int
    added_at: datetime
    name: str
    description: str = ""
    categories: Any = None
    list_price: float
    original_price: float
    discount_price: Optional[float] = None
    price: float

    @classmethod
    def join(cls, item, book: Book) -> "CartLine":
        return cls(
            id=item.id,
            book_id=item.book_id,
            quantity=item.quantity,
            added_at=item.added_at,
            name=book.name,
            description=book.description,
            categories=book.categories,
            list_price=book.list_price,
            original_price=book.original_price,
            discount_price=book.discount_price,
            price=book.effective_price,
        )


class CartView(Document):
    id: str
    user_id: str
    items: List[CartLine] = Field(default_factory=list)
    total_items: int = 0
    subtotal: float = 0
    total_discount: float = 0
    total: float = 0
    created_at: datetime
    updated_at: datetime


async def build_cart_view(cart: Cart, books: BookRepository) -> CartView:
    found: Dict[str, Optional[Book]] = {}
    lines = []
    for item in cart.items:
        if item.book_id not in found:
            found[item.book_id] = await books.get_by_id(item.book_id)
        book = found[item.book_id]
        if book is None:
            # stays stored, just not shown
            logger.debug(f"Book {item.book_id} in cart {cart.id} no longer exists")
            continue
        lines.append(CartLine.join(item, book))

    subtotal = 0.0
    total = 0.0
    for line in lines:
        subtotal += line.original_price * line.quantity
        total += line.price * line.quantity

    return CartView(
        id=cart.id,
        user_id=cart.user_id,
        items=lines,
        total_items=sum(line.quantity for line in lines),
        subtotal=subtotal,
        total_discount=subtotal - total,
        total=total,
        created_at=cart.created_at,
        updated_at=cart.updated_at,
    )


class GetCartUseCase:
    def __init__(self, carts: CartRepository, books: BookRepository):
        self._carts = carts
        self._books = books

    async def __call__(self, user_id: str) -> CartView:
        cart = await self._carts.get_or_create(user_id)
        return await build_cart_view(cart, self._books)
