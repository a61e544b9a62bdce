import logging
from datetime import datetime, timezone
from typing import Any, Optional

from bookstore.application.get_cart import CartView, build_cart_view
from bookstore.application.interfaces import BookRepository, CartRepository
from bookstore.domain.exceptions import BookNotFoundError, CartNotFoundError, InvalidArgumentError
from bookstore.domain.models import Cart

logger = logging.getLogger(__name__)


def is_whole_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class AddCartItemUseCase:
    def __init__(self, carts: CartRepository, books: BookRepository):
        self._carts = carts
        self._books = books

    async def __call__(self, user_id: str, book_id: Optional[str], quantity: Any) -> CartView:
        if not book_id:
            raise InvalidArgumentError("bookId is required")
        if not is_whole_number(quantity) or quantity < 1:
            raise InvalidArgumentError("quantity must be a positive integer")

        if await self._books.get_by_id(book_id) is None:
            raise BookNotFoundError(book_id)

        await self._carts.get_or_create(user_id)

        def add(cart: Cart) -> None:
            cart.add_item(book_id, quantity, datetime.now(timezone.utc))

        cart = await self._carts.mutate(user_id, add)
        if cart is None:
            raise CartNotFoundError(f"Cart for user {user_id} not found")
        logger.info(f"Added {quantity} x book {book_id} to cart of user {user_id}")
        return await build_cart_view(cart, self._books)


class SetCartItemQuantityUseCase:
    def __init__(self, carts: CartRepository, books: BookRepository):
        self._carts = carts
        self._books = books

    async def __call__(self, user_id: str, item_id: str, quantity: Any) -> CartView:
        if not is_whole_number(quantity):
            raise InvalidArgumentError("quantity must be an integer")
        if quantity < 0:
            raise InvalidArgumentError("quantity cannot be negative")

        def set_quantity(cart: Cart) -> None:
            cart.set_quantity(item_id, quantity, datetime.now(timezone.utc))

        cart = await self._carts.mutate(user_id, set_quantity)
        if cart is None:
            raise CartNotFoundError(f"Cart for user {user_id} not found")
        return await build_cart_view(cart, self._books)


class RemoveCartItemUseCase:
    def __init__(self, carts: CartRepository, books: BookRepository):
        self._carts = carts
        self._books = books

    async def __call__(self, user_id: str, item_id: str) -> CartView:
        def remove(cart: Cart) -> None:
            cart.remove_item(item_id, datetime.now(timezone.utc))

        cart = await self._carts.mutate(user_id, remove)
        if cart is None:
            raise CartNotFoundError(f"Cart for user {user_id} not found")
        return await build_cart_view(cart, self._books)
