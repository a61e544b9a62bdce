import logging
from datetime import datetime, timezone
from typing import Any, Optional, List
import uuid

from pydantic import BaseModel

from bookstore.application.interfaces import BookRepository, CartRepository, OrderRepository
from bookstore.application.update_cart import is_whole_number
from bookstore.domain.exceptions import BookNotFoundError, InvalidArgumentError
from bookstore.domain.models import Cart, Order, OrderItem, OrderStatus

logger = logging.getLogger(__name__)


class OrderLineDTO(BaseModel):
    book_id: Optional[str] = None
    quantity: Any = None


class CreateOrderDTO(BaseModel):
    user_id: str
    items: List[OrderLineDTO]
    shipping_address: Any = None
    payment_method: Any = None


def _is_missing(value: Any) -> bool:
    # {} and 0 are accepted as given
    return value is None or value == ""


class CreateOrderUseCase:
    def __init__(self, orders: OrderRepository, carts: CartRepository, books: BookRepository):
        self._orders = orders
        self._carts = carts
        self._books = books

    async def __call__(self, order_data: CreateOrderDTO) -> Order:
        logger.info(f"Placing order for user {order_data.user_id}, {len(order_data.items)} item(s)")

        # 1. Shape of the request
        if not order_data.items:
            raise InvalidArgumentError("Order must contain at least one item")
        if _is_missing(order_data.shipping_address):
            raise InvalidArgumentError("Shipping address is required")
        if _is_missing(order_data.payment_method):
            raise InvalidArgumentError("Payment method is required")
        for line in order_data.items:
            if not line.book_id or line.quantity is None:
                raise InvalidArgumentError("Each item must have a bookId and quantity")
            if not is_whole_number(line.quantity) or line.quantity < 1:
                raise InvalidArgumentError("Item quantity must be a positive integer")

        # 2. Catalog lookup and price snapshot
        items = []
        total_price = 0.0
        for line in order_data.items:
            book = await self._books.get_by_id(line.book_id)
            if book is None:
                raise BookNotFoundError(line.book_id)
            price = book.effective_price
            total_price += price * line.quantity
            items.append(OrderItem(book_id=line.book_id, quantity=line.quantity, price=price, name=book.name))

        # 3. Persist
        now = datetime.now(timezone.utc)
        order = Order(
            id=str(uuid.uuid4()),
            user_id=order_data.user_id,
            items=items,
            total_price=total_price,
            status=OrderStatus.PENDING,
            shipping_address=order_data.shipping_address,
            payment_method=order_data.payment_method,
            created_at=now,
            updated_at=now,
        )
        order = await self._orders.create(order)
        logger.info(f"Order {order.id} created, total {order.total_price}")

        # 4. Empty the cart; the order stands even if this fails
        try:
            await self._clear_cart(order.user_id)
        except Exception as e:
            logger.error(
                f"Order {order.id} placed but cart of user {order.user_id} was not cleared: {e}",
                extra={"order_id": order.id, "user_id": order.user_id},
                exc_info=True,
            )

        return order

    async def _clear_cart(self, user_id: str) -> None:
        if await self._carts.get_for_user(user_id) is None:
            logger.warning(f"No cart to clear for user {user_id}", extra={"user_id": user_id})
            return

        def clear(cart: Cart) -> None:
            cart.clear(datetime.now(timezone.utc))

        await self._carts.mutate(user_id, clear)
