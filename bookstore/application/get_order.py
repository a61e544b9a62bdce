from typing import Dict, Optional, List

from bookstore.application.interfaces import BookRepository, OrderRepository
from bookstore.domain.exceptions import OrderNotFoundError, PermissionDeniedError
from bookstore.domain.models import Book, Identity, Order, OrderItem


class OrderLineView(OrderItem):
    book: Optional[Book] = None


class OrderView(Order):
    """Order with each snapshot line joined to the book as it is now"""
    items: List[OrderLineView]


async def build_order_view(order: Order, books: BookRepository, cache: Optional[Dict[str, Optional[Book]]] = None) -> OrderView:
    cache = {} if cache is None else cache
    lines = []
    for item in order.items:
        if item.book_id not in cache:
            cache[item.book_id] = await books.get_by_id(item.book_id)
        lines.append(OrderLineView(**item.model_dump(), book=cache[item.book_id]))
    return OrderView(**order.model_dump(exclude={"items"}), items=lines)


class GetOrderUseCase:
    def __init__(self, orders: OrderRepository, books: BookRepository):
        self._orders = orders
        self._books = books

    async def __call__(self, actor: Identity, order_id: str) -> OrderView:
        order = await self._orders.get_by_id(order_id)
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found")
        if not actor.can_access(order.user_id):
            raise PermissionDeniedError("Not authorized to view this order")
        return await build_order_view(order, self._books)


class ListOrdersUseCase:
    def __init__(self, orders: OrderRepository, books: BookRepository):
        self._orders = orders
        self._books = books

    async def __call__(
        self,
        actor: Identity,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[OrderView]:
        if not actor.is_admin:
            # other users' orders are never visible to a regular user
            user_id = actor.id

        # an empty filter value means no filter
        orders = await self._orders.list(user_id=user_id or None)
        cache: Dict[str, Optional[Book]] = {}
        return [
            await build_order_view(order, self._books, cache)
            for order in orders
            if not status or order.status == status
        ]
