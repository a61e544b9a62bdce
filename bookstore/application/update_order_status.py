import logging
from datetime import datetime, timezone
from typing import Any

from bookstore.application.interfaces import OrderRepository
from bookstore.domain.exceptions import InvalidArgumentError, OrderNotFoundError, PermissionDeniedError
from bookstore.domain.models import Identity, Order, OrderStatus
from bookstore.domain.status_policy import OPEN_POLICY, StatusTransitionPolicy

logger = logging.getLogger(__name__)

VALID_STATUSES = [status.value for status in OrderStatus]


class UpdateOrderStatusUseCase:
    def __init__(self, orders: OrderRepository, policy: StatusTransitionPolicy = OPEN_POLICY):
        self._orders = orders
        self._policy = policy

    async def __call__(self, actor: Identity, order_id: str, status: Any) -> Order:
        if not actor.is_admin:
            raise PermissionDeniedError("Not authorized")
        if status not in VALID_STATUSES:
            raise InvalidArgumentError(f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}")
        new_status = OrderStatus(status)

        def change(order: Order) -> None:
            self._policy.check(order.status, new_status)
            order.change_status(new_status, datetime.now(timezone.utc))

        order = await self._orders.mutate(order_id, change)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        logger.info(f"Order {order_id} status set to {new_status.value} by {actor.id}")
        return order
