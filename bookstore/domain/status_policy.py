from typing import Dict, FrozenSet, Mapping

from bookstore.domain.exceptions import InvalidStatusTransitionError
from bookstore.domain.models import OrderStatus


class StatusTransitionPolicy:
    """Rule table deciding which order status changes an admin may perform."""

    def __init__(self, name: str, rules: Mapping[OrderStatus, FrozenSet[OrderStatus]]):
        self.name = name
        self._rules: Dict[OrderStatus, FrozenSet[OrderStatus]] = dict(rules)

    def allows(self, current: OrderStatus, requested: OrderStatus) -> bool:
        return requested in self._rules.get(current, frozenset())

    def check(self, current: OrderStatus, requested: OrderStatus) -> None:
        if not self.allows(current, requested):
            raise InvalidStatusTransitionError(current.value, requested.value)


OPEN_POLICY = StatusTransitionPolicy(
    "open",
    {status: frozenset(OrderStatus) for status in OrderStatus},
)

LIFECYCLE_POLICY = StatusTransitionPolicy(
    "lifecycle",
    {
        OrderStatus.PENDING: frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
        OrderStatus.PROCESSING: frozenset({OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
        OrderStatus.SHIPPED: frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED}),
        OrderStatus.DELIVERED: frozenset({OrderStatus.DELIVERED}),
        OrderStatus.CANCELLED: frozenset({OrderStatus.CANCELLED}),
    },
)

POLICIES = {policy.name: policy for policy in (OPEN_POLICY, LIFECYCLE_POLICY)}


def get_policy(name: str) -> StatusTransitionPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown order status policy: {name}") from None
