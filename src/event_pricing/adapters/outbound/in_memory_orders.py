from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

from returns.result import Failure, Result, Success

from event_pricing.core.domain.model.errors import (
    OrderNotFound,
    PersistenceError,
    PricingError,
)
from event_pricing.core.domain.model.order import OrderId, PricedOrder
from event_pricing.core.domain.model.pricing import PricingSnapshot
from event_pricing.core.ports.outbound.orders import OrderRepository


@dataclass
class InMemoryOrderRepository(OrderRepository):
    _store: Dict[str, PricedOrder] = field(default_factory=dict)
    # (order_id, summary) per snapshot overwrite
    audit_log: List[Tuple[str, str]] = field(default_factory=list)
    read_only_ids: Set[str] = field(default_factory=set)

    def save(self, order: PricedOrder) -> Result[OrderId, PricingError]:
        key = str(order.order_id.value)
        if key in self._store:
            return Failure(PersistenceError(message="order_id already exists"))
        self._store[key] = order
        return Success(order.order_id)

    def get(self, order_id: OrderId) -> Result[PricedOrder, PricingError]:
        key = str(order_id.value)
        if key not in self._store:
            return Failure(OrderNotFound(message="order not found", order_id=key))
        return Success(self._store[key])

    def list_incomplete(self) -> Result[Sequence[PricedOrder], PricingError]:
        orders = sorted(self._store.values(), key=lambda o: o.created_at)
        return Success(tuple(o for o in orders if not o.has_complete_snapshot()))

    def replace_snapshot(
        self, order_id: OrderId, snapshot: PricingSnapshot, summary: str
    ) -> Result[None, PricingError]:
        key = str(order_id.value)
        order = self._store.get(key)
        if order is None:
            return Failure(OrderNotFound(message="order not found", order_id=key))
        if key in self.read_only_ids:
            return Failure(PersistenceError(message=f"order {key} is read-only"))

        self._store[key] = order.with_snapshot(snapshot)
        self.audit_log.append((key, summary))
        return Success(None)
