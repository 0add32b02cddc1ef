from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from returns.result import Failure, Result

from event_pricing.core.domain.model.errors import InvalidInputError, PricingError
from event_pricing.core.domain.model.order import OrderId, PricedOrder
from event_pricing.core.ports.inbound.get_order import GetOrderQuery, GetOrderUseCase
from event_pricing.core.ports.outbound.orders import OrderRepository


@dataclass(frozen=True)
class GetOrderDeps:
    orders: OrderRepository


@dataclass(frozen=True)
class GetOrderService(GetOrderUseCase):
    deps: GetOrderDeps

    def get_order(self, query: GetOrderQuery) -> Result[PricedOrder, PricingError]:
        try:
            oid = OrderId(UUID(query.order_id))
        except ValueError:
            return Failure(InvalidInputError("order_id must be a valid UUID"))

        return self.deps.orders.get(oid)
