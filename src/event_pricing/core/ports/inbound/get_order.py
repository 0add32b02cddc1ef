from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from event_pricing.core.domain.model.errors import PricingError
from event_pricing.core.domain.model.order import PricedOrder


@dataclass(frozen=True)
class GetOrderQuery:
    order_id: str  # UUID string


class GetOrderUseCase(Protocol):
    def get_order(self, query: GetOrderQuery) -> Result[PricedOrder, PricingError]: ...
