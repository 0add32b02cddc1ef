from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from event_pricing.core.domain.model.errors import PricingError
from event_pricing.core.domain.model.order import OrderId, PricedOrder
from event_pricing.core.domain.model.pricing import PricingSnapshot


class OrderRepository(Protocol):
    def save(self, order: PricedOrder) -> Result[OrderId, PricingError]: ...

    def get(self, order_id: OrderId) -> Result[PricedOrder, PricingError]: ...

    def list_incomplete(self) -> Result[Sequence[PricedOrder], PricingError]:
        """Records whose snapshot is missing or does not add up."""
        ...

    def replace_snapshot(
        self, order_id: OrderId, snapshot: PricingSnapshot, summary: str
    ) -> Result[None, PricingError]:
        """Overwrite the stored snapshot; line items stay untouched."""
        ...
