from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Tuple
from uuid import UUID, uuid4

from event_pricing.core.domain.model.pricing import (
    CustomAdjustment,
    LineItem,
    PricingConfiguration,
    PricingContext,
    PricingSnapshot,
)


@dataclass(frozen=True)
class OrderId:
    value: UUID

    @staticmethod
    def new() -> "OrderId":
        return OrderId(uuid4())


@dataclass(frozen=True)
class PricedOrder:
    """An order or invoice record as the pricing engine sees it."""

    order_id: OrderId
    line_items: Tuple[LineItem, ...]
    adjustments: Tuple[CustomAdjustment, ...]
    context: PricingContext
    config: PricingConfiguration
    created_at: datetime
    snapshot: PricingSnapshot | None = None

    def has_complete_snapshot(self) -> bool:
        return self.snapshot is not None and self.snapshot.is_consistent()

    def with_snapshot(self, snapshot: PricingSnapshot) -> "PricedOrder":
        return replace(self, snapshot=snapshot)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
