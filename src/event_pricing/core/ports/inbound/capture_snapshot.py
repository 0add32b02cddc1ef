from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from event_pricing.core.domain.model.errors import PricingError
from event_pricing.core.domain.model.order import OrderId
from event_pricing.core.domain.model.pricing import PricingSnapshot
from event_pricing.core.ports.inbound.calculate_totals import CalculateTotalsCommand


@dataclass(frozen=True)
class CapturedOrder:
    order_id: OrderId
    snapshot: PricingSnapshot


class CaptureSnapshotUseCase(Protocol):
    async def capture_snapshot(
        self, command: CalculateTotalsCommand
    ) -> Result[CapturedOrder, PricingError]: ...
