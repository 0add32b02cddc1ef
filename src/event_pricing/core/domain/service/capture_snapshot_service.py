from __future__ import annotations

from dataclasses import dataclass

from returns.result import Failure, Result

from event_pricing.core.domain.model.errors import PricingError
from event_pricing.core.domain.model.order import OrderId, PricedOrder, now_utc
from event_pricing.core.ports.inbound.calculate_totals import (
    CalculateTotalsCommand,
    CalculateTotalsUseCase,
)
from event_pricing.core.ports.inbound.capture_snapshot import (
    CapturedOrder,
    CaptureSnapshotUseCase,
)
from event_pricing.core.ports.outbound.orders import OrderRepository


@dataclass(frozen=True)
class CaptureSnapshotDeps:
    orders: OrderRepository
    pricing: CalculateTotalsUseCase


@dataclass(frozen=True)
class CaptureSnapshotService(CaptureSnapshotUseCase):
    deps: CaptureSnapshotDeps

    async def capture_snapshot(
        self, command: CalculateTotalsCommand
    ) -> Result[CapturedOrder, PricingError]:
        priced = await self.deps.pricing.calculate_totals(command)
        if isinstance(priced, Failure):
            return priced

        snapshot = priced.unwrap()
        order = PricedOrder(
            order_id=OrderId.new(),
            line_items=tuple(command.line_items),
            adjustments=tuple(command.adjustments),
            context=command.context,
            config=command.config,
            created_at=now_utc(),
            snapshot=snapshot,
        )
        return self.deps.orders.save(order).map(
            lambda oid: CapturedOrder(order_id=oid, snapshot=snapshot)
        )
