from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from returns.result import Failure, Result, Success

from event_pricing.core.domain.model.errors import InvalidInputError, PricingError
from event_pricing.core.domain.model.order import OrderId, PricedOrder
from event_pricing.core.domain.model.pricing import PricingSnapshot
from event_pricing.core.ports.inbound.calculate_totals import (
    CalculateTotalsCommand,
    CalculateTotalsUseCase,
)
from event_pricing.core.ports.inbound.rebuild_snapshot import (
    RebuildOutcome,
    RebuildReport,
    RebuildSnapshotCommand,
    RebuildSnapshotUseCase,
)
from event_pricing.core.ports.outbound.orders import OrderRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebuildSnapshotDeps:
    orders: OrderRepository
    pricing: CalculateTotalsUseCase


@dataclass(frozen=True)
class RebuildSnapshotService(RebuildSnapshotUseCase):
    """Administrative correction tool for stale or incomplete snapshots."""

    deps: RebuildSnapshotDeps

    async def rebuild_snapshot(
        self, command: RebuildSnapshotCommand
    ) -> Result[PricingSnapshot, PricingError]:
        try:
            oid = OrderId(UUID(command.order_id))
        except ValueError:
            return Failure(InvalidInputError("order_id must be a valid UUID"))

        got = self.deps.orders.get(oid)
        if isinstance(got, Failure):
            return got
        return await self._rebuild(got.unwrap())

    async def rebuild_incomplete(self) -> Result[RebuildReport, PricingError]:
        listed = self.deps.orders.list_incomplete()
        if isinstance(listed, Failure):
            return listed

        details: list[RebuildOutcome] = []
        for order in listed.unwrap():
            oid = str(order.order_id.value)
            if not order.line_items:
                details.append(RebuildOutcome(oid, "skipped", reason="no line items"))
                continue

            try:
                result = await self._rebuild(order)
            except Exception as e:  # noqa: BLE001
                logger.exception("snapshot rebuild crashed for %s", oid)
                details.append(
                    RebuildOutcome(oid, "failed", reason=f"{type(e).__name__}: {e}")
                )
                continue

            if isinstance(result, Success):
                details.append(RebuildOutcome(oid, "updated", snapshot=result.unwrap()))
            else:
                err = result.failure()
                logger.warning("snapshot rebuild failed for %s: %s", oid, err)
                details.append(
                    RebuildOutcome(oid, "failed", reason=f"{type(err).__name__}: {err}")
                )

        report = RebuildReport(
            total=len(details),
            updated=sum(1 for d in details if d.status == "updated"),
            failed=sum(1 for d in details if d.status == "failed"),
            skipped=sum(1 for d in details if d.status == "skipped"),
            details=tuple(details),
        )
        logger.info(
            "snapshot rebuild finished: total=%d updated=%d failed=%d skipped=%d",
            report.total,
            report.updated,
            report.failed,
            report.skipped,
        )
        return Success(report)

    async def _rebuild(self, order: PricedOrder) -> Result[PricingSnapshot, PricingError]:
        priced = await self.deps.pricing.calculate_totals(_command_for(order))
        if isinstance(priced, Failure):
            return priced

        snapshot = priced.unwrap()
        summary = rebuild_summary(snapshot)
        saved = self.deps.orders.replace_snapshot(order.order_id, snapshot, summary)
        if isinstance(saved, Success):
            logger.info("order %s: %s", order.order_id.value, summary)
        return saved.map(lambda _: snapshot)


def _command_for(order: PricedOrder) -> CalculateTotalsCommand:
    return CalculateTotalsCommand(
        line_items=order.line_items,
        adjustments=order.adjustments,
        config=order.config,
        context=order.context,
    )


def rebuild_summary(snapshot: PricingSnapshot) -> str:
    return (
        f"rebuilt pricing snapshot: {snapshot.item_count} items, "
        f"total ${snapshot.total.amount:,.2f}"
    )
