from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

from returns.result import Result

from event_pricing.core.domain.model.errors import PricingError
from event_pricing.core.domain.model.pricing import PricingSnapshot

RebuildStatus = Literal["updated", "failed", "skipped"]


@dataclass(frozen=True)
class RebuildSnapshotCommand:
    order_id: str  # UUID string


@dataclass(frozen=True)
class RebuildOutcome:
    order_id: str
    status: RebuildStatus
    reason: str | None = None
    snapshot: PricingSnapshot | None = None


@dataclass(frozen=True)
class RebuildReport:
    total: int
    updated: int
    failed: int
    skipped: int
    details: Sequence[RebuildOutcome]


class RebuildSnapshotUseCase(Protocol):
    async def rebuild_snapshot(
        self, command: RebuildSnapshotCommand
    ) -> Result[PricingSnapshot, PricingError]: ...

    async def rebuild_incomplete(self) -> Result[RebuildReport, PricingError]: ...
