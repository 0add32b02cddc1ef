from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from returns.result import Result

from event_pricing.core.domain.model.errors import PricingError
from event_pricing.core.domain.model.pricing import (
    CustomAdjustment,
    LineItem,
    PricingConfiguration,
    PricingContext,
    PricingSnapshot,
)


@dataclass(frozen=True)
class CalculateTotalsCommand:
    line_items: Sequence[LineItem]
    adjustments: Sequence[CustomAdjustment] = ()
    config: PricingConfiguration = field(default_factory=PricingConfiguration)
    context: PricingContext = field(default_factory=PricingContext)


@dataclass(frozen=True)
class PricingPreview:
    snapshot: PricingSnapshot
    error: str | None = None
    tax_pending: bool = False


class CalculateTotalsUseCase(Protocol):
    async def calculate_totals(
        self, command: CalculateTotalsCommand
    ) -> Result[PricingSnapshot, PricingError]: ...

    async def preview_totals(self, command: CalculateTotalsCommand) -> PricingPreview: ...
