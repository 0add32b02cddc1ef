from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from event_pricing.core.domain.model.money import Money
from event_pricing.core.domain.model.pricing import DeliveryRules


@dataclass(frozen=True)
class DeliveryQuote:
    fee: Money
    range: str
    eligible: bool
    reason: str | None = None


class DeliveryFeeStrategy(Protocol):
    def compute_delivery_fee(
        self, distance_miles: Decimal | None, rules: DeliveryRules, currency: str
    ) -> DeliveryQuote: ...
