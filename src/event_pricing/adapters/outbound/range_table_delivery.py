from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple

from event_pricing.core.domain.model.money import Money
from event_pricing.core.domain.model.pricing import DeliveryRules
from event_pricing.core.ports.outbound.delivery import DeliveryFeeStrategy, DeliveryQuote

logger = logging.getLogger(__name__)

MAX_DELIVERY_MILES = Decimal("100")

_DASHES = re.compile(r"[–—−]")
_UNITS = re.compile(r"\bmi(?:les?)?\b")
_RANGE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:-\s*(\d+(?:\.\d+)?))?")


def parse_distance_range(label: str) -> Tuple[Decimal, Decimal]:
    """Parse "0-10 miles", "10–15 mi" or "5 miles" into ``(min, max)``.

    A single number means ``(n, n)``. The upper bound is capped at 100 miles;
    unparseable labels give ``(0, 0)``.
    """
    if not label:
        return Decimal("0"), Decimal("0")
    text = _UNITS.sub("", _DASHES.sub("-", label.lower()))
    text = re.sub(r"[^\d.\-\s]", "", text).strip()
    match = _RANGE.search(text)
    if not match:
        return Decimal("0"), Decimal("0")
    low = Decimal(match.group(1))
    high = Decimal(match.group(2)) if match.group(2) else low
    return low, min(high, MAX_DELIVERY_MILES)


@dataclass(frozen=True)
class RangeTableDeliveryFee(DeliveryFeeStrategy):
    """Vendor-configured distance tiers, each with a flat fee."""

    def compute_delivery_fee(
        self, distance_miles: Decimal | None, rules: DeliveryRules, currency: str
    ) -> DeliveryQuote:
        if not rules.offers_delivery:
            return DeliveryQuote(
                fee=Money.zero(currency),
                range="N/A",
                eligible=False,
                reason="Delivery not offered by this service",
            )
        if not rules.ranges:
            return DeliveryQuote(
                fee=Money.zero(currency), range="No range specified", eligible=True
            )

        first = rules.ranges[0]
        if not distance_miles:
            return DeliveryQuote(
                fee=first.fee,
                range=first.label,
                eligible=True,
                reason="Distance calculation unavailable - using first delivery range",
            )

        bounds = [(r, *parse_distance_range(r.label)) for r in rules.ranges]
        for r, low, high in bounds:
            if low <= distance_miles <= high:
                return DeliveryQuote(fee=r.fee, range=r.label, eligible=True)

        furthest = max(high for _, _, high in bounds)
        if distance_miles > furthest:
            logger.debug("distance %s mi beyond %s mi", distance_miles, furthest)
            return DeliveryQuote(
                fee=Money.zero(currency),
                range=f"Beyond {furthest} miles",
                eligible=False,
                reason=f"Delivery not available beyond {furthest} miles",
            )

        # gap between configured tiers
        return DeliveryQuote(
            fee=first.fee,
            range=first.label,
            eligible=True,
            reason="Using default delivery range",
        )
