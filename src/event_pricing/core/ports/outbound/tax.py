from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from returns.result import Result

from event_pricing.core.domain.model.errors import PricingError
from event_pricing.core.domain.model.money import Money


@dataclass(frozen=True)
class TaxRequest:
    taxable_base: Money
    jurisdiction: str
    delivery_fee: Money


@dataclass(frozen=True)
class TaxQuote:
    rate: Decimal  # fraction, e.g. 0.0863
    amount: Money
    description: str
    jurisdiction: str
    # base the provider actually taxed, when it differs from the request
    taxable_base: Money | None = None


class TaxProvider(Protocol):
    """Only consulted when the tax calculation method is automatic.

    The quote is taken as-is; jurisdiction rules live behind this port.
    """

    async def compute_tax(
        self, request: TaxRequest
    ) -> Result[TaxQuote, PricingError]: ...
