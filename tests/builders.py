"""Small factories shared by the test modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from returns.result import Failure, Result, Success

from event_pricing.adapters.outbound.range_table_delivery import RangeTableDeliveryFee
from event_pricing.core.domain.model.errors import PricingError, TaxProviderError
from event_pricing.core.domain.model.money import Money
from event_pricing.core.domain.model.pricing import (
    AdjustmentMode,
    AdjustmentType,
    CustomAdjustment,
    LineItem,
    PricingConfiguration,
    TaxCalculationMethod,
)
from event_pricing.core.domain.service.calculate_totals_service import (
    CalculateTotalsDeps,
    CalculateTotalsService,
)
from event_pricing.core.ports.outbound.tax import TaxProvider, TaxQuote, TaxRequest


def item(id: str, price: str, quantity: int = 1, **kw) -> LineItem:
    return LineItem(id=id, price=Money.of(price), quantity=quantity, **kw)


def discount(
    value: str, type: AdjustmentType = AdjustmentType.PERCENTAGE, **kw
) -> CustomAdjustment:
    return CustomAdjustment(
        id=kw.pop("id", "disc"),
        label=kw.pop("label", "Discount"),
        type=type,
        mode=AdjustmentMode.DISCOUNT,
        value=Decimal(value),
        **kw,
    )


def surcharge(
    value: str, type: AdjustmentType = AdjustmentType.FIXED, **kw
) -> CustomAdjustment:
    return CustomAdjustment(
        id=kw.pop("id", "sur"),
        label=kw.pop("label", "Surcharge"),
        type=type,
        mode=AdjustmentMode.SURCHARGE,
        value=Decimal(value),
        **kw,
    )


def manual(rate: str = "8", **kw) -> PricingConfiguration:
    return PricingConfiguration(
        tax_calculation_method=TaxCalculationMethod.MANUAL,
        manual_tax_rate=Decimal(rate),
        **kw,
    )


@dataclass
class FixedRateTaxProvider(TaxProvider):
    rate: Decimal = Decimal("0.10")
    requests: list[TaxRequest] = field(default_factory=list)

    async def compute_tax(self, request: TaxRequest) -> Result[TaxQuote, PricingError]:
        self.requests.append(request)
        return Success(
            TaxQuote(
                rate=self.rate,
                amount=Money.of(request.taxable_base.amount * self.rate),
                description="Test Tax",
                jurisdiction=request.jurisdiction,
            )
        )


@dataclass
class FailingTaxProvider(TaxProvider):
    async def compute_tax(self, request: TaxRequest) -> Result[TaxQuote, PricingError]:
        return Failure(TaxProviderError("service down", jurisdiction=request.jurisdiction))


@dataclass
class RaisingTaxProvider(TaxProvider):
    async def compute_tax(self, request: TaxRequest) -> Result[TaxQuote, PricingError]:
        raise RuntimeError("tax client bug")


def pricing_service(tax: TaxProvider | None = None) -> CalculateTotalsService:
    return CalculateTotalsService(
        CalculateTotalsDeps(
            tax=tax or FixedRateTaxProvider(), delivery=RangeTableDeliveryFee()
        )
    )
