"""Pure pricing pipeline.

Each step takes the previous breakdown and returns a new one; nothing here
touches the network. Tax is the only step that may need a provider, so the
pipeline stops at :class:`PreTaxBreakdown` and :func:`finish` folds the tax
in once it is known.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence, Tuple

from returns.result import Failure, Result, Success

from event_pricing.core.domain.model.errors import ConfigurationError, PricingError
from event_pricing.core.domain.model.money import Money, fold_money
from event_pricing.core.domain.model.pricing import (
    NO_DELIVERY,
    AdjustmentLine,
    CustomAdjustment,
    DeliveryDetail,
    LineItem,
    MinimumWarning,
    PricingConfiguration,
    PricingContext,
    PricingSnapshot,
    ServiceFeeType,
    TaxCalculationMethod,
    TaxDetail,
)
from event_pricing.core.domain.service.jurisdiction import derive_jurisdiction
from event_pricing.core.ports.inbound.calculate_totals import CalculateTotalsCommand
from event_pricing.core.ports.outbound.delivery import DeliveryFeeStrategy

logger = logging.getLogger(__name__)

TAX_EXEMPT = "Tax Exempt"


@dataclass(frozen=True)
class PreTaxBreakdown:
    subtotal: Money
    service_fee: Money
    delivery_fee: Money
    adjustments: Tuple[AdjustmentLine, ...]
    adjustments_total: Money
    taxable_base: Money
    delivery_detail: DeliveryDetail
    item_count: int
    is_tax_exempt: bool
    is_service_fee_waived: bool


def subtotal_of(items: Sequence[LineItem], currency: str) -> Money:
    return fold_money((li.line_total() for li in items), currency=currency)


def service_fee_for(
    subtotal: Money, config: PricingConfiguration, waived: bool
) -> Result[Money, PricingError]:
    if waived:
        return Success(Money.zero(subtotal.currency))

    fixed = Money.of(config.service_fee_fixed, subtotal.currency)
    fee_type = config.service_fee_type
    if fee_type == ServiceFeeType.PERCENTAGE:
        return Success(subtotal.percent(config.service_fee_percentage))
    if fee_type == ServiceFeeType.FIXED:
        return Success(fixed)
    if fee_type == ServiceFeeType.HYBRID:
        return Success(fixed + subtotal.percent(config.service_fee_percentage))
    return Failure(ConfigurationError(f"unrecognized service_fee_type: {fee_type!r}"))


def adjustments_for(
    adjustments: Sequence[CustomAdjustment], subtotal: Money
) -> Tuple[Tuple[AdjustmentLine, ...], Money, Money]:
    """Breakdown rows, signed total and taxable part of the adjustments.

    Percentages apply to the subtotal only. Discounts are not floored, so a
    large discount can push the total below zero.
    """
    lines = tuple(
        AdjustmentLine(
            id=adj.id,
            label=adj.label,
            type=adj.type,
            mode=adj.mode,
            value=adj.value,
            amount=adj.signed_amount(subtotal),
            taxable=adj.taxable,
        )
        for adj in adjustments
    )
    total = fold_money((ln.amount for ln in lines), currency=subtotal.currency)
    taxable = fold_money(
        (ln.amount for ln in lines if ln.taxable), currency=subtotal.currency
    )
    return lines, total, taxable


def delivery_for(
    items: Sequence[LineItem],
    context: PricingContext,
    strategy: DeliveryFeeStrategy,
    currency: str,
) -> Tuple[Money, DeliveryDetail]:
    """Sum the delivery fee of every vendor that delivers to this order."""
    if context.delivery_fee is not None:
        return context.delivery_fee, DeliveryDetail(eligible=True, range="supplied")

    delivering = [v for v in context.vendors if v.rules.offers_delivery]
    if not delivering:
        return Money.zero(currency), NO_DELIVERY

    by_vendor: dict[str, list[LineItem]] = defaultdict(list)
    for li in items:
        if li.vendor_id:
            by_vendor[li.vendor_id].append(li)

    fee = Money.zero(currency)
    eligible = True
    noted_range: str | None = None
    noted_reason: str | None = None
    warnings: list[MinimumWarning] = []

    for vendor in delivering:
        quote = strategy.compute_delivery_fee(
            context.distance_for(vendor.vendor_id), vendor.rules, currency
        )
        noted_range = noted_range or quote.range
        if not quote.eligible:
            eligible = False
            noted_reason = quote.reason or noted_reason
            continue
        fee = fee + quote.fee

        vendor_subtotal = subtotal_of(by_vendor.get(vendor.vendor_id, ()), currency)
        shortfall = check_minimum(vendor_subtotal, vendor.rules.minimum_order)
        if shortfall is not None:
            warnings.append(
                MinimumWarning(
                    vendor=vendor.vendor_name or vendor.vendor_id,
                    required=shortfall,
                    current=vendor_subtotal,
                )
            )

    detail = DeliveryDetail(
        eligible=eligible,
        range=noted_range or "varies",
        reason=None
        if eligible
        else noted_reason or "Delivery not available to this location",
        minimum_warnings=tuple(warnings),
    )
    return fee, detail


def check_minimum(subtotal: Money, minimum: Money | None) -> Money | None:
    """The required minimum when ``subtotal`` falls short of it, else None."""
    if minimum is None or minimum.amount <= 0:
        return None
    if subtotal.amount < minimum.amount:
        return minimum
    return None


def price_before_tax(
    cmd: CalculateTotalsCommand, delivery: DeliveryFeeStrategy
) -> Result[PreTaxBreakdown, PricingError]:
    config, ctx = cmd.config, cmd.context
    currency = config.currency

    subtotal = subtotal_of(cmd.line_items, currency)
    fee_result = service_fee_for(subtotal, config, ctx.is_service_fee_waived)
    if isinstance(fee_result, Failure):
        return fee_result
    service_fee = fee_result.unwrap()

    delivery_fee, delivery_detail = delivery_for(
        cmd.line_items, ctx, delivery, currency
    )
    lines, adjustments_total, taxable_adjustments = adjustments_for(
        cmd.adjustments, subtotal
    )

    base = subtotal_of([li for li in cmd.line_items if li.taxable], currency)
    if config.service_fee_taxable:
        base = base + service_fee
    base = base + taxable_adjustments
    if (
        config.tax_calculation_method == TaxCalculationMethod.MANUAL
        and config.delivery_fee_taxable
    ):
        base = base + delivery_fee
    if base.is_negative():
        base = Money.zero(currency)

    return Success(
        PreTaxBreakdown(
            subtotal=subtotal,
            service_fee=service_fee,
            delivery_fee=delivery_fee,
            adjustments=lines,
            adjustments_total=adjustments_total,
            taxable_base=base,
            delivery_detail=delivery_detail,
            item_count=len(cmd.line_items),
            is_tax_exempt=ctx.is_tax_exempt,
            is_service_fee_waived=ctx.is_service_fee_waived,
        )
    )


def exempt_tax(currency: str) -> TaxDetail:
    return TaxDetail(
        rate=Decimal("0"),
        amount=Money.zero(currency),
        description="Tax Exempt - No tax applicable",
        jurisdiction=TAX_EXEMPT,
    )


def manual_tax(pre: PreTaxBreakdown, config: PricingConfiguration, location: str) -> TaxDetail:
    pct = config.manual_tax_rate
    return TaxDetail(
        rate=pct / 100,
        amount=pre.taxable_base.percent(pct),
        description=f"Sales Tax ({pct.normalize():f}%)",
        jurisdiction=derive_jurisdiction(location),
    )


def finish(pre: PreTaxBreakdown, tax: TaxDetail | None) -> PricingSnapshot:
    tax_amount = tax.amount if tax is not None else Money.zero(pre.subtotal.currency)
    # always recomputed from the components, never carried over
    total = (
        pre.subtotal
        + pre.service_fee
        + pre.delivery_fee
        + pre.adjustments_total
        + tax_amount
    )
    snapshot = PricingSnapshot(
        subtotal=pre.subtotal,
        service_fee=pre.service_fee,
        delivery_fee=pre.delivery_fee,
        adjustments_total=pre.adjustments_total,
        taxable_base=pre.taxable_base,
        tax=tax_amount,
        total=total,
        adjustments=pre.adjustments,
        tax_detail=tax,
        delivery_detail=pre.delivery_detail,
        item_count=pre.item_count,
        is_tax_exempt=pre.is_tax_exempt,
        is_service_fee_waived=pre.is_service_fee_waived,
    )
    logger.debug(
        "priced %d items: subtotal=%s fee=%s delivery=%s adjustments=%s tax=%s total=%s",
        pre.item_count,
        snapshot.subtotal.amount,
        snapshot.service_fee.amount,
        snapshot.delivery_fee.amount,
        snapshot.adjustments_total.amount,
        snapshot.tax.amount,
        snapshot.total.amount,
    )
    return snapshot
