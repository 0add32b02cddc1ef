from __future__ import annotations

from returns.result import Failure, Result, Success

from event_pricing.core.domain.model.errors import InvalidInputError, PricingError
from event_pricing.core.domain.model.money import MAX_AMOUNT
from event_pricing.core.domain.model.pricing import (
    MAX_QUANTITY,
    AdjustmentMode,
    AdjustmentType,
)
from event_pricing.core.ports.inbound.calculate_totals import CalculateTotalsCommand


def validate_line_items(
    cmd: CalculateTotalsCommand,
) -> Result[CalculateTotalsCommand, PricingError]:
    for i, li in enumerate(cmd.line_items):
        if not str(li.id).strip():
            return Failure(InvalidInputError(f"line_items[{i}].id is required"))
        if li.price.amount < 0:
            return Failure(InvalidInputError(f"line_items[{i}].price must be >= 0"))
        if li.price.amount > MAX_AMOUNT:
            return Failure(
                InvalidInputError(f"line_items[{i}].price must not exceed {MAX_AMOUNT}")
            )
        if isinstance(li.quantity, bool) or not isinstance(li.quantity, int):
            return Failure(
                InvalidInputError(f"line_items[{i}].quantity must be an integer")
            )
        if li.quantity <= 0:
            return Failure(InvalidInputError(f"line_items[{i}].quantity must be > 0"))
        if li.quantity > MAX_QUANTITY:
            return Failure(
                InvalidInputError(f"line_items[{i}].quantity must not exceed {MAX_QUANTITY}")
            )
        if li.price.currency != cmd.config.currency:
            return Failure(
                InvalidInputError(
                    f"line_items[{i}].price currency {li.price.currency} "
                    f"does not match {cmd.config.currency}"
                )
            )
    return Success(cmd)


def validate_adjustments(
    cmd: CalculateTotalsCommand,
) -> Result[CalculateTotalsCommand, PricingError]:
    for i, adj in enumerate(cmd.adjustments):
        if not str(adj.id).strip():
            return Failure(InvalidInputError(f"adjustments[{i}].id is required"))
        if not isinstance(adj.type, AdjustmentType):
            return Failure(
                InvalidInputError(f"adjustments[{i}].type must be fixed or percentage")
            )
        if not isinstance(adj.mode, AdjustmentMode):
            return Failure(
                InvalidInputError(f"adjustments[{i}].mode must be surcharge or discount")
            )
        if adj.value < 0:
            return Failure(InvalidInputError(f"adjustments[{i}].value must be >= 0"))
        if adj.value > MAX_AMOUNT:
            return Failure(
                InvalidInputError(f"adjustments[{i}].value must not exceed {MAX_AMOUNT}")
            )
    return Success(cmd)


def validate_vendors(
    cmd: CalculateTotalsCommand,
) -> Result[CalculateTotalsCommand, PricingError]:
    if cmd.config.enable_multi_vendor_orders:
        return Success(cmd)
    vendors = {li.vendor_id for li in cmd.line_items if li.vendor_id}
    if len(vendors) > 1:
        return Failure(
            InvalidInputError(
                f"multi-vendor orders are disabled ({len(vendors)} vendors in cart)"
            )
        )
    return Success(cmd)


def validate_context(
    cmd: CalculateTotalsCommand,
) -> Result[CalculateTotalsCommand, PricingError]:
    currency = cmd.config.currency
    fee = cmd.context.delivery_fee
    if fee is not None:
        if fee.currency != currency:
            return Failure(
                InvalidInputError(
                    f"context.delivery_fee currency {fee.currency} does not match {currency}"
                )
            )
        if fee.amount < 0 or fee.amount > MAX_AMOUNT:
            return Failure(
                InvalidInputError(f"context.delivery_fee must be between 0 and {MAX_AMOUNT}")
            )

    for i, vendor in enumerate(cmd.context.vendors):
        where = f"context.vendors[{i}].rules"
        amounts = [(f"ranges[{j}].fee", r.fee) for j, r in enumerate(vendor.rules.ranges)]
        if vendor.rules.minimum_order is not None:
            amounts.append(("minimum_order", vendor.rules.minimum_order))
        for name, money in amounts:
            if money.currency != currency:
                return Failure(
                    InvalidInputError(
                        f"{where}.{name} currency {money.currency} does not match {currency}"
                    )
                )
            if money.amount > MAX_AMOUNT:
                return Failure(
                    InvalidInputError(f"{where}.{name} must not exceed {MAX_AMOUNT}")
                )
    return Success(cmd)


def validate_command(
    cmd: CalculateTotalsCommand,
) -> Result[CalculateTotalsCommand, PricingError]:
    return (
        Success(cmd)
        .bind(validate_line_items)
        .bind(validate_adjustments)
        .bind(validate_vendors)
        .bind(validate_context)
    )
