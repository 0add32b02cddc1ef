"""Turn loosely-typed payloads (JSON, admin tooling) into domain types.

Everything that reaches the calculator has gone through here or was built
directly from the dataclasses, so the arithmetic never sees raw dicts.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

from returns.result import Failure, Result, Success

from event_pricing.core.domain.model.errors import InvalidInputError, PricingError
from event_pricing.core.domain.model.money import MAX_AMOUNT, Money
from event_pricing.core.domain.model.pricing import (
    MAX_QUANTITY,
    AdjustmentMode,
    AdjustmentType,
    CustomAdjustment,
    DeliveryRange,
    DeliveryRules,
    LineItem,
    PriceType,
    PricingContext,
    VendorDelivery,
)


class _BadInput(ValueError):
    pass


def _decimal(value: Any, where: str) -> Decimal:
    if isinstance(value, bool):
        raise _BadInput(f"{where} must be a number")
    try:
        dec = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise _BadInput(f"{where} must be a number") from e
    if not dec.is_finite():
        raise _BadInput(f"{where} must be a finite number")
    if abs(dec) > MAX_AMOUNT:
        raise _BadInput(f"{where} must not exceed {MAX_AMOUNT}")
    return dec


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise _BadInput(f"{where} must be an object")
    return value


def _entries(value: Any, where: str) -> list[Any]:
    if not isinstance(value, (list, tuple)):
        raise _BadInput(f"{where} must be a list")
    return list(value)


def _integer(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise _BadInput(f"{where} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise _BadInput(f"{where} must be an integer")


def _enum(enum_cls: Any, value: Any, where: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise _BadInput(f"{where} must be one of: {allowed}") from e


def _required_str(raw: Mapping[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if value is None or not str(value).strip():
        raise _BadInput(f"{where}.{key} is required")
    return str(value)


def parse_line_item(
    raw: Mapping[str, Any], index: int = 0, currency: str = "USD"
) -> Result[LineItem, PricingError]:
    where = f"line_items[{index}]"
    try:
        if "price" not in raw:
            raise _BadInput(f"{where}.price is required")
        price = _decimal(raw["price"], f"{where}.price")
        if price < 0:
            raise _BadInput(f"{where}.price must be >= 0")
        quantity = _integer(raw.get("quantity", 1), f"{where}.quantity")
        if quantity <= 0:
            raise _BadInput(f"{where}.quantity must be > 0")
        if quantity > MAX_QUANTITY:
            raise _BadInput(f"{where}.quantity must not exceed {MAX_QUANTITY}")
        item = LineItem(
            id=_required_str(raw, "id", where),
            price=Money.of(price, currency),
            quantity=quantity,
            price_type=_enum(
                PriceType, raw.get("price_type", "per_item"), f"{where}.price_type"
            ),
            taxable=bool(raw.get("taxable", True)),
            name=str(raw.get("name", "")),
            vendor_id=None if raw.get("vendor_id") is None else str(raw["vendor_id"]),
        )
    except _BadInput as e:
        return Failure(InvalidInputError(str(e)))
    return Success(item)


def parse_adjustment(
    raw: Mapping[str, Any], index: int = 0
) -> Result[CustomAdjustment, PricingError]:
    where = f"adjustments[{index}]"
    try:
        value = _decimal(raw.get("value"), f"{where}.value")
        if value < 0:
            raise _BadInput(f"{where}.value must be >= 0")
        adj = CustomAdjustment(
            id=_required_str(raw, "id", where),
            label=str(raw.get("label", "")),
            type=_enum(AdjustmentType, raw.get("type"), f"{where}.type"),
            mode=_enum(AdjustmentMode, raw.get("mode"), f"{where}.mode"),
            value=value,
            taxable=raw.get("taxable", True) is not False,
        )
    except _BadInput as e:
        return Failure(InvalidInputError(str(e)))
    return Success(adj)


def _parse_rules(raw: Any, where: str, currency: str) -> DeliveryRules:
    rules = _mapping({} if raw is None else raw, where)
    ranges = []
    for i, entry in enumerate(_entries(rules.get("ranges") or [], f"{where}.ranges")):
        r = _mapping(entry, f"{where}.ranges[{i}]")
        ranges.append(
            DeliveryRange(
                label=str(r.get("label") or r.get("range") or ""),
                fee=Money.of(_decimal(r.get("fee", 0), f"{where}.ranges[{i}].fee"), currency),
            )
        )
    minimum = rules.get("minimum_order")
    return DeliveryRules(
        offers_delivery=bool(rules.get("offers_delivery", False)),
        ranges=tuple(ranges),
        minimum_order=None
        if minimum is None
        else Money.of(_decimal(minimum, f"{where}.minimum_order"), currency),
    )


def _parse_vendor(raw: Any, where: str, currency: str) -> VendorDelivery:
    v = _mapping(raw, where)
    return VendorDelivery(
        vendor_id=_required_str(v, "vendor_id", where),
        vendor_name=str(v.get("vendor_name", "")),
        rules=_parse_rules(v.get("rules"), f"{where}.rules", currency),
    )


def parse_context(
    raw: Mapping[str, Any] | None, currency: str = "USD"
) -> Result[PricingContext, PricingError]:
    raw = raw or {}
    if not isinstance(raw, Mapping):
        return Failure(InvalidInputError("context must be an object"))
    try:
        distance = raw.get("distance_miles")
        delivery_fee = raw.get("delivery_fee")
        vendors = tuple(
            _parse_vendor(v, f"context.vendors[{i}]", currency)
            for i, v in enumerate(_entries(raw.get("vendors") or [], "context.vendors"))
        )
        by_vendor = _mapping(
            raw.get("distance_by_vendor") or {}, "context.distance_by_vendor"
        )
        ctx = PricingContext(
            location=str(raw.get("location") or ""),
            distance_miles=None
            if distance is None
            else _decimal(distance, "context.distance_miles"),
            distance_by_vendor={
                str(k): _decimal(v, f"context.distance_by_vendor[{k}]")
                for k, v in by_vendor.items()
            },
            vendors=vendors,
            delivery_fee=None
            if delivery_fee is None
            else Money.of(_decimal(delivery_fee, "context.delivery_fee"), currency),
            is_tax_exempt=bool(raw.get("is_tax_exempt", False)),
            is_service_fee_waived=bool(raw.get("is_service_fee_waived", False)),
        )
    except _BadInput as e:
        return Failure(InvalidInputError(str(e)))
    return Success(ctx)


def parse_many(
    raws: Sequence[Mapping[str, Any]], parse: Any
) -> Result[tuple[Any, ...], PricingError]:
    """Apply ``parse(raw, index)`` to each entry, stopping at the first failure."""
    parsed: list[Any] = []
    if not isinstance(raws, (list, tuple)):
        return Failure(InvalidInputError("expected a list of objects"))
    for i, raw in enumerate(raws):
        if not isinstance(raw, Mapping):
            return Failure(InvalidInputError(f"entry {i} must be an object"))
        result = parse(raw, i)
        if isinstance(result, Failure):
            return result
        parsed.append(result.unwrap())
    return Success(tuple(parsed))
