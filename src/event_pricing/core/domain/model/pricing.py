from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Tuple

from event_pricing.core.domain.model.money import Money, to_cents


class PriceType(str, Enum):
    PER_PERSON = "per_person"
    FLAT_RATE = "flat_rate"
    PER_HOUR = "per_hour"
    PER_DAY = "per_day"
    PER_ITEM = "per_item"


class AdjustmentType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class AdjustmentMode(str, Enum):
    SURCHARGE = "surcharge"
    DISCOUNT = "discount"


class ServiceFeeType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    HYBRID = "hybrid"


class TaxCalculationMethod(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


# ---- cart ------------------------------------------------------------------

MAX_QUANTITY = 1_000_000


@dataclass(frozen=True)
class LineItem:
    id: str
    price: Money
    quantity: int
    price_type: PriceType = PriceType.PER_ITEM
    taxable: bool = True
    name: str = ""
    vendor_id: str | None = None

    def line_total(self) -> Money:
        # price_type only changes how the quantity is collected
        return self.price * self.quantity


@dataclass(frozen=True)
class CustomAdjustment:
    id: str
    label: str
    type: AdjustmentType
    mode: AdjustmentMode
    value: Decimal
    taxable: bool = True

    def signed_amount(self, subtotal: Money) -> Money:
        if self.type is AdjustmentType.PERCENTAGE:
            magnitude = subtotal.percent(self.value)
        else:
            magnitude = Money.of(self.value, subtotal.currency)
        return -magnitude if self.mode is AdjustmentMode.DISCOUNT else magnitude


@dataclass(frozen=True)
class AdjustmentLine:
    id: str
    label: str
    type: AdjustmentType
    mode: AdjustmentMode
    value: Decimal
    amount: Money
    taxable: bool


# ---- configuration & context ----------------------------------------------


@dataclass(frozen=True)
class PricingConfiguration:
    service_fee_type: ServiceFeeType = ServiceFeeType.PERCENTAGE
    service_fee_percentage: Decimal = Decimal("5")
    service_fee_fixed: Decimal = Decimal("0")
    service_fee_taxable: bool = True
    tax_calculation_method: TaxCalculationMethod = TaxCalculationMethod.AUTOMATIC
    manual_tax_rate: Decimal = Decimal("0")  # percent
    delivery_fee_taxable: bool = True
    enable_multi_vendor_orders: bool = True
    currency: str = "USD"


@dataclass(frozen=True)
class DeliveryRange:
    label: str
    fee: Money


@dataclass(frozen=True)
class DeliveryRules:
    offers_delivery: bool = False
    ranges: Tuple[DeliveryRange, ...] = ()
    minimum_order: Money | None = None


@dataclass(frozen=True)
class VendorDelivery:
    vendor_id: str
    rules: DeliveryRules
    vendor_name: str = ""


@dataclass(frozen=True)
class PricingContext:
    location: str = ""
    distance_miles: Decimal | None = None
    distance_by_vendor: Mapping[str, Decimal] = field(default_factory=dict)
    vendors: Tuple[VendorDelivery, ...] = ()
    delivery_fee: Money | None = None
    is_tax_exempt: bool = False
    is_service_fee_waived: bool = False

    def distance_for(self, vendor_id: str) -> Decimal | None:
        return self.distance_by_vendor.get(vendor_id, self.distance_miles)


# ---- results ---------------------------------------------------------------


@dataclass(frozen=True)
class TaxDetail:
    rate: Decimal
    amount: Money
    description: str
    jurisdiction: str


@dataclass(frozen=True)
class MinimumWarning:
    vendor: str
    required: Money
    current: Money


@dataclass(frozen=True)
class DeliveryDetail:
    eligible: bool
    range: str
    reason: str | None = None
    minimum_warnings: Tuple[MinimumWarning, ...] = ()


NO_DELIVERY = DeliveryDetail(
    eligible=False, range="N/A", reason="No delivery services selected"
)


@dataclass(frozen=True)
class PricingSnapshot:
    """Fully computed totals breakdown for a cart.

    ``total`` is always the sum of the five components; the snapshot is never
    mutated, a rebuild produces a new one.
    """

    subtotal: Money
    service_fee: Money
    delivery_fee: Money
    adjustments_total: Money
    taxable_base: Money
    tax: Money
    total: Money
    adjustments: Tuple[AdjustmentLine, ...] = ()
    tax_detail: TaxDetail | None = None
    delivery_detail: DeliveryDetail = NO_DELIVERY
    item_count: int = 0
    is_tax_exempt: bool = False
    is_service_fee_waived: bool = False

    @property
    def currency(self) -> str:
        return self.total.currency

    def components_sum(self) -> Money:
        return (
            self.subtotal
            + self.service_fee
            + self.delivery_fee
            + self.adjustments_total
            + self.tax
        )

    def is_consistent(self) -> bool:
        return self.components_sum().amount == self.total.amount

    @staticmethod
    def zeroed(currency: str = "USD") -> "PricingSnapshot":
        z = Money.zero(currency)
        return PricingSnapshot(
            subtotal=z,
            service_fee=z,
            delivery_fee=z,
            adjustments_total=z,
            taxable_base=z,
            tax=z,
            total=z,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "subtotal": _fmt(self.subtotal),
            "service_fee": _fmt(self.service_fee),
            "delivery_fee": _fmt(self.delivery_fee),
            "adjustments_total": _fmt(self.adjustments_total),
            "taxable_base": _fmt(self.taxable_base),
            "tax": _fmt(self.tax),
            "total": _fmt(self.total),
            "item_count": self.item_count,
            "is_tax_exempt": self.is_tax_exempt,
            "is_service_fee_waived": self.is_service_fee_waived,
            "adjustments": [
                {
                    "id": a.id,
                    "label": a.label,
                    "type": a.type.value,
                    "mode": a.mode.value,
                    "value": str(a.value),
                    "amount": _fmt(a.amount),
                    "taxable": a.taxable,
                }
                for a in self.adjustments
            ],
            "tax_detail": None
            if self.tax_detail is None
            else {
                "rate": str(self.tax_detail.rate),
                "amount": _fmt(self.tax_detail.amount),
                "description": self.tax_detail.description,
                "jurisdiction": self.tax_detail.jurisdiction,
            },
            "delivery_detail": {
                "eligible": self.delivery_detail.eligible,
                "range": self.delivery_detail.range,
                "reason": self.delivery_detail.reason,
                "minimum_warnings": [
                    {
                        "vendor": w.vendor,
                        "required": _fmt(w.required),
                        "current": _fmt(w.current),
                    }
                    for w in self.delivery_detail.minimum_warnings
                ],
            },
        }

    def to_json(self) -> str:
        return json.dumps(
            self.to_dict(), ensure_ascii=False, sort_keys=True, separators=(",", ":")
        )

    @staticmethod
    def from_json(s: str) -> "PricingSnapshot":
        obj = json.loads(s)
        cur = obj["currency"]

        def m(v: str) -> Money:
            return Money(Decimal(v), cur)

        tax = obj.get("tax_detail")
        dd = obj["delivery_detail"]
        return PricingSnapshot(
            subtotal=m(obj["subtotal"]),
            service_fee=m(obj["service_fee"]),
            delivery_fee=m(obj["delivery_fee"]),
            adjustments_total=m(obj["adjustments_total"]),
            taxable_base=m(obj["taxable_base"]),
            tax=m(obj["tax"]),
            total=m(obj["total"]),
            adjustments=tuple(
                AdjustmentLine(
                    id=a["id"],
                    label=a["label"],
                    type=AdjustmentType(a["type"]),
                    mode=AdjustmentMode(a["mode"]),
                    value=Decimal(a["value"]),
                    amount=m(a["amount"]),
                    taxable=a["taxable"],
                )
                for a in obj["adjustments"]
            ),
            tax_detail=None
            if tax is None
            else TaxDetail(
                rate=Decimal(tax["rate"]),
                amount=m(tax["amount"]),
                description=tax["description"],
                jurisdiction=tax["jurisdiction"],
            ),
            delivery_detail=DeliveryDetail(
                eligible=dd["eligible"],
                range=dd["range"],
                reason=dd["reason"],
                minimum_warnings=tuple(
                    MinimumWarning(
                        vendor=w["vendor"],
                        required=m(w["required"]),
                        current=m(w["current"]),
                    )
                    for w in dd["minimum_warnings"]
                ),
            ),
            item_count=obj["item_count"],
            is_tax_exempt=obj["is_tax_exempt"],
            is_service_fee_waived=obj["is_service_fee_waived"],
        )


def _fmt(m: Money) -> str:
    # normalizes -0.00
    return str(to_cents(m.amount) + 0)
