from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from event_pricing.core.domain.model.money import MAX_AMOUNT
from event_pricing.core.domain.model.pricing import (
    PricingConfiguration,
    ServiceFeeType,
    TaxCalculationMethod,
)

logger = logging.getLogger(__name__)

# admin settings arrive camelCased from the settings store
_ALIASES = {
    "serviceFeeType": "service_fee_type",
    "serviceFeePercentage": "service_fee_percentage",
    "serviceFeeFixed": "service_fee_fixed",
    "serviceFeeTaxable": "service_fee_taxable",
    "taxCalculationMethod": "tax_calculation_method",
    "manualTaxRate": "manual_tax_rate",
    "deliveryFeeTaxable": "delivery_fee_taxable",
    "enableMultiVendorOrders": "enable_multi_vendor_orders",
}

_METHOD_ALIASES = {"stripe_automatic": TaxCalculationMethod.AUTOMATIC.value}

_ENUM_FIELDS: dict[str, Any] = {
    "service_fee_type": ServiceFeeType,
    "tax_calculation_method": TaxCalculationMethod,
}
_DECIMAL_FIELDS = {"service_fee_percentage", "service_fee_fixed", "manual_tax_rate"}
_BOOL_FIELDS = {
    "service_fee_taxable",
    "delivery_fee_taxable",
    "enable_multi_vendor_orders",
}


def resolve_configuration(
    overrides: Mapping[str, Any] | None, defaults: PricingConfiguration
) -> PricingConfiguration:
    """Merge admin overrides onto ``defaults``.

    ``overrides`` is ``None`` when admin settings could not be loaded. Bad
    values are logged and replaced by the default, so a broken settings row
    never blocks pricing.
    """
    if overrides is None:
        logger.warning("admin pricing settings unavailable, using defaults")
        return defaults

    changes: dict[str, Any] = {}
    for raw_key, value in overrides.items():
        key = _ALIASES.get(raw_key, raw_key)
        if value is None:
            continue
        if key in _ENUM_FIELDS:
            enum_cls = _ENUM_FIELDS[key]
            try:
                changes[key] = enum_cls(_METHOD_ALIASES.get(str(value), value))
            except ValueError:
                logger.warning(
                    "unrecognized %s=%r, falling back to %s",
                    key,
                    value,
                    getattr(defaults, key).value,
                )
        elif key in _DECIMAL_FIELDS:
            try:
                dec = Decimal(str(value))
            except (InvalidOperation, ValueError):
                dec = None
            if dec is None or not dec.is_finite() or dec < 0 or dec > MAX_AMOUNT:
                logger.warning(
                    "invalid %s=%r, falling back to %s", key, value, getattr(defaults, key)
                )
                continue
            changes[key] = dec
        elif key in _BOOL_FIELDS:
            changes[key] = bool(value)
        elif key == "currency":
            changes[key] = str(value).upper()
        else:
            logger.debug("ignoring unknown pricing setting %r", raw_key)

    return replace(defaults, **changes)
