"""Process configuration.

Values come from ``EVENT_PRICING_*`` environment variables or a ``.env``
file. They are the documented defaults the pricing engine falls back to when
admin settings are missing; per-order overrides go through
:func:`event_pricing.core.domain.service.configuration.resolve_configuration`.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from event_pricing.core.domain.model.pricing import (
    PricingConfiguration,
    ServiceFeeType,
    TaxCalculationMethod,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENT_PRICING_", env_file=".env", extra="ignore"
    )

    service_fee_type: ServiceFeeType = ServiceFeeType.PERCENTAGE
    service_fee_percentage: Decimal = Decimal("5")
    service_fee_fixed: Decimal = Decimal("0")
    service_fee_taxable: bool = True
    tax_calculation_method: TaxCalculationMethod = TaxCalculationMethod.AUTOMATIC
    manual_tax_rate: Decimal = Decimal("8")
    delivery_fee_taxable: bool = True
    enable_multi_vendor_orders: bool = True
    currency: str = "USD"

    tax_provider_url: str | None = None
    tax_provider_api_key: str | None = None
    tax_provider_timeout_seconds: float = 10.0

    log_level: str = "INFO"

    def pricing_defaults(self) -> PricingConfiguration:
        return PricingConfiguration(
            service_fee_type=self.service_fee_type,
            service_fee_percentage=self.service_fee_percentage,
            service_fee_fixed=self.service_fee_fixed,
            service_fee_taxable=self.service_fee_taxable,
            tax_calculation_method=self.tax_calculation_method,
            manual_tax_rate=self.manual_tax_rate,
            delivery_fee_taxable=self.delivery_fee_taxable,
            enable_multi_vendor_orders=self.enable_multi_vendor_orders,
            currency=self.currency,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
