from __future__ import annotations

from dataclasses import dataclass

from event_pricing.adapters.outbound.http_tax import HttpTaxProvider
from event_pricing.adapters.outbound.in_memory_orders import InMemoryOrderRepository
from event_pricing.adapters.outbound.location_rate_tax import LocationRateTaxProvider
from event_pricing.adapters.outbound.range_table_delivery import RangeTableDeliveryFee
from event_pricing.core.domain.model.pricing import PricingConfiguration
from event_pricing.core.domain.service.calculate_totals_service import (
    CalculateTotalsDeps,
    CalculateTotalsService,
)
from event_pricing.core.domain.service.capture_snapshot_service import (
    CaptureSnapshotDeps,
    CaptureSnapshotService,
)
from event_pricing.core.domain.service.get_order_service import (
    GetOrderDeps,
    GetOrderService,
)
from event_pricing.core.domain.service.rebuild_snapshot_service import (
    RebuildSnapshotDeps,
    RebuildSnapshotService,
)
from event_pricing.core.ports.outbound.orders import OrderRepository
from event_pricing.core.ports.outbound.tax import TaxProvider
from event_pricing.settings import Settings, get_settings


@dataclass(frozen=True)
class UseCases:
    calculate_totals: CalculateTotalsService
    capture_snapshot: CaptureSnapshotService
    rebuild_snapshot: RebuildSnapshotService
    get_order: GetOrderService
    pricing_defaults: PricingConfiguration


def build_tax_provider(settings: Settings) -> TaxProvider:
    if settings.tax_provider_url:
        return HttpTaxProvider(
            url=settings.tax_provider_url,
            timeout_seconds=settings.tax_provider_timeout_seconds,
            api_key=settings.tax_provider_api_key,
        )
    return LocationRateTaxProvider()


def build_usecases(
    settings: Settings | None = None,
    orders: OrderRepository | None = None,
    tax: TaxProvider | None = None,
) -> UseCases:
    settings = settings or get_settings()
    orders = orders if orders is not None else InMemoryOrderRepository()

    calculate_totals = CalculateTotalsService(
        CalculateTotalsDeps(
            tax=tax or build_tax_provider(settings), delivery=RangeTableDeliveryFee()
        )
    )
    capture = CaptureSnapshotService(
        CaptureSnapshotDeps(orders=orders, pricing=calculate_totals)
    )
    rebuild = RebuildSnapshotService(
        RebuildSnapshotDeps(orders=orders, pricing=calculate_totals)
    )
    get_order = GetOrderService(GetOrderDeps(orders=orders))

    return UseCases(
        calculate_totals=calculate_totals,
        capture_snapshot=capture,
        rebuild_snapshot=rebuild,
        get_order=get_order,
        pricing_defaults=settings.pricing_defaults(),
    )
