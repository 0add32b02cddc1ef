from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Success

from event_pricing.bootstrap import UseCases
from event_pricing.core.domain.model.errors import (
    ConfigurationError,
    InvalidInputError,
    OrderNotFound,
    PersistenceError,
    PricingError,
    TaxProviderError,
)
from event_pricing.core.domain.model.money import MAX_AMOUNT, Money
from event_pricing.core.domain.model.order import PricedOrder
from event_pricing.core.domain.model.pricing import (
    MAX_QUANTITY,
    AdjustmentMode,
    AdjustmentType,
    CustomAdjustment,
    DeliveryRange,
    DeliveryRules,
    LineItem,
    PriceType,
    PricingConfiguration,
    PricingContext,
    VendorDelivery,
)
from event_pricing.core.domain.service.configuration import resolve_configuration
from event_pricing.core.ports.inbound.calculate_totals import CalculateTotalsCommand
from event_pricing.core.ports.inbound.get_order import GetOrderQuery
from event_pricing.core.ports.inbound.rebuild_snapshot import (
    RebuildReport,
    RebuildSnapshotCommand,
)

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class LineItemIn(BaseModel):
    id: str = Field(min_length=1, examples=["buffet"])
    price: Decimal = Field(ge=0, le=MAX_AMOUNT, examples=["65.00"])
    quantity: int = Field(gt=0, le=MAX_QUANTITY, examples=[100])
    price_type: PriceType = PriceType.PER_ITEM
    taxable: bool = True
    name: str = ""
    vendor_id: str | None = None


class AdjustmentIn(BaseModel):
    id: str = Field(min_length=1)
    label: str = ""
    type: AdjustmentType
    mode: AdjustmentMode
    value: Decimal = Field(ge=0, le=MAX_AMOUNT)
    taxable: bool = True


class DeliveryRangeIn(BaseModel):
    label: str = Field(examples=["0-10 miles"])
    fee: Decimal = Field(ge=0, le=MAX_AMOUNT)


class DeliveryRulesIn(BaseModel):
    offers_delivery: bool = False
    ranges: list[DeliveryRangeIn] = []
    minimum_order: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)


class VendorIn(BaseModel):
    vendor_id: str = Field(min_length=1)
    vendor_name: str = ""
    rules: DeliveryRulesIn = DeliveryRulesIn()


class ContextIn(BaseModel):
    location: str = ""
    distance_miles: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)
    distance_by_vendor: dict[str, Decimal] = {}
    vendors: list[VendorIn] = []
    delivery_fee: Decimal | None = Field(default=None, ge=0, le=MAX_AMOUNT)
    is_tax_exempt: bool = False
    is_service_fee_waived: bool = False


class PricingRequest(BaseModel):
    line_items: list[LineItemIn] = []
    adjustments: list[AdjustmentIn] = []
    context: ContextIn = ContextIn()
    # admin overrides; merged onto process defaults
    settings: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    type: str
    message: str
    details: list[dict[str, Any]] | None = None


# ---- Mapping helpers -------------------------------------------------------


def _to_command(req: PricingRequest, defaults: PricingConfiguration) -> CalculateTotalsCommand:
    config = resolve_configuration(req.settings, defaults)
    cur = config.currency
    ctx = req.context
    return CalculateTotalsCommand(
        line_items=tuple(
            LineItem(
                id=li.id,
                price=Money.of(li.price, cur),
                quantity=li.quantity,
                price_type=li.price_type,
                taxable=li.taxable,
                name=li.name,
                vendor_id=li.vendor_id,
            )
            for li in req.line_items
        ),
        adjustments=tuple(
            CustomAdjustment(
                id=a.id,
                label=a.label,
                type=a.type,
                mode=a.mode,
                value=a.value,
                taxable=a.taxable,
            )
            for a in req.adjustments
        ),
        config=config,
        context=PricingContext(
            location=ctx.location,
            distance_miles=ctx.distance_miles,
            distance_by_vendor=dict(ctx.distance_by_vendor),
            vendors=tuple(
                VendorDelivery(
                    vendor_id=v.vendor_id,
                    vendor_name=v.vendor_name,
                    rules=DeliveryRules(
                        offers_delivery=v.rules.offers_delivery,
                        ranges=tuple(
                            DeliveryRange(label=r.label, fee=Money.of(r.fee, cur))
                            for r in v.rules.ranges
                        ),
                        minimum_order=None
                        if v.rules.minimum_order is None
                        else Money.of(v.rules.minimum_order, cur),
                    ),
                )
                for v in ctx.vendors
            ),
            delivery_fee=None if ctx.delivery_fee is None else Money.of(ctx.delivery_fee, cur),
            is_tax_exempt=ctx.is_tax_exempt,
            is_service_fee_waived=ctx.is_service_fee_waived,
        ),
    )


def _order_view(order: PricedOrder) -> dict[str, Any]:
    return {
        "order_id": str(order.order_id.value),
        "created_at": order.created_at.isoformat(),
        "item_count": len(order.line_items),
        "snapshot_complete": order.has_complete_snapshot(),
        "snapshot": None if order.snapshot is None else order.snapshot.to_dict(),
    }


def _report_view(report: RebuildReport) -> dict[str, Any]:
    return {
        "total": report.total,
        "updated": report.updated,
        "failed": report.failed,
        "skipped": report.skipped,
        "details": [
            {
                "id": d.order_id,
                "status": d.status,
                "reason": d.reason,
                "snapshot": None if d.snapshot is None else d.snapshot.to_dict(),
            }
            for d in report.details
        ],
    }


def _map_error_to_http(err: PricingError) -> tuple[int, ErrorResponse]:
    body = ErrorResponse(type=type(err).__name__, message=str(err))
    if isinstance(err, InvalidInputError):
        return 400, body
    if isinstance(err, OrderNotFound):
        return 404, body
    if isinstance(err, ConfigurationError):
        return 422, body
    if isinstance(err, TaxProviderError):
        return 502, body
    if isinstance(err, PersistenceError):
        return 500, body
    return 500, body


def _error_response(err: PricingError) -> JSONResponse:
    status, body = _map_error_to_http(err)
    return JSONResponse(status_code=status, content=body.model_dump())


# ---- App factory -----------------------------------------------------------


def create_app(usecases: UseCases) -> FastAPI:
    app = FastAPI(title="event_pricing")
    defaults = usecases.pricing_defaults

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            message="invalid request",
            details=[{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        body = ErrorResponse(type=type(exc).__name__, message="internal server error")
        return JSONResponse(status_code=500, content=body.model_dump())

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/pricing/preview")
    async def preview(req: PricingRequest) -> Any:
        result = await usecases.calculate_totals.preview_totals(_to_command(req, defaults))
        return {
            "snapshot": result.snapshot.to_dict(),
            "error": result.error,
            "tax_pending": result.tax_pending,
        }

    @app.post("/pricing/calculate")
    async def calculate(req: PricingRequest) -> Any:
        result = await usecases.calculate_totals.calculate_totals(_to_command(req, defaults))
        if isinstance(result, Success):
            return result.unwrap().to_dict()
        return _error_response(result.failure())

    @app.post("/orders", status_code=201)
    async def capture(req: PricingRequest) -> Any:
        result = await usecases.capture_snapshot.capture_snapshot(_to_command(req, defaults))
        if isinstance(result, Success):
            captured = result.unwrap()
            return {
                "order_id": str(captured.order_id.value),
                "snapshot": captured.snapshot.to_dict(),
            }
        return _error_response(result.failure())

    @app.post("/orders/rebuild-snapshots")
    async def rebuild_all() -> Any:
        result = await usecases.rebuild_snapshot.rebuild_incomplete()
        if isinstance(result, Success):
            return _report_view(result.unwrap())
        return _error_response(result.failure())

    @app.get("/orders/{order_id}")
    def get_order(order_id: str) -> Any:
        result = usecases.get_order.get_order(GetOrderQuery(order_id=order_id))
        if isinstance(result, Success):
            return _order_view(result.unwrap())
        return _error_response(result.failure())

    @app.post("/orders/{order_id}/rebuild-snapshot")
    async def rebuild_one(order_id: str) -> Any:
        result = await usecases.rebuild_snapshot.rebuild_snapshot(
            RebuildSnapshotCommand(order_id=order_id)
        )
        if isinstance(result, Success):
            return result.unwrap().to_dict()
        return _error_response(result.failure())

    return app
