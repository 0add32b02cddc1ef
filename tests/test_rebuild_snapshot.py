from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from returns.result import Success

from builders import (
    FailingTaxProvider,
    RaisingTaxProvider,
    discount,
    item,
    manual,
    pricing_service,
)
from event_pricing.adapters.outbound.in_memory_orders import InMemoryOrderRepository
from event_pricing.core.domain.model.errors import (
    InvalidInputError,
    OrderNotFound,
    TaxProviderError,
)
from event_pricing.core.domain.model.money import Money
from event_pricing.core.domain.model.order import OrderId, PricedOrder, now_utc
from event_pricing.core.domain.model.pricing import PricingConfiguration, PricingContext
from event_pricing.core.domain.service.capture_snapshot_service import (
    CaptureSnapshotDeps,
    CaptureSnapshotService,
)
from event_pricing.core.domain.service.rebuild_snapshot_service import (
    RebuildSnapshotDeps,
    RebuildSnapshotService,
)
from event_pricing.core.ports.inbound.calculate_totals import CalculateTotalsCommand
from event_pricing.core.ports.inbound.rebuild_snapshot import RebuildSnapshotCommand


def _order(items, config=None, snapshot=None, age_minutes=0, **kw) -> PricedOrder:
    return PricedOrder(
        order_id=OrderId.new(),
        line_items=tuple(items),
        adjustments=tuple(kw.pop("adjustments", ())),
        context=kw.pop("context", PricingContext()),
        config=config or manual("8"),
        created_at=now_utc() - timedelta(minutes=age_minutes),
        snapshot=snapshot,
    )


def _rebuilder(repo, tax=None) -> RebuildSnapshotService:
    return RebuildSnapshotService(RebuildSnapshotDeps(orders=repo, pricing=pricing_service(tax)))


@pytest.mark.anyio
async def test_rebuild_single_order_writes_snapshot_and_audit():
    repo = InMemoryOrderRepository()
    order = _order([item("buffet", "65.00", 100), item("setup", "500.00")])
    repo.save(order)

    result = await _rebuilder(repo).rebuild_snapshot(
        RebuildSnapshotCommand(order_id=str(order.order_id.value))
    )

    snapshot = result.unwrap()
    assert snapshot.total.amount == Decimal("7938.00")
    stored = repo.get(order.order_id).unwrap()
    assert stored.snapshot == snapshot
    assert stored.line_items == order.line_items
    assert repo.audit_log == [
        (str(order.order_id.value), "rebuilt pricing snapshot: 2 items, total $7,938.00")
    ]


@pytest.mark.anyio
async def test_rebuild_is_idempotent():
    repo = InMemoryOrderRepository()
    order = _order(
        [item("a", "19.99", 3), item("b", "5.55", 7, taxable=False)],
        adjustments=[discount("12.5")],
        context=PricingContext(location="Austin, TX", delivery_fee=Money.of("9.99")),
    )
    repo.save(order)
    service = _rebuilder(repo)
    cmd = RebuildSnapshotCommand(order_id=str(order.order_id.value))

    first = (await service.rebuild_snapshot(cmd)).unwrap()
    second = (await service.rebuild_snapshot(cmd)).unwrap()

    assert first.to_json() == second.to_json()
    assert type(first).from_json(first.to_json()) == first


@pytest.mark.anyio
async def test_rebuild_unknown_or_malformed_id():
    service = _rebuilder(InMemoryOrderRepository())

    missing = await service.rebuild_snapshot(RebuildSnapshotCommand(order_id=str(uuid4())))
    malformed = await service.rebuild_snapshot(RebuildSnapshotCommand(order_id="nope"))

    assert isinstance(missing.failure(), OrderNotFound)
    assert isinstance(malformed.failure(), InvalidInputError)


@pytest.mark.anyio
async def test_rebuild_returns_tax_failure_without_writing():
    repo = InMemoryOrderRepository()
    order = _order([item("a", "10.00")], config=PricingConfiguration())
    repo.save(order)

    result = await _rebuilder(repo, FailingTaxProvider()).rebuild_snapshot(
        RebuildSnapshotCommand(order_id=str(order.order_id.value))
    )

    assert isinstance(result.failure(), TaxProviderError)
    assert repo.get(order.order_id).unwrap().snapshot is None
    assert repo.audit_log == []


@pytest.mark.anyio
async def test_batch_rebuild_reports_each_order():
    repo = InMemoryOrderRepository()
    stale = _order([item("a", "100.00")], age_minutes=30)
    empty = _order([], age_minutes=20)
    locked = _order([item("b", "50.00")], age_minutes=10)
    for o in (stale, empty, locked):
        repo.save(o)
    repo.read_only_ids.add(str(locked.order_id.value))

    # an order whose stored total no longer adds up is rebuilt as well
    captured = await CaptureSnapshotService(
        CaptureSnapshotDeps(orders=repo, pricing=pricing_service())
    ).capture_snapshot(CalculateTotalsCommand([item("c", "10.00")], config=manual("8")))
    good_id = captured.unwrap().order_id
    broken = repo.get(good_id).unwrap()
    repo._store[str(good_id.value)] = broken.with_snapshot(
        replace(broken.snapshot, total=Money.of("1.00"))
    )

    result = await _rebuilder(repo).rebuild_incomplete()

    assert isinstance(result, Success)
    report = result.unwrap()
    assert (report.total, report.updated, report.failed, report.skipped) == (4, 2, 1, 1)
    by_id = {d.order_id: d for d in report.details}
    assert by_id[str(empty.order_id.value)].reason == "no line items"
    assert by_id[str(locked.order_id.value)].reason.startswith("PersistenceError")
    assert by_id[str(good_id.value)].snapshot.total.amount == Decimal("11.34")
    assert [d.order_id for d in report.details][:3] == [
        str(stale.order_id.value),
        str(empty.order_id.value),
        str(locked.order_id.value),
    ]

    again = (await _rebuilder(repo).rebuild_incomplete()).unwrap()
    assert (again.total, again.updated) == (2, 0)


@pytest.mark.anyio
async def test_capture_saves_order_with_snapshot():
    repo = InMemoryOrderRepository()
    service = CaptureSnapshotService(CaptureSnapshotDeps(orders=repo, pricing=pricing_service()))

    captured = (
        await service.capture_snapshot(
            CalculateTotalsCommand([item("a", "65.00", 100)], config=manual("8"))
        )
    ).unwrap()

    stored = repo.get(captured.order_id).unwrap()
    assert stored.snapshot == captured.snapshot
    assert stored.has_complete_snapshot()
    assert captured.snapshot.total.amount == Decimal("7371.00")


@pytest.mark.anyio
async def test_capture_propagates_pricing_errors():
    repo = InMemoryOrderRepository()
    service = CaptureSnapshotService(
        CaptureSnapshotDeps(orders=repo, pricing=pricing_service(FailingTaxProvider()))
    )

    result = await service.capture_snapshot(CalculateTotalsCommand([item("a", "1.00")]))

    assert isinstance(result.failure(), TaxProviderError)
    assert repo.list_incomplete().unwrap() == ()


@pytest.mark.anyio
async def test_batch_rebuild_survives_bad_records():
    repo = InMemoryOrderRepository()
    foreign_fee = _order(
        [item("a", "10.00")],
        age_minutes=30,
        context=PricingContext(delivery_fee=Money.of("5", "EUR")),
    )
    crashing = _order([item("b", "20.00")], config=PricingConfiguration(), age_minutes=20)
    fine = _order([item("c", "100.00")], age_minutes=10)
    for o in (foreign_fee, crashing, fine):
        repo.save(o)

    report = (await _rebuilder(repo, RaisingTaxProvider()).rebuild_incomplete()).unwrap()

    assert (report.total, report.updated, report.failed) == (3, 1, 2)
    by_id = {d.order_id: d for d in report.details}
    assert by_id[str(foreign_fee.order_id.value)].reason.startswith("InvalidInputError")
    assert by_id[str(crashing.order_id.value)].reason == "RuntimeError: tax client bug"
    assert repo.get(fine.order_id).unwrap().snapshot.total.amount == Decimal("113.40")
    assert repo.get(crashing.order_id).unwrap().snapshot is None
