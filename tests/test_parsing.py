from decimal import Decimal

import pytest
from returns.result import Failure, Success

from builders import item
from event_pricing.core.domain.model.errors import InvalidInputError
from event_pricing.core.domain.model.money import Money
from event_pricing.core.domain.model.pricing import (
    AdjustmentMode,
    AdjustmentType,
    DeliveryRange,
    DeliveryRules,
    LineItem,
    PriceType,
    PricingConfiguration,
    PricingContext,
    VendorDelivery,
)
from event_pricing.core.domain.service.parsing import (
    parse_adjustment,
    parse_context,
    parse_line_item,
    parse_many,
)
from event_pricing.core.domain.service.validation import validate_command
from event_pricing.core.ports.inbound.calculate_totals import CalculateTotalsCommand


def _error(result) -> str:
    assert isinstance(result, Failure)
    assert isinstance(result.failure(), InvalidInputError)
    return str(result.failure())


def test_parse_line_item_accepts_strings_and_whole_floats():
    result = parse_line_item(
        {"id": "buffet", "price": "65.005", "quantity": 100.0, "price_type": "per_person"}
    )

    li = result.unwrap()
    assert li.price == Money.of("65.01")
    assert li.quantity == 100
    assert li.price_type is PriceType.PER_PERSON
    assert li.taxable is True


def test_parse_line_item_rejects_bad_values():
    assert "quantity must be an integer" in _error(
        parse_line_item({"id": "a", "price": 1, "quantity": 2.5})
    )
    assert "quantity must be an integer" in _error(
        parse_line_item({"id": "a", "price": 1, "quantity": True})
    )
    assert "quantity must be > 0" in _error(parse_line_item({"id": "a", "price": 1, "quantity": 0}))
    assert "price must be >= 0" in _error(parse_line_item({"id": "a", "price": "-1"}))
    assert "price must be a number" in _error(parse_line_item({"id": "a", "price": "abc"}))
    assert "price is required" in _error(parse_line_item({"id": "a"}))
    assert "line_items[3].id is required" in _error(parse_line_item({"price": 1}, index=3))
    assert "price_type must be one of" in _error(
        parse_line_item({"id": "a", "price": 1, "price_type": "per_minute"})
    )


def test_parse_adjustment_defaults_to_taxable():
    adj = parse_adjustment(
        {"id": "d1", "label": "Loyalty", "type": "percentage", "mode": "discount", "value": 10}
    ).unwrap()

    assert adj.type is AdjustmentType.PERCENTAGE
    assert adj.mode is AdjustmentMode.DISCOUNT
    assert adj.value == Decimal("10")
    assert adj.taxable is True

    untaxed = parse_adjustment(
        {"id": "d2", "type": "fixed", "mode": "surcharge", "value": "5", "taxable": False}
    ).unwrap()
    assert untaxed.taxable is False


def test_parse_adjustment_rejects_unknown_type_and_negative_value():
    assert "must be one of: fixed, percentage" in _error(
        parse_adjustment({"id": "x", "type": "bogus", "mode": "discount", "value": 1})
    )
    assert "value must be >= 0" in _error(
        parse_adjustment({"id": "x", "type": "fixed", "mode": "discount", "value": -5})
    )


def test_parse_context_with_vendors():
    ctx = parse_context(
        {
            "location": "San Francisco, CA 94103",
            "distance_miles": "12.5",
            "distance_by_vendor": {"v2": 3},
            "vendors": [
                {
                    "vendor_id": "v1",
                    "vendor_name": "Tacos",
                    "rules": {
                        "offers_delivery": True,
                        "ranges": [{"range": "0-10 miles", "fee": "25"}],
                        "minimum_order": "300",
                    },
                }
            ],
            "is_tax_exempt": True,
        }
    ).unwrap()

    assert ctx.distance_miles == Decimal("12.5")
    assert ctx.distance_for("v1") == Decimal("12.5")
    assert ctx.distance_for("v2") == Decimal("3")
    [vendor] = ctx.vendors
    assert vendor.rules.ranges[0].label == "0-10 miles"
    assert vendor.rules.ranges[0].fee == Money.of("25")
    assert vendor.rules.minimum_order == Money.of("300")
    assert ctx.is_tax_exempt


def test_parse_context_none_gives_empty_context():
    ctx = parse_context(None).unwrap()

    assert ctx.location == ""
    assert ctx.vendors == ()
    assert ctx.delivery_fee is None


def test_parse_many_stops_at_first_failure():
    raws = [{"id": "a", "price": 1}, {"id": "b", "price": "x"}, {"price": 1}]

    assert "line_items[1].price" in _error(parse_many(raws, parse_line_item))
    assert "entry 0 must be an object" in _error(parse_many(["nope"], parse_line_item))
    assert parse_many([], parse_line_item) == Success(())


def test_validate_command_rejects_currency_mismatch():
    cmd = CalculateTotalsCommand(
        [item("a", "1.00")], config=PricingConfiguration(currency="EUR")
    )

    assert "does not match EUR" in _error(validate_command(cmd))


def test_validate_command_enforces_single_vendor_when_disabled():
    items = [item("a", "1.00", vendor_id="v1"), item("b", "1.00", vendor_id="v2")]

    disabled = CalculateTotalsCommand(
        items, config=PricingConfiguration(enable_multi_vendor_orders=False)
    )
    enabled = CalculateTotalsCommand(items)

    assert "multi-vendor orders are disabled" in _error(validate_command(disabled))
    assert isinstance(validate_command(enabled), Success)


def test_validate_command_rejects_bool_quantity():
    cmd = CalculateTotalsCommand([item("a", "1.00", True)])

    assert "quantity must be an integer" in _error(validate_command(cmd))


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"vendors": ["v1"]}, "context.vendors[0] must be an object"),
        ({"vendors": {"v1": {}}}, "context.vendors must be a list"),
        (
            {"vendors": [{"vendor_id": "v", "rules": "fast"}]},
            "context.vendors[0].rules must be an object",
        ),
        (
            {"vendors": [{"vendor_id": "v", "rules": {"ranges": "0-10 miles"}}]},
            "context.vendors[0].rules.ranges must be a list",
        ),
        (
            {"vendors": [{"vendor_id": "v", "rules": {"ranges": ["0-10 miles"]}}]},
            "context.vendors[0].rules.ranges[0] must be an object",
        ),
        ({"distance_by_vendor": [1, 2]}, "context.distance_by_vendor must be an object"),
        ({"delivery_fee": "1e30"}, "context.delivery_fee must not exceed"),
    ],
)
def test_parse_context_rejects_malformed_nesting(raw, message):
    assert message in _error(parse_context(raw))


def test_parse_context_null_rules_mean_no_delivery():
    ctx = parse_context({"vendors": [{"vendor_id": "v", "rules": None}]}).unwrap()

    assert ctx.vendors[0].rules.offers_delivery is False
    assert ctx.vendors[0].rules.ranges == ()


def test_parse_rejects_out_of_range_amounts():
    assert "price must not exceed" in _error(parse_line_item({"id": "a", "price": "1e30"}))
    assert "quantity must not exceed" in _error(
        parse_line_item({"id": "a", "price": "1", "quantity": 10**7})
    )
    assert "value must not exceed" in _error(
        parse_adjustment({"id": "x", "type": "fixed", "mode": "discount", "value": "1e40"})
    )


def test_validate_command_bounds_directly_built_items():
    huge = LineItem(id="a", price=Money(Decimal("1e30")), quantity=1)
    many = item("b", "1.00", 10**7)

    assert "price must not exceed" in _error(validate_command(CalculateTotalsCommand([huge])))
    assert "quantity must not exceed" in _error(validate_command(CalculateTotalsCommand([many])))


def test_validate_command_checks_delivery_currencies():
    eur_fee = CalculateTotalsCommand(
        [item("a", "1.00")], context=PricingContext(delivery_fee=Money.of("5", "EUR"))
    )
    eur_range = CalculateTotalsCommand(
        [item("a", "1.00")],
        context=PricingContext(
            vendors=(
                VendorDelivery(
                    "v1",
                    DeliveryRules(
                        offers_delivery=True,
                        ranges=(DeliveryRange("0-10 miles", Money.of("25", "EUR")),),
                    ),
                ),
            )
        ),
    )

    assert "context.delivery_fee currency EUR does not match USD" in _error(
        validate_command(eur_fee)
    )
    assert "context.vendors[0].rules.ranges[0].fee currency EUR" in _error(
        validate_command(eur_range)
    )
