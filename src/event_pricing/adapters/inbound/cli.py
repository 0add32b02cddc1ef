from __future__ import annotations

import asyncio
import json
from typing import Any

from returns.result import Failure, Result, Success

from event_pricing.core.domain.model.errors import InvalidInputError, PricingError
from event_pricing.core.domain.model.pricing import PricingConfiguration
from event_pricing.core.domain.service.configuration import resolve_configuration
from event_pricing.core.domain.service.parsing import (
    parse_adjustment,
    parse_context,
    parse_line_item,
    parse_many,
)
from event_pricing.core.ports.inbound.calculate_totals import (
    CalculateTotalsCommand,
    CalculateTotalsUseCase,
)


def run_cli(
    usecase: CalculateTotalsUseCase, raw: str, defaults: PricingConfiguration
) -> int:
    """
    raw: JSON string.
    Example:
      {"line_items":[{"id":"buffet","price":"65.00","quantity":100}],
       "context":{"location":"San Francisco, CA 94103"},
       "settings":{"serviceFeePercentage":5}}
    """
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        print(f"invalid_input: {e}")
        return 2
    if not isinstance(payload, dict):
        print("invalid_input: expected a JSON object")
        return 2

    parsed = _parse_command(payload, defaults)
    if isinstance(parsed, Failure):
        print(f"invalid_input: {parsed.failure()}")
        return 2

    result = asyncio.run(usecase.calculate_totals(parsed.unwrap()))

    if isinstance(result, Success):
        print("[ok]", result.unwrap().to_json())
        return 0

    err = result.failure()
    print("[ng]", f"{type(err).__name__}: {err}")
    return 2 if isinstance(err, InvalidInputError) else 1


def _parse_command(
    payload: dict[str, Any], defaults: PricingConfiguration
) -> Result[CalculateTotalsCommand, PricingError]:
    settings = payload.get("settings")
    config = resolve_configuration(settings if isinstance(settings, dict) else None, defaults)
    currency = config.currency

    return (
        parse_many(
            payload.get("line_items", []),
            lambda raw, i: parse_line_item(raw, i, currency),
        )
        .bind(
            lambda items: parse_many(payload.get("adjustments", []), parse_adjustment).map(
                lambda adjustments: (items, adjustments)
            )
        )
        .bind(
            lambda parts: parse_context(payload.get("context"), currency).map(
                lambda context: CalculateTotalsCommand(
                    line_items=parts[0],
                    adjustments=parts[1],
                    config=config,
                    context=context,
                )
            )
        )
    )
