from __future__ import annotations

import sys

import uvicorn

from event_pricing.adapters.inbound.cli import run_cli
from event_pricing.bootstrap import build_usecases
from event_pricing.logging_setup import configure_logging
from event_pricing.settings import get_settings


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    uvicorn.run("event_pricing.asgi:app", host=host, port=port, reload=False)


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    if not argv:
        print("usage: event-pricing '<json>' | event-pricing serve")
        return 2

    if argv[0] == "serve":
        serve()
        return 0

    settings = get_settings()
    configure_logging(settings.log_level)
    usecases = build_usecases(settings)
    return run_cli(usecases.calculate_totals, argv[0], usecases.pricing_defaults)


if __name__ == "__main__":
    raise SystemExit(main())
