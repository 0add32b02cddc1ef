from __future__ import annotations

from event_pricing.adapters.inbound.web import create_app
from event_pricing.bootstrap import build_usecases
from event_pricing.logging_setup import configure_logging
from event_pricing.settings import get_settings

configure_logging(get_settings().log_level)
app = create_app(build_usecases())
