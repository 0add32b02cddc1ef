from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from returns.result import Result, Success

from event_pricing.core.domain.model.errors import PricingError
from event_pricing.core.domain.model.money import Money
from event_pricing.core.domain.service.jurisdiction import extract_zip
from event_pricing.core.ports.outbound.tax import TaxProvider, TaxQuote, TaxRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZipRate:
    rate: Decimal
    city: str
    county: str


# Bay Area ZIP codes served by the marketplace (combined sales tax rates).
BAY_AREA_ZIP_RATES: Mapping[str, ZipRate] = {
    **{
        z: ZipRate(Decimal("0.0863"), "San Francisco", "San Francisco")
        for z in (
            "94102", "94103", "94104", "94105", "94107", "94108", "94109",
            "94110", "94111", "94112", "94114", "94115", "94116", "94117",
            "94118", "94121", "94122", "94123", "94124", "94127", "94129",
            "94131", "94132", "94133", "94134", "94158",
        )
    },
    **{
        z: ZipRate(Decimal("0.1075"), "Oakland", "Alameda")
        for z in (
            "94601", "94602", "94603", "94605", "94606", "94607", "94608",
            "94609", "94610", "94611", "94612", "94618", "94619", "94621",
        )
    },
    **{
        z: ZipRate(Decimal("0.1025"), "Berkeley", "Alameda")
        for z in ("94702", "94703", "94704", "94705", "94707", "94708", "94709", "94710")
    },
    "94536": ZipRate(Decimal("0.1075"), "Fremont", "Alameda"),
    "94538": ZipRate(Decimal("0.1075"), "Fremont", "Alameda"),
    "94566": ZipRate(Decimal("0.1025"), "Pleasanton", "Alameda"),
    "94568": ZipRate(Decimal("0.1025"), "Dublin", "Alameda"),
    "94596": ZipRate(Decimal("0.0875"), "Walnut Creek", "Contra Costa"),
    "94520": ZipRate(Decimal("0.0875"), "Concord", "Contra Costa"),
    "94901": ZipRate(Decimal("0.0875"), "San Rafael", "Marin"),
    "94941": ZipRate(Decimal("0.0875"), "Mill Valley", "Marin"),
    "95050": ZipRate(Decimal("0.0913"), "Santa Clara", "Santa Clara"),
    "95110": ZipRate(Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95113": ZipRate(Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95125": ZipRate(Decimal("0.0863"), "San Jose", "Santa Clara"),
    "94301": ZipRate(Decimal("0.0913"), "Palo Alto", "Santa Clara"),
    "94401": ZipRate(Decimal("0.0963"), "San Mateo", "San Mateo"),
    "95401": ZipRate(Decimal("0.0875"), "Santa Rosa", "Sonoma"),
}


@dataclass(frozen=True)
class StateRate:
    rate: Decimal
    abbreviation: str
    name: str


STATE_RATES: tuple[StateRate, ...] = (
    StateRate(Decimal("0.0875"), "ca", "california"),
    StateRate(Decimal("0.08"), "ny", "new york"),
    StateRate(Decimal("0.0625"), "tx", "texas"),
    StateRate(Decimal("0.06"), "fl", "florida"),
    StateRate(Decimal("0.0685"), "nv", "nevada"),
    StateRate(Decimal("0.065"), "wa", "washington"),
)

DEFAULT_RATE = Decimal("0.08")


@dataclass(frozen=True)
class LocationRateTaxProvider(TaxProvider):
    """Rate-table lookup used when no remote tax service is configured.

    Lookup order: ZIP code, full state name, state abbreviation as a whole
    word, then ``default_rate``.
    """

    zip_rates: Mapping[str, ZipRate] = field(default_factory=lambda: BAY_AREA_ZIP_RATES)
    state_rates: tuple[StateRate, ...] = STATE_RATES
    default_rate: Decimal = DEFAULT_RATE

    async def compute_tax(self, request: TaxRequest) -> Result[TaxQuote, PricingError]:
        rate, description, jurisdiction = self.lookup(request.jurisdiction)
        # delivery is taxed along with the rest of the order
        base = request.taxable_base + request.delivery_fee
        return Success(
            TaxQuote(
                rate=rate,
                amount=Money.of(base.amount * rate, base.currency),
                description=description,
                jurisdiction=jurisdiction,
                taxable_base=base,
            )
        )

    def lookup(self, location: str) -> tuple[Decimal, str, str]:
        text = (location or "").lower().strip()

        zip_code = extract_zip(text)
        if zip_code and zip_code in self.zip_rates:
            z = self.zip_rates[zip_code]
            return z.rate, f"{z.city} Tax ({z.county} County)", f"{z.city}, {z.county} County"

        for s in self.state_rates:
            if s.name in text:
                return s.rate, f"{s.abbreviation.upper()} State Tax", s.name.title()

        words = set(re.split(r"[\s,]+", text))
        for s in self.state_rates:
            if s.abbreviation in words:
                return s.rate, f"{s.abbreviation.upper()} State Tax", s.name.title()

        logger.warning("no tax rate for %r, using default %s", location, self.default_rate)
        return self.default_rate, "Default Tax", "Unknown"
