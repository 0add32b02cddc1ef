from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import httpx
from returns.result import Failure, Result, Success

from event_pricing.core.domain.model.errors import PricingError, TaxProviderError
from event_pricing.core.domain.model.money import Money
from event_pricing.core.ports.outbound.tax import TaxProvider, TaxQuote, TaxRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpTaxProvider(TaxProvider):
    """Remote tax calculation service.

    Expects ``{"rate", "amount", "description"}`` (``jurisdiction`` optional)
    back from a POST of the taxable base. No retries; callers decide.
    """

    url: str
    timeout_seconds: float = 10.0
    api_key: str | None = None
    transport: httpx.AsyncBaseTransport | None = None

    async def compute_tax(self, request: TaxRequest) -> Result[TaxQuote, PricingError]:
        payload = {
            "taxable_base": str(request.taxable_base.amount),
            "delivery_fee": str(request.delivery_fee.amount),
            "currency": request.taxable_base.currency,
            "jurisdiction": request.jurisdiction,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(self.url, json=payload, headers=headers)
        except httpx.TimeoutException:
            logger.error("tax provider timed out after %ss", self.timeout_seconds)
            return Failure(
                TaxProviderError("tax provider timed out", jurisdiction=request.jurisdiction)
            )
        except httpx.HTTPError as e:
            logger.error("tax provider request failed: %s", e)
            return Failure(
                TaxProviderError(
                    f"tax provider unreachable: {e}", jurisdiction=request.jurisdiction
                )
            )

        if response.status_code >= 400:
            logger.error("tax provider returned %s: %s", response.status_code, response.text)
            return Failure(
                TaxProviderError(
                    f"tax provider returned {response.status_code}",
                    jurisdiction=request.jurisdiction,
                )
            )

        try:
            body = response.json()
            base = body.get("taxable_base")
            quote = TaxQuote(
                rate=Decimal(str(body["rate"])),
                amount=Money.of(str(body["amount"]), request.taxable_base.currency),
                description=str(body.get("description") or "Sales Tax"),
                jurisdiction=str(body.get("jurisdiction") or request.jurisdiction),
                taxable_base=None
                if base is None
                else Money.of(str(base), request.taxable_base.currency),
            )
        except (ValueError, KeyError, TypeError, AttributeError, InvalidOperation) as e:
            return Failure(
                TaxProviderError(
                    f"malformed tax provider response: {e!r}",
                    jurisdiction=request.jurisdiction,
                )
            )
        return Success(quote)
