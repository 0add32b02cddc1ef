from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from returns.result import Failure, Result, Success

from event_pricing.core.domain.model.errors import (
    ConfigurationError,
    PricingError,
    TaxProviderError,
)
from event_pricing.core.domain.model.money import Money
from event_pricing.core.domain.model.pricing import (
    PricingSnapshot,
    TaxCalculationMethod,
    TaxDetail,
)
from event_pricing.core.domain.service.calculator import (
    PreTaxBreakdown,
    exempt_tax,
    finish,
    manual_tax,
    price_before_tax,
)
from event_pricing.core.domain.service.jurisdiction import derive_jurisdiction
from event_pricing.core.domain.service.validation import validate_command
from event_pricing.core.ports.inbound.calculate_totals import (
    CalculateTotalsCommand,
    CalculateTotalsUseCase,
    PricingPreview,
)
from event_pricing.core.ports.outbound.delivery import DeliveryFeeStrategy
from event_pricing.core.ports.outbound.tax import TaxProvider, TaxQuote, TaxRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculateTotalsDeps:
    tax: TaxProvider
    delivery: DeliveryFeeStrategy


@dataclass(frozen=True)
class CalculateTotalsService(CalculateTotalsUseCase):
    deps: CalculateTotalsDeps

    async def calculate_totals(
        self, command: CalculateTotalsCommand
    ) -> Result[PricingSnapshot, PricingError]:
        pre = self._pre_tax(command)
        if isinstance(pre, Failure):
            return pre
        return await self._with_tax(command, pre.unwrap())

    async def preview_totals(self, command: CalculateTotalsCommand) -> PricingPreview:
        result = await self.calculate_totals(command)
        if isinstance(result, Success):
            return PricingPreview(snapshot=result.unwrap())

        err = result.failure()
        if isinstance(err, TaxProviderError):
            # pre-tax figures are still valid; show them as an estimate
            pre = self._pre_tax(command)
            if isinstance(pre, Success):
                logger.warning("tax pending for preview: %s", err)
                return PricingPreview(
                    snapshot=finish(pre.unwrap(), None), error=str(err), tax_pending=True
                )

        logger.warning("preview fell back to zero totals: %s: %s", type(err).__name__, err)
        return PricingPreview(
            snapshot=PricingSnapshot.zeroed(command.config.currency), error=str(err)
        )

    def _pre_tax(
        self, command: CalculateTotalsCommand
    ) -> Result[PreTaxBreakdown, PricingError]:
        return validate_command(command).bind(
            lambda cmd: price_before_tax(cmd, self.deps.delivery)
        )

    async def _with_tax(
        self, command: CalculateTotalsCommand, pre: PreTaxBreakdown
    ) -> Result[PricingSnapshot, PricingError]:
        config, ctx = command.config, command.context
        if ctx.is_tax_exempt:
            return Success(finish(pre, exempt_tax(config.currency)))

        method = config.tax_calculation_method
        if method == TaxCalculationMethod.MANUAL:
            return Success(finish(pre, manual_tax(pre, config, ctx.location)))
        if method != TaxCalculationMethod.AUTOMATIC:
            return Failure(
                ConfigurationError(f"unrecognized tax_calculation_method: {method!r}")
            )

        request = TaxRequest(
            taxable_base=pre.taxable_base,
            jurisdiction=derive_jurisdiction(ctx.location),
            delivery_fee=pre.delivery_fee,
        )
        quote = await self.deps.tax.compute_tax(request)
        return quote.map(
            lambda q: finish(_taxed_base(pre, q), _detail_from_quote(q, config.currency))
        )


def _taxed_base(pre: PreTaxBreakdown, quote: TaxQuote) -> PreTaxBreakdown:
    if quote.taxable_base is None:
        return pre
    return replace(pre, taxable_base=Money.of(quote.taxable_base.amount, pre.subtotal.currency))


def _detail_from_quote(quote: TaxQuote, currency: str) -> TaxDetail:
    return TaxDetail(
        rate=quote.rate,
        amount=Money.of(quote.amount.amount, currency),
        description=quote.description,
        jurisdiction=quote.jurisdiction,
    )
