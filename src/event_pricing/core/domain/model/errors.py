from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PricingError(Exception):
    message: str

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True)
class InvalidInputError(PricingError):
    pass


@dataclass(frozen=True)
class ConfigurationError(PricingError):
    pass


@dataclass(frozen=True)
class TaxProviderError(PricingError):
    jurisdiction: str = ""

    def __str__(self) -> str:  # pragma: no cover
        return f"tax_provider_error: {self.jurisdiction or '-'} ({self.message})"


@dataclass(frozen=True)
class PersistenceError(PricingError):
    pass


@dataclass(frozen=True)
class OrderNotFound(PersistenceError):
    order_id: str = ""

    def __str__(self) -> str:  # pragma: no cover
        return f"order_not_found: {self.order_id} ({self.message})"
