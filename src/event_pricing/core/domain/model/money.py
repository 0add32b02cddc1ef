from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

CENT = Decimal("0.01")
# largest amount accepted at the input boundary
MAX_AMOUNT = Decimal("1000000000")


def to_cents(value: Decimal | int | str) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = "USD"

    @staticmethod
    def of(amount: Decimal | int | str, currency: str = "USD") -> "Money":
        return Money(to_cents(amount), currency)

    @staticmethod
    def zero(currency: str = "USD") -> "Money":
        return Money(Decimal("0.00"), currency)

    def __add__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.amount, self.currency)

    def __mul__(self, n: int) -> "Money":
        return Money(to_cents(self.amount * Decimal(n)), self.currency)

    def percent(self, pct: Decimal | int | str) -> "Money":
        """``pct`` percent of this amount, rounded half-up to the cent."""
        return Money(to_cents(self.amount * Decimal(str(pct)) / 100), self.currency)

    def is_negative(self) -> bool:
        return self.amount < 0

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"currency_mismatch: {self.currency} vs {other.currency}")


def fold_money(values: Iterable[Money], currency: str = "USD") -> Money:
    total = Money.zero(currency)
    for v in values:
        total = total + v
    return total
