"""Fixed-point monetary values stored as integer cents"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Type, Union

from installment_ledger.domain.exceptions import DomainException, InvalidBalanceError

CENTS_PER_UNIT = 100

# Everything except digits, separators and a sign is currency noise ("R$", spaces)
_CURRENCY_NOISE = re.compile(r"[^\d,.\-]")

Ratio = Union[Decimal, int, float, str]


@dataclass(frozen=True, order=True)
class Money:
    """
    Non-negative amount in minor currency units (cents).

    Requirements:
    - Integer cents only, never floating point
    - Negative amounts are rejected at construction
    - Every operation returns a new instance

    Example:
        Money(1000) is 10.00
        Money(1000).scale(Decimal("0.333")) → Money(333)
    """

    cents: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise TypeError(f"Money expects integer cents, got {type(self.cents).__name__}")
        if self.cents < 0:
            raise InvalidBalanceError(f"Monetary amount cannot be negative: {self.cents}")

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    def add(self, other: Money) -> Money:
        return Money(self.cents + other.cents)

    def subtract(self, other: Money) -> Money:
        """Subtract, saturating at zero since amounts are never negative"""
        return Money(max(0, self.cents - other.cents))

    def scale(self, ratio: Ratio) -> Money:
        """
        Multiply by a ratio and round to the nearest cent.

        Halves round away from zero (ROUND_HALF_UP on Decimal).
        """
        factor = _to_decimal(ratio, InvalidBalanceError)
        if factor < 0:
            raise InvalidBalanceError(f"Scale ratio cannot be negative: {ratio}")
        scaled = (Decimal(self.cents) * factor).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return Money(int(scaled))

    def is_zero(self) -> bool:
        return self.cents == 0

    def compare(self, other: Money) -> int:
        """Return -1, 0 or 1 like a classic comparator"""
        return (self.cents > other.cents) - (self.cents < other.cents)

    def to_decimal(self) -> Decimal:
        return Decimal(self.cents).scaleb(-2)

    def __add__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __radd__(self, other: object) -> Money:
        # Lets sum() start from its default int 0
        if other == 0:
            return self
        return NotImplemented

    def __str__(self) -> str:
        return f"{self.to_decimal():.2f}"


def total(amounts: Iterable[Money]) -> Money:
    """Sum amounts exactly"""
    return Money(sum(amount.cents for amount in amounts))


def parse_money(
    value: Union[Money, int, Decimal, float, str, None],
    error: Type[DomainException] = InvalidBalanceError,
) -> Money:
    """
    Convert boundary input into Money.

    Accepted inputs:
    - Money: returned as-is
    - int: already in cents
    - Decimal / float: major units (10.5 → 1050 cents)
    - str: major units in either locale, "1.234,56", "1,234.56", "R$ 10,00"
    - None or blank string: zero

    Raises:
        error (InvalidBalanceError by default): malformed or negative input
    """
    if isinstance(value, Money):
        return value
    if value is None:
        return Money.zero()
    if isinstance(value, bool):
        raise error(f"Unsupported monetary value: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise error(f"Monetary amount cannot be negative: {value}")
        return Money(value)
    if isinstance(value, str):
        if not value.strip():
            return Money.zero()
        return _major_to_money(_normalize_amount(value, error), error)
    if isinstance(value, (Decimal, float)):
        return _major_to_money(_to_decimal(value, error), error)
    raise error(f"Unsupported monetary value: {value!r}")


def _normalize_amount(text: str, error: Type[DomainException]) -> Decimal:
    """Resolve thousands/decimal separators and return a Decimal in major units"""
    cleaned = _CURRENCY_NOISE.sub("", text)
    if not cleaned.strip("-"):
        raise error(f"Malformed monetary value: {text!r}")

    last_comma = cleaned.rfind(",")
    last_dot = cleaned.rfind(".")

    if last_comma >= 0 and last_dot >= 0:
        # Right-most separator wins as the decimal mark
        decimal_mark = "," if last_comma > last_dot else "."
    elif last_comma >= 0 or last_dot >= 0:
        mark = "," if last_comma >= 0 else "."
        digits_after = len(cleaned) - cleaned.rfind(mark) - 1
        decimal_mark = mark if cleaned.count(mark) == 1 and digits_after <= 2 else None
    else:
        decimal_mark = None

    for separator in ",.":
        if separator != decimal_mark:
            cleaned = cleaned.replace(separator, "")
    if decimal_mark:
        cleaned = cleaned.replace(decimal_mark, ".")

    return _to_decimal(cleaned, error)


def _to_decimal(value: Ratio, error: Type[DomainException]) -> Decimal:
    try:
        # repr() keeps floats at their shortest round-trip form (0.1 → "0.1")
        number = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise error(f"Malformed monetary value: {value!r}") from e
    if not number.is_finite():
        raise error(f"Monetary value must be finite: {value!r}")
    return number


def _major_to_money(amount: Decimal, error: Type[DomainException]) -> Money:
    cents = (amount * CENTS_PER_UNIT).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    if cents < 0:
        raise error(f"Monetary amount cannot be negative: {amount}")
    return Money(int(cents))
