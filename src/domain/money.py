"""Money Value Object

Fixed-point currency amount. Every money-bearing computation in the billing
core goes through this type; floats never enter the arithmetic.

Rules:
- All arithmetic runs in MONEY_CONTEXT (28 significant digits, ROUND_HALF_UP)
- Rates are applied as ``amount * rate / 100``
- Rounding to 2 decimal places happens only in quantize()/to_money_string()
"""

from dataclasses import dataclass
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP
from functools import total_ordering
from typing import Iterable, Union

MONEY_CONTEXT = Context(prec=28, rounding=ROUND_HALF_UP)
MONEY_DECIMAL_PLACES = 2
_CENT = Decimal(1).scaleb(-MONEY_DECIMAL_PLACES)
_HUNDRED = Decimal(100)

MoneyLike = Union["Money", Decimal, int, float, str, None]


def to_decimal(value: MoneyLike) -> Decimal:
    """
    Convert a money-like value to Decimal

    None and empty strings are zero. Floats go through their shortest
    string form so binary noise is not carried into the Decimal.

    Raises:
        ValueError: value is not a finite number
    """
    if isinstance(value, Money):
        return value.amount
    if value is None:
        return Decimal(0)
    if isinstance(value, bool):
        raise ValueError(f"Not a money value: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return Decimal(0)
    if isinstance(value, float):
        value = repr(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a money value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a finite money value: {value!r}")
    return result


@total_ordering
@dataclass(frozen=True, slots=True)
class Money:
    """Immutable decimal currency amount"""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", to_decimal(self.amount))

    @classmethod
    def of(cls, value: MoneyLike = None) -> "Money":
        if isinstance(value, Money):
            return value
        return cls(to_decimal(value))

    @classmethod
    def zero(cls) -> "Money":
        return cls(Decimal(0))

    @classmethod
    def total(cls, values: Iterable[MoneyLike]) -> "Money":
        result = Decimal(0)
        for value in values:
            result = MONEY_CONTEXT.add(result, to_decimal(value))
        return cls(result)

    def __add__(self, other: MoneyLike) -> "Money":
        return Money(MONEY_CONTEXT.add(self.amount, to_decimal(other)))

    def __sub__(self, other: MoneyLike) -> "Money":
        return Money(MONEY_CONTEXT.subtract(self.amount, to_decimal(other)))

    def __mul__(self, factor: MoneyLike) -> "Money":
        return Money(MONEY_CONTEXT.multiply(self.amount, to_decimal(factor)))

    __rmul__ = __mul__

    def __neg__(self) -> "Money":
        return Money(MONEY_CONTEXT.minus(self.amount))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Money):
            return self.amount == other.amount
        try:
            return self.amount == to_decimal(other)
        except ValueError:
            return NotImplemented

    def __lt__(self, other: MoneyLike) -> bool:
        return self.amount < to_decimal(other)

    def __hash__(self) -> int:
        return hash(self.amount)

    def percent(self, rate: MoneyLike) -> "Money":
        """Return ``rate`` percent of this amount (amount * rate / 100)"""
        scaled = MONEY_CONTEXT.multiply(self.amount, to_decimal(rate))
        return Money(MONEY_CONTEXT.divide(scaled, _HUNDRED))

    def clamp_to_zero(self) -> "Money":
        if self.amount < 0:
            return Money.zero()
        return self

    def quantize(self) -> "Money":
        """Round half-up to 2 decimal places (presentation boundary only)"""
        return Money(self.amount.quantize(_CENT, rounding=ROUND_HALF_UP))

    def to_money_string(self) -> str:
        return f"{self.quantize().amount:f}"

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    @property
    def decimal_places(self) -> int:
        exponent = self.amount.normalize().as_tuple().exponent
        return max(0, -exponent)

    def __str__(self) -> str:
        return self.to_money_string()
