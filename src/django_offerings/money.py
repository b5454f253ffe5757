"""Money value object with currency-aware arithmetic."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from dataclasses import dataclass
from typing import Union

from .exceptions import CurrencyMismatchError


# Currency precision rules for settlement/display
CURRENCY_DECIMALS = {
    'USD': 2, 'EUR': 2, 'GBP': 2,
    'CAD': 2, 'AUD': 2,
}

ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Coerce any input to a finite Decimal, falling back to zero.

    Pricing and policy functions are total: None, empty strings, junk
    strings, NaN and infinities all become Decimal("0").
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # via str so floats like 19.99 do not carry binary noise
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return ZERO
    if not result.is_finite():
        return ZERO
    return result


def to_int(value) -> int:
    """Coerce any input to an int, falling back to zero."""
    amount = to_decimal(value)
    return int(amount.to_integral_value(rounding=ROUND_HALF_UP))


def round_money(value, places: int = 2) -> Decimal:
    """Round half-up to the given number of decimal places."""
    return to_decimal(value).quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """
    Immutable money value object.

    Always normalizes amount to Decimal for precision.
    Supports currency-aware arithmetic operations.

    Usage:
        price = Money(Decimal("50"), "CAD")
        tax = price * Decimal("0.13")
        total = (price + tax).quantized()  # Money(Decimal("56.50"), "CAD")
    """
    amount: Decimal
    currency: str

    def __post_init__(self):
        """Normalize amount to Decimal."""
        if not isinstance(self.amount, Decimal):
            # Use object.__setattr__ because dataclass is frozen
            object.__setattr__(self, 'amount', to_decimal(self.amount))

    @classmethod
    def zero(cls, currency: str) -> 'Money':
        return cls(ZERO, currency)

    def quantized(self) -> 'Money':
        """
        Return quantized to currency decimals for display/settlement.

        Uses half-up rounding, the rule customers see on receipts.

        Returns:
            New Money object with quantized amount
        """
        decimals = CURRENCY_DECIMALS.get(self.currency, 2)
        return Money(round_money(self.amount, decimals), self.currency)

    def __add__(self, other: 'Money') -> 'Money':
        """Add two Money objects with the same currency."""
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot add {self.currency} to {other.currency}"
            )
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two Money objects with the same currency."""
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot subtract {other.currency} from {self.currency}"
            )
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: Union[Decimal, int, float]) -> 'Money':
        """Multiply Money by a numeric factor."""
        return Money(self.amount * to_decimal(factor), self.currency)

    def __str__(self) -> str:
        return f"{self.currency} {self.quantized().amount}"

    def floor_zero(self) -> 'Money':
        """Clamp negative amounts to zero."""
        if self.amount < 0:
            return Money.zero(self.currency)
        return self

    def is_zero(self) -> bool:
        """Check if amount is exactly zero."""
        return self.amount == 0
