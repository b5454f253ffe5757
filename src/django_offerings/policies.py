"""Cancellation and deposit policy evaluation.

Both evaluators produce DECISIONS, not transactions: they never move
money. Inputs are coerced like the pricing engine, so malformed policy
values count as zero.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from .choices import DiscountType
from .conf import get_setting
from .fields import as_bool, as_date, as_int
from .money import ZERO, Money, to_decimal

HUNDRED = Decimal("100")


# =============================================================================
# Policies
# =============================================================================


@dataclass(frozen=True)
class CancellationPolicy:
    """Free cancellation window plus the fee retained inside it."""

    free_cancellation_hours: int = 0
    fee_type: str = DiscountType.PERCENTAGE
    fee_value: Decimal = ZERO

    @classmethod
    def from_dict(cls, data) -> "CancellationPolicy":
        if isinstance(data, CancellationPolicy):
            return data
        if not isinstance(data, dict):
            return cls()
        hours = as_int(data.get("free_cancellation_hours"))
        return cls(
            free_cancellation_hours=max(hours, 0) if hours is not None else 0,
            fee_type=data.get("fee_type") or DiscountType.PERCENTAGE,
            fee_value=max(to_decimal(data.get("fee_value")), ZERO),
        )


@dataclass(frozen=True)
class DepositPolicy:
    """Up-front deposit taken at booking time."""

    required: bool = False
    type: str = DiscountType.PERCENTAGE
    value: Decimal = ZERO
    due_days: int = 0

    @classmethod
    def from_dict(cls, data) -> "DepositPolicy":
        if isinstance(data, DepositPolicy):
            return data
        if not isinstance(data, dict):
            return cls()
        due_days = as_int(data.get("due_days"))
        return cls(
            required=as_bool(data.get("required")),
            type=data.get("type") or DiscountType.PERCENTAGE,
            value=max(to_decimal(data.get("value")), ZERO),
            due_days=max(due_days, 0) if due_days is not None else 0,
        )


# =============================================================================
# Cancellation
# =============================================================================


@dataclass(frozen=True)
class CancellationQuote:
    """Immutable result of a cancellation evaluation.

    Attributes:
        refund: Amount returned to the customer
        fee: Amount retained (never more than the booking total)
        is_free_cancellation: True when cancelled at or beyond the free window
        hours_before_departure: Hours used for the evaluation (>= 0)
        currency: Currency code
        reason: Human-readable explanation
    """

    refund: Decimal
    fee: Decimal
    is_free_cancellation: bool
    hours_before_departure: Decimal
    currency: str
    reason: str


def hours_before_departure(departure: datetime, cancelled_at: datetime) -> int:
    """Whole hours between cancellation and departure, floored at 0."""
    hours = int((departure - cancelled_at).total_seconds() / 3600)
    return max(hours, 0)


def compute_cancellation_quote(
    booking_total,
    policy,
    hours_before_departure,
    currency: str | None = None,
) -> CancellationQuote:
    """
    Compute the refund for a cancellation.

    At or beyond the free window the whole total is refunded. Inside it
    the fee (percentage of total or fixed amount) is retained.

    Args:
        booking_total: Amount paid for the booking
        policy: CancellationPolicy or policy dict
        hours_before_departure: Hours between cancellation and departure;
            negative values (cancelled after departure) count as 0
        currency: Currency code (defaults to OFFERINGS_DEFAULT_CURRENCY)

    Returns:
        CancellationQuote with refund and fee rounded to 2 decimals
    """
    currency = currency or get_setting("DEFAULT_CURRENCY")
    policy = CancellationPolicy.from_dict(policy)
    total = Money(max(to_decimal(booking_total), ZERO), currency).quantized()
    hours = max(to_decimal(hours_before_departure), ZERO)

    if hours >= policy.free_cancellation_hours:
        return CancellationQuote(
            refund=total.amount,
            fee=ZERO.quantize(Decimal("0.01")),
            is_free_cancellation=True,
            hours_before_departure=hours,
            currency=currency,
            reason=f"Full refund - cancelled {hours} hours before departure",
        )

    if policy.fee_type == DiscountType.FIXED:
        fee = Money(policy.fee_value, currency)
    else:
        fee = total * (policy.fee_value / HUNDRED)
    fee = fee.quantized()
    if fee.amount > total.amount:
        fee = total

    refund = (total - fee).floor_zero()
    return CancellationQuote(
        refund=refund.amount,
        fee=fee.amount,
        is_free_cancellation=False,
        hours_before_departure=hours,
        currency=currency,
        reason=(
            f"Cancellation fee {fee} - cancelled {hours} hours before departure, "
            f"inside the {policy.free_cancellation_hours} hour free window"
        ),
    )


# =============================================================================
# Deposit
# =============================================================================


@dataclass(frozen=True)
class DepositQuote:
    """Immutable result of a deposit evaluation.

    Attributes:
        deposit_due: Amount due at booking
        remainder: Balance due before departure
        due_days: Days before departure the remainder is due
        due_date: Date the remainder is due (None without a departure date)
        currency: Currency code
    """

    deposit_due: Decimal
    remainder: Decimal
    due_days: int
    due_date: date | None
    currency: str


def compute_deposit(
    booking_total,
    deposit_policy,
    departure_date=None,
    currency: str | None = None,
) -> DepositQuote:
    """
    Split a booking total into deposit and remainder.

    Not required: deposit 0, remainder = total. Otherwise the deposit is
    a percentage of the total or a fixed amount, capped at the total.
    """
    currency = currency or get_setting("DEFAULT_CURRENCY")
    policy = DepositPolicy.from_dict(deposit_policy)
    total = Money(max(to_decimal(booking_total), ZERO), currency).quantized()

    if not policy.required:
        deposit = Money.zero(currency).quantized()
    elif policy.type == DiscountType.FIXED:
        deposit = Money(policy.value, currency).quantized()
    else:
        deposit = (total * (policy.value / HUNDRED)).quantized()
    if deposit.amount > total.amount:
        deposit = total

    departure = as_date(departure_date)
    due_date = departure - timedelta(days=policy.due_days) if departure else None

    return DepositQuote(
        deposit_due=deposit.amount,
        remainder=(total - deposit).amount,
        due_days=policy.due_days,
        due_date=due_date,
        currency=currency,
    )


def policies_for_draft(draft) -> tuple[CancellationPolicy, DepositPolicy]:
    """Read both policies from a draft's pricing section."""
    pricing = draft.pricing or {}
    return (
        CancellationPolicy.from_dict(pricing.get("cancellation_policy")),
        DepositPolicy.from_dict(pricing.get("deposit_policy")),
    )
