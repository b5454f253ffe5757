"""Pricing engine for offering drafts.

Computes a PricingQuote by combining:
- BasePricing per participant category (adult, child, student, senior)
- SeasonalRate multipliers (applied to unit prices before line items)
- GroupTier discounts (first matching tier in declaration order)
- Tax (added on top in exclusive mode, embedded in inclusive mode)

Every function is pure and total: missing or malformed numeric input
coerces to zero instead of raising. Monetary fields of the final quote
are rounded half-up to 2 decimal places.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from .choices import DiscountType, TaxMode
from .conf import get_setting
from .fields import as_bool, as_date, as_int
from .money import ZERO, Money, round_money, to_decimal

CATEGORIES = ("adult", "child", "student", "senior")

# Count keys accepted per category, singular first
COUNT_ALIASES = {
    "adult": ("adult", "adults"),
    "child": ("child", "children"),
    "student": ("student", "students"),
    "senior": ("senior", "seniors"),
}

HUNDRED = Decimal("100")


def _non_negative(value) -> Decimal:
    amount = to_decimal(value)
    return amount if amount > 0 else ZERO


@dataclass(frozen=True)
class BasePricing:
    """Unit price per participant category. All prices are non-negative."""

    adult: Decimal = ZERO
    child: Decimal = ZERO
    student: Decimal = ZERO
    senior: Decimal = ZERO

    @classmethod
    def from_dict(cls, data) -> "BasePricing":
        if isinstance(data, BasePricing):
            return data
        if not isinstance(data, dict):
            return cls()
        return cls(**{category: _non_negative(data.get(category)) for category in CATEGORIES})

    def price_for(self, category: str) -> Decimal:
        return getattr(self, category, ZERO)

    def scaled(self, multiplier) -> "BasePricing":
        """Return prices multiplied by a (positive) factor."""
        factor = _non_negative(multiplier)
        return BasePricing(
            **{category: self.price_for(category) * factor for category in CATEGORIES}
        )

    def to_dict(self) -> dict:
        return {category: str(self.price_for(category)) for category in CATEGORIES}


@dataclass(frozen=True)
class GroupTier:
    """A participant-count range with a discount."""

    id: object = None
    min_size: int = 0
    max_size: int = 0
    discount_type: str = DiscountType.PERCENTAGE
    discount_value: Decimal = ZERO

    @classmethod
    def from_dict(cls, data) -> "GroupTier":
        if isinstance(data, GroupTier):
            return data
        if not isinstance(data, dict):
            # Never matches: min_size > max_size
            return cls(min_size=1, max_size=0)
        return cls(
            id=data.get("id"),
            min_size=as_int(data.get("min_size")) or 0,
            max_size=as_int(data.get("max_size")) or 0,
            discount_type=data.get("discount_type") or DiscountType.PERCENTAGE,
            discount_value=_non_negative(data.get("discount_value")),
        )

    def matches(self, participants: int) -> bool:
        return self.min_size <= participants <= self.max_size


@dataclass(frozen=True)
class SeasonalRate:
    """A date range (inclusive) whose multiplier scales base prices."""

    id: object = None
    name: str = ""
    start_date: date | None = None
    end_date: date | None = None
    price_multiplier: Decimal = Decimal("1")
    is_active: bool = True

    @classmethod
    def from_dict(cls, data) -> "SeasonalRate":
        if isinstance(data, SeasonalRate):
            return data
        if not isinstance(data, dict):
            return cls(is_active=False)
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            start_date=as_date(data.get("start_date")),
            end_date=as_date(data.get("end_date")),
            price_multiplier=to_decimal(data.get("price_multiplier")),
            is_active=as_bool(data.get("is_active"), default=True),
        )

    def applies_on(self, booking_date: date) -> bool:
        if not self.is_active or self.price_multiplier <= 0:
            return False
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= booking_date <= self.end_date


@dataclass(frozen=True)
class LineItem:
    """One participant category of a quote."""

    category: str
    quantity: int
    unit_price: Decimal
    amount: Decimal


@dataclass(frozen=True)
class LineItems:
    """Result of compute_line_items."""

    items: tuple[LineItem, ...]
    raw_subtotal: Decimal
    total_participants: int


@dataclass(frozen=True)
class GroupDiscount:
    """Result of compute_group_discount."""

    discounted_subtotal: Decimal
    discount: Decimal
    tier: GroupTier | None = None


@dataclass(frozen=True)
class TaxResult:
    """Result of compute_tax."""

    tax: Decimal
    total: Decimal


@dataclass(frozen=True)
class PricingQuote:
    """Immutable result of price computation.

    Attributes:
        subtotal: Sum of line items, after seasonal rate, before discount
        discount: Group discount amount
        tax: Tax added on top (0 in inclusive mode)
        total: subtotal - discount + tax
        currency: Currency code
        line_items: Per-category breakdown for display/audit
        participants: Total participant count used for tier matching
        applied_tier_id: Id of the group tier applied, if any
        applied_season_id: Id of the seasonal rate applied, if any
    """

    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)
    participants: int = 0
    applied_tier_id: object = None
    applied_season_id: object = None

    @property
    def total_money(self) -> Money:
        return Money(self.total, self.currency)

    def to_dict(self) -> dict:
        """Serialize with Decimal values as strings."""
        return {
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "tax": str(self.tax),
            "total": str(self.total),
            "currency": self.currency,
            "participants": self.participants,
            "applied_tier_id": self.applied_tier_id,
            "applied_season_id": self.applied_season_id,
            "line_items": [
                {
                    "category": item.category,
                    "quantity": item.quantity,
                    "unit_price": str(item.unit_price),
                    "amount": str(item.amount),
                }
                for item in self.line_items
            ],
        }


def participant_counts(counts) -> dict[str, int]:
    """Normalize a counts mapping to non-negative ints per category.

    Accepts singular or plural keys ({"adults": 2} == {"adult": 2}).
    """
    normalized = {category: 0 for category in CATEGORIES}
    if not isinstance(counts, dict):
        return normalized
    for category, aliases in COUNT_ALIASES.items():
        for key in aliases:
            if key in counts:
                number = as_int(counts[key]) or 0
                normalized[category] = max(number, 0)
                break
    return normalized


def compute_line_items(counts, base_pricing) -> LineItems:
    """
    Compute per-category line items and the raw subtotal.

    A category missing from base_pricing is priced at 0.

    Args:
        counts: Participants per category (singular or plural keys)
        base_pricing: BasePricing or dict of unit prices

    Returns:
        LineItems with unrounded amounts
    """
    pricing = BasePricing.from_dict(base_pricing)
    normalized = participant_counts(counts)

    items = []
    for category in CATEGORIES:
        quantity = normalized[category]
        unit_price = pricing.price_for(category)
        items.append(
            LineItem(
                category=category,
                quantity=quantity,
                unit_price=unit_price,
                amount=unit_price * quantity,
            )
        )

    return LineItems(
        items=tuple(items),
        raw_subtotal=sum((item.amount for item in items), ZERO),
        total_participants=sum(normalized.values()),
    )


def find_seasonal_rate(booking_date, seasonal_rates) -> SeasonalRate | None:
    """Return the first active rate whose range contains booking_date."""
    day = as_date(booking_date)
    if day is None:
        return None
    for raw in seasonal_rates or ():
        rate = SeasonalRate.from_dict(raw)
        if rate.applies_on(day):
            return rate
    return None


def apply_seasonal_rate(base_pricing, booking_date, seasonal_rates) -> BasePricing:
    """
    Scale every category price by the matching seasonal multiplier.

    Returns:
        The scaled BasePricing, or the prices unchanged if no rate matches
    """
    pricing = BasePricing.from_dict(base_pricing)
    rate = find_seasonal_rate(booking_date, seasonal_rates)
    if rate is None:
        return pricing
    return pricing.scaled(rate.price_multiplier)


def compute_group_discount(raw_subtotal, total_participants, tiers) -> GroupDiscount:
    """
    Apply the first group tier (in array order) matching the participant count.

    Tiers are never combined. When ranges overlap, declaration order,
    not range specificity, decides which tier applies.

    Args:
        raw_subtotal: Subtotal before discount
        total_participants: Participant count across all categories
        tiers: Sequence of GroupTier or tier dicts

    Returns:
        GroupDiscount with the discounted subtotal (never negative)
    """
    subtotal = _non_negative(raw_subtotal)
    participants = as_int(total_participants) or 0

    for raw in tiers or ():
        tier = GroupTier.from_dict(raw)
        if not tier.matches(participants):
            continue
        if tier.discount_type == DiscountType.FIXED:
            discounted = subtotal - tier.discount_value
        elif tier.discount_type == DiscountType.PERCENTAGE:
            discounted = subtotal * (1 - tier.discount_value / HUNDRED)
        else:
            discounted = subtotal
        discounted = max(discounted, ZERO)
        return GroupDiscount(
            discounted_subtotal=discounted,
            discount=subtotal - discounted,
            tier=tier,
        )

    return GroupDiscount(discounted_subtotal=subtotal, discount=ZERO)


def compute_tax(discounted_subtotal, tax_rate, tax_mode) -> TaxResult:
    """
    Compute tax on a discounted subtotal.

    exclusive: tax = subtotal * rate / 100, added to the total.
    inclusive: tax is already embedded in displayed prices; tax = 0.
    """
    subtotal = _non_negative(discounted_subtotal)
    if tax_mode == TaxMode.INCLUSIVE:
        return TaxResult(tax=ZERO, total=subtotal)
    tax = subtotal * _non_negative(tax_rate) / HUNDRED
    return TaxResult(tax=tax, total=subtotal + tax)


def compute_total(
    counts,
    base_pricing,
    tiers=(),
    tax_rate=0,
    tax_mode=TaxMode.EXCLUSIVE,
    currency: str | None = None,
    booking_date=None,
    seasonal_rates=(),
) -> PricingQuote:
    """
    Compose seasonal rate, line items, group discount and tax into a quote.

    Rounding happens once per component so the quote always satisfies
    total == subtotal - discount + tax exactly.

    Returns:
        PricingQuote with every monetary field rounded to 2 decimals
    """
    currency = currency or get_setting("DEFAULT_CURRENCY")
    season = find_seasonal_rate(booking_date, seasonal_rates)
    pricing = BasePricing.from_dict(base_pricing)
    if season is not None:
        pricing = pricing.scaled(season.price_multiplier)

    lines = compute_line_items(counts, pricing)
    group = compute_group_discount(lines.raw_subtotal, lines.total_participants, tiers)

    subtotal = Money(lines.raw_subtotal, currency).quantized()
    discount = Money(group.discount, currency).quantized()
    discounted = (subtotal - discount).floor_zero()
    taxed = compute_tax(discounted.amount, tax_rate, tax_mode)
    tax = Money(taxed.tax, currency).quantized()
    total = discounted + tax

    return PricingQuote(
        subtotal=subtotal.amount,
        discount=discount.amount,
        tax=tax.amount,
        total=total.amount,
        currency=currency,
        line_items=tuple(
            LineItem(
                category=item.category,
                quantity=item.quantity,
                unit_price=round_money(item.unit_price),
                amount=round_money(item.amount),
            )
            for item in lines.items
            if item.quantity
        ),
        participants=lines.total_participants,
        applied_tier_id=group.tier.id if group.tier else None,
        applied_season_id=season.id if season else None,
    )


def quote_for_draft(draft, counts, booking_date=None) -> PricingQuote:
    """
    Price a booking against a draft's pricing section.

    Reads base_pricing, group_tiers, seasonal_rates, tax_rate, currency
    and tax_mode. A draft without tax_mode falls back to the boolean
    tax_inclusive flag.
    """
    pricing = draft.pricing or {}
    tax_mode = pricing.get("tax_mode")
    if not tax_mode:
        tax_mode = TaxMode.INCLUSIVE if pricing.get("tax_inclusive") else TaxMode.EXCLUSIVE

    return compute_total(
        counts,
        pricing.get("base_pricing") or {},
        tiers=pricing.get("group_tiers") or (),
        tax_rate=pricing.get("tax_rate"),
        tax_mode=tax_mode,
        currency=pricing.get("currency") or None,
        booking_date=booking_date,
        seasonal_rates=pricing.get("seasonal_rates") or (),
    )
