"""Offering draft: the in-progress offering edited by the wizard.

A draft is a plain dataclass with one attribute per wizard section.
Dict sections are merged key-by-key by the FormStateStore; scalar
sections are assigned.

Serialization stores Decimal values as strings to avoid float drift in
JSON, and dates/datetimes as ISO strings.
"""

import copy
import json
import uuid
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import date, datetime
from decimal import Decimal

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .conf import get_setting


SCALAR_SECTIONS = ("business_type", "product_type", "is_draft")
DICT_SECTIONS = ("basic_info", "product_config", "scheduling", "pricing", "media")
SECTIONS = SCALAR_SECTIONS + DICT_SECTIONS


def default_basic_info() -> dict:
    return {
        "name": "",
        "description": "",
        "location": "",
        "category": "",
        "duration": 60,
        "difficulty_level": "easy",
        "min_age": 0,
        "max_group_size": 50,
        "tags": [],
    }


def default_scheduling() -> dict:
    return {
        "schedule_type": "fixed",
        "timezone": "UTC",
        "advance_booking_days": 7,
        "cutoff_hours": 24,
        "recurring_pattern": {},
        "blackout_dates": [],
    }


def default_pricing() -> dict:
    return {
        "base_pricing": {"adult": 0, "child": 0, "student": 0, "senior": 0},
        "currency": get_setting("DEFAULT_CURRENCY"),
        "tax_rate": get_setting("DEFAULT_TAX_RATE"),
        "tax_mode": "exclusive",
        "group_tiers": [],
        "seasonal_rates": [],
        "cancellation_policy": {
            "free_cancellation_hours": 24,
            "fee_type": "percentage",
            "fee_value": 0,
        },
        "deposit_policy": {
            "required": False,
            "type": "percentage",
            "value": 0,
            "due_days": 0,
        },
    }


def default_media() -> dict:
    return {
        "images": [],
        "videos": [],
        "seo_data": {
            "meta_title": "",
            "meta_description": "",
            "keywords": [],
            "slug": "",
        },
        "social_media": {
            "share_title": "",
            "share_description": "",
            "share_image": "",
        },
    }


@dataclass
class OfferingDraft:
    """Domain representation of an offering being created.

    Attributes:
        draft_id: Stable identifier used by persistence
        tenant_id: Owning tenant
        business_type: Free-form business category (step 1)
        product_type: One of ProductType values (step 1)
        basic_info: Name, description, location, category, duration (step 2)
        product_config: Product-type specific settings (step 3)
        scheduling: Schedule type, timezone, booking windows (step 4)
        pricing: Base prices, tiers, seasonal rates, tax, policies (step 5)
        media: Images, videos, SEO and social data (step 6)
        is_draft: False once published
        last_modified: Stamped on every merge-update
        revision: Stored revision this draft was loaded at (0 if never stored)
    """

    draft_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    tenant_id: str = ""
    business_type: str = ""
    product_type: str = ""
    basic_info: dict = field(default_factory=default_basic_info)
    product_config: dict = field(default_factory=dict)
    scheduling: dict = field(default_factory=default_scheduling)
    pricing: dict = field(default_factory=default_pricing)
    media: dict = field(default_factory=default_media)
    is_draft: bool = True
    last_modified: datetime = field(default_factory=timezone.now)
    revision: int = 0

    def copy(self) -> "OfferingDraft":
        """Deep copy, safe to hand to persistence while editing continues."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """Serialize to a JSON-safe dict."""
        data = {"draft_id": self.draft_id, "tenant_id": self.tenant_id}
        for section in SECTIONS:
            data[section] = _to_json(getattr(self, section))
        data["last_modified"] = self.last_modified.isoformat() if self.last_modified else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OfferingDraft":
        """Rebuild a draft from to_dict() output.

        Sections missing from data keep their defaults; present dict
        sections are merged over the defaults so new default keys appear
        on drafts saved by older versions.
        """
        draft = cls(
            draft_id=data.get("draft_id") or str(uuid.uuid4()),
            tenant_id=data.get("tenant_id") or "",
        )
        for section in SCALAR_SECTIONS:
            if section in data and data[section] is not None:
                setattr(draft, section, data[section])
        for section in DICT_SECTIONS:
            value = data.get(section)
            if isinstance(value, dict):
                merged = getattr(draft, section)
                merged.update(copy.deepcopy(value))
        draft.pricing = _restore_pricing_decimals(draft.pricing)

        last_modified = data.get("last_modified")
        if isinstance(last_modified, str):
            draft.last_modified = parse_datetime(last_modified) or timezone.now()
        elif isinstance(last_modified, datetime):
            draft.last_modified = last_modified
        return draft

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_json(cls, payload: str) -> "OfferingDraft":
        return cls.from_dict(json.loads(payload))


def _to_json(value):
    """Recursively convert Decimals and dates to strings."""
    if is_dataclass(value) and not isinstance(value, type):
        return _to_json(asdict(value))
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    return value


def _as_decimal(value):
    """Turn a serialized Decimal string back into a Decimal."""
    if isinstance(value, str):
        try:
            return Decimal(value)
        except ArithmeticError:
            return value
    return value


def _restore_pricing_decimals(pricing: dict) -> dict:
    """Restore Decimal money fields in a deserialized pricing section."""
    base = pricing.get("base_pricing")
    if isinstance(base, dict):
        pricing["base_pricing"] = {key: _as_decimal(value) for key, value in base.items()}

    for key in ("tax_rate",):
        if key in pricing:
            pricing[key] = _as_decimal(pricing[key])

    for tier in pricing.get("group_tiers") or []:
        if isinstance(tier, dict) and "discount_value" in tier:
            tier["discount_value"] = _as_decimal(tier["discount_value"])

    for rate in pricing.get("seasonal_rates") or []:
        if isinstance(rate, dict) and "price_multiplier" in rate:
            rate["price_multiplier"] = _as_decimal(rate["price_multiplier"])

    cancellation = pricing.get("cancellation_policy")
    if isinstance(cancellation, dict) and "fee_value" in cancellation:
        cancellation["fee_value"] = _as_decimal(cancellation["fee_value"])

    deposit = pricing.get("deposit_policy")
    if isinstance(deposit, dict) and "value" in deposit:
        deposit["value"] = _as_decimal(deposit["value"])

    return pricing
