"""Shared fixtures for django-offerings tests."""

from decimal import Decimal

import pytest

from django_offerings.conf import clear_gateway_cache
from django_offerings.draft import OfferingDraft
from django_offerings.product_types import register_builtin_product_types
from django_offerings.registry import ProductTypeRegistry
from django_offerings.store import FormStateStore

from tests.fakes import InMemoryDraftPersistence, RecordingPublishingGateway


@pytest.fixture(autouse=True)
def builtin_product_types():
    """Restore the built-in product types after tests that touch the registry."""
    yield
    ProductTypeRegistry.clear()
    register_builtin_product_types()


@pytest.fixture(autouse=True)
def fresh_gateways():
    clear_gateway_cache()
    yield
    clear_gateway_cache()


@pytest.fixture
def valid_draft():
    """A draft that passes every wizard step."""
    return OfferingDraft(
        tenant_id="tenant-1",
        business_type="tours",
        product_type="seat",
        basic_info={
            "name": "Sunset Coastal Bus Tour",
            "description": "A three hour guided bus tour along the coast, ending with the sunset.",
            "location": "Vancouver, BC",
            "category": "Sightseeing",
            "duration": 180,
            "difficulty_level": "easy",
            "min_age": 0,
            "max_group_size": 40,
            "tags": ["coast", "sunset"],
        },
        product_config={
            "total_seats": 40,
            "vehicle_type": "coach",
            "pickup_locations": [
                {"name": "Waterfront Station", "pickup_time": "16:00"},
                {"name": "Stanley Park", "pickup_time": "16:20"},
            ],
        },
        scheduling={
            "schedule_type": "fixed",
            "timezone": "America/Vancouver",
            "advance_booking_days": 7,
            "cutoff_hours": 24,
            "recurring_pattern": {},
            "blackout_dates": [],
        },
        pricing={
            "base_pricing": {
                "adult": Decimal("50.00"),
                "child": Decimal("20.00"),
                "student": Decimal("35.00"),
                "senior": Decimal("40.00"),
            },
            "currency": "CAD",
            "tax_rate": Decimal("13"),
            "tax_mode": "exclusive",
            "group_tiers": [
                {"id": "tier-1", "min_size": 10, "max_size": 25,
                 "discount_type": "percentage", "discount_value": Decimal("10")},
            ],
            "seasonal_rates": [
                {"id": "summer", "name": "Summer", "start_date": "2026-06-01",
                 "end_date": "2026-08-31", "price_multiplier": Decimal("1.25"), "is_active": True},
            ],
            "cancellation_policy": {
                "free_cancellation_hours": 24,
                "fee_type": "percentage",
                "fee_value": Decimal("10"),
            },
            "deposit_policy": {
                "required": True,
                "type": "percentage",
                "value": Decimal("25"),
                "due_days": 14,
            },
        },
        media={
            "images": ["coast-1.jpg", "coast-2.jpg", "coast-3.jpg"],
            "videos": [],
            "seo_data": {
                "meta_title": "Sunset Coastal Bus Tour",
                "meta_description": "Guided coastal bus tour at sunset.",
                "keywords": ["tour"],
                "slug": "sunset-coastal-bus-tour",
            },
            "social_media": {},
        },
    )


@pytest.fixture
def empty_draft():
    return OfferingDraft(tenant_id="tenant-1")


@pytest.fixture
def store(valid_draft):
    return FormStateStore(valid_draft)


@pytest.fixture
def publishing_gateway():
    return RecordingPublishingGateway()


@pytest.fixture
def draft_persistence():
    return InMemoryDraftPersistence()
