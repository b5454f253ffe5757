"""Tests for wizard step validation."""
import pytest
from decimal import Decimal

from django_offerings.draft import OfferingDraft
from django_offerings.policies import CancellationPolicy, DepositPolicy
from django_offerings.pricing import BasePricing, GroupTier, SeasonalRate
from django_offerings.registry import ProductTypePlugin, ProductTypeRegistry
from django_offerings.validators import (
    ValidationResult,
    completion_percentage,
    section_completion,
    validate_all_steps,
    validate_step,
)


class TestValidationResult:

    def test_empty_result_is_valid(self):
        result = ValidationResult()
        assert result.is_valid
        assert bool(result)

    def test_warnings_do_not_invalidate(self):
        assert ValidationResult(warnings={"x": "hmm"}).is_valid

    def test_errors_invalidate(self):
        assert not ValidationResult(errors={"x": "bad"})


class TestCompleteDraft:
    """A fully filled draft passes every step."""

    @pytest.mark.parametrize("step_id", [1, 2, 3, 4, 5, 6, 7])
    def test_each_step_valid(self, valid_draft, step_id):
        assert validate_step(step_id, valid_draft).errors == {}

    def test_validate_all_steps_empty(self, valid_draft):
        assert validate_all_steps(valid_draft) == {}

    def test_validation_does_not_mutate(self, valid_draft):
        before = valid_draft.to_dict()
        for step_id in range(1, 8):
            validate_step(step_id, valid_draft)
        assert valid_draft.to_dict() == before


class TestBusinessTypeStep:

    def test_required_fields(self, empty_draft):
        errors = validate_step(1, empty_draft).errors
        assert "business_type" in errors
        assert "product_type" in errors

    def test_unknown_product_type(self, valid_draft):
        valid_draft.product_type = "spaceflight"
        assert validate_step(1, valid_draft).errors == {
            "product_type": "Unknown product type: spaceflight"
        }


class TestBasicInfoStep:

    def test_empty_draft_errors(self, empty_draft):
        errors = validate_step(2, empty_draft).errors
        assert set(errors) == {
            "basic_info.name",
            "basic_info.description",
            "basic_info.location",
            "basic_info.category",
        }

    def test_description_minimum_length(self, valid_draft):
        valid_draft.basic_info["description"] = "Too short"
        errors = validate_step(2, valid_draft).errors
        assert errors["basic_info.description"] == "Description must be at least 10 characters"

    def test_description_minimum_is_configurable(self, valid_draft, settings):
        settings.OFFERINGS_DESCRIPTION_MIN_LENGTH = 0
        valid_draft.basic_info["description"] = "Short"
        result = validate_step(2, valid_draft)
        assert result.is_valid
        assert "basic_info.description" in result.warnings

    def test_short_description_warns(self, valid_draft):
        valid_draft.basic_info["description"] = "A decent but brief description."
        result = validate_step(2, valid_draft)
        assert result.is_valid
        assert "basic_info.description" in result.warnings

    @pytest.mark.parametrize("duration", [0, -30, "abc", 1.5, None, 10081])
    def test_invalid_duration(self, valid_draft, duration):
        valid_draft.basic_info["duration"] = duration
        assert "basic_info.duration" in validate_step(2, valid_draft).errors

    def test_duration_as_numeric_string(self, valid_draft):
        valid_draft.basic_info["duration"] = "90"
        assert validate_step(2, valid_draft).is_valid

    def test_name_too_long(self, valid_draft):
        valid_draft.basic_info["name"] = "x" * 101
        assert "basic_info.name" in validate_step(2, valid_draft).errors

    def test_whitespace_location_is_blank(self, valid_draft):
        valid_draft.basic_info["location"] = "   "
        assert "basic_info.location" in validate_step(2, valid_draft).errors


class TestConfigurationStep:
    """Product configuration dispatches through the registry."""

    def test_seat_requires_pickup_details(self, valid_draft):
        valid_draft.product_config = {"total_seats": 0, "pickup_locations": [{"name": ""}]}
        errors = validate_step(3, valid_draft).errors
        assert "product_config.total_seats" in errors
        assert "product_config.pickup_locations[0].name" in errors
        assert "product_config.pickup_locations[0].pickup_time" in errors

    def test_seat_requires_at_least_one_pickup(self, valid_draft):
        valid_draft.product_config = {"total_seats": 20, "pickup_locations": []}
        assert "product_config.pickup_locations" in validate_step(3, valid_draft).errors

    @pytest.mark.parametrize("product_type,config,field", [
        ("capacity", {"max_capacity": 0}, "max_capacity"),
        ("capacity", {"max_capacity": 10, "min_group_size": 12}, "min_group_size"),
        ("open", {}, "main_meeting_point"),
        ("equipment", {"equipment_category": "kayak"}, "total_inventory"),
        ("equipment", {"total_inventory": 5}, "equipment_category"),
        ("package", {"package_type": "combo", "minimum_participants": 0}, "minimum_participants"),
        ("timeslot", {"class_type": "pottery", "max_class_size": 8}, "session_duration"),
    ])
    def test_product_type_rules(self, valid_draft, product_type, config, field):
        valid_draft.product_type = product_type
        valid_draft.product_config = config
        assert f"product_config.{field}" in validate_step(3, valid_draft).errors

    @pytest.mark.parametrize("product_type,config", [
        ("capacity", {"max_capacity": 120, "min_group_size": 2}),
        ("open", {"main_meeting_point": "Gastown Steam Clock"}),
        ("equipment", {"equipment_category": "kayak", "total_inventory": 12}),
        ("package", {"package_type": "adventure", "minimum_participants": 2}),
        ("timeslot", {"class_type": "pottery", "max_class_size": 8, "session_duration": 90}),
    ])
    def test_valid_configs(self, valid_draft, product_type, config):
        valid_draft.product_type = product_type
        valid_draft.product_config = config
        assert validate_step(3, valid_draft).is_valid

    def test_unknown_product_type(self, valid_draft):
        valid_draft.product_type = "unknown"
        assert "product_type" in validate_step(3, valid_draft).errors

    def test_crashing_plugin_blocks_step(self, valid_draft):
        def explode(config):
            raise RuntimeError("boom")

        ProductTypeRegistry.register(ProductTypePlugin(name="seat", label="Bus Tour", validator=explode))
        result = validate_step(3, valid_draft)
        assert result.errors == {"product_config": "Configuration could not be validated"}


class TestSchedulingStep:

    def test_required_fields(self, valid_draft):
        valid_draft.scheduling = {"schedule_type": "", "timezone": None}
        assert set(validate_step(4, valid_draft).errors) == {
            "scheduling.schedule_type",
            "scheduling.timezone",
        }


class TestPricingStep:

    def test_adult_price_must_be_positive(self, empty_draft):
        errors = validate_step(5, empty_draft).errors
        assert errors == {"pricing.base_pricing.adult": "Adult price is required and must be greater than 0"}

    def test_unsupported_currency(self, valid_draft):
        valid_draft.pricing["currency"] = "JPY"
        assert "pricing.currency" in validate_step(5, valid_draft).errors

    def test_tier_min_greater_than_max(self, valid_draft):
        valid_draft.pricing["group_tiers"] = [
            {"min_size": 10, "max_size": 5, "discount_type": "percentage", "discount_value": 5}
        ]
        assert "pricing.group_tiers[0].max_size" in validate_step(5, valid_draft).errors

    def test_tier_percentage_over_hundred(self, valid_draft):
        valid_draft.pricing["group_tiers"] = [
            {"min_size": 1, "max_size": 5, "discount_type": "percentage", "discount_value": 120}
        ]
        assert "pricing.group_tiers[0].discount_value" in validate_step(5, valid_draft).errors

    def test_seasonal_rate_rules(self, valid_draft):
        valid_draft.pricing["seasonal_rates"] = [
            {"name": "", "start_date": "2026-09-01", "end_date": "2026-06-01", "price_multiplier": 0}
        ]
        errors = validate_step(5, valid_draft).errors
        assert "pricing.seasonal_rates[0].name" in errors
        assert "pricing.seasonal_rates[0].price_multiplier" in errors
        assert "pricing.seasonal_rates[0].end_date" in errors

    def test_negative_policy_values(self, valid_draft):
        valid_draft.pricing["cancellation_policy"]["free_cancellation_hours"] = -1
        valid_draft.pricing["deposit_policy"]["value"] = -10
        errors = validate_step(5, valid_draft).errors
        assert "pricing.cancellation_policy.free_cancellation_hours" in errors
        assert "pricing.deposit_policy.value" in errors


class TestMediaStep:

    def test_required_fields(self, empty_draft):
        assert set(validate_step(6, empty_draft).errors) == {
            "media.images",
            "media.seo_data.meta_title",
            "media.seo_data.meta_description",
        }

    def test_few_images_warns(self, valid_draft):
        valid_draft.media["images"] = ["one.jpg"]
        result = validate_step(6, valid_draft)
        assert result.is_valid
        assert "media.images" in result.warnings


class TestSectionShapes:
    """Sections holding engine types or malformed values are read, never raised on."""

    def test_base_pricing_instance(self, valid_draft):
        valid_draft.pricing["base_pricing"] = BasePricing(adult=Decimal("50"))
        assert validate_step(5, valid_draft).is_valid

    def test_zero_base_pricing_instance(self, valid_draft):
        valid_draft.pricing["base_pricing"] = BasePricing()
        assert "pricing.base_pricing.adult" in validate_step(5, valid_draft).errors

    def test_tier_and_rate_instances(self, valid_draft):
        pricing = valid_draft.pricing
        pricing["group_tiers"] = [GroupTier.from_dict(t) for t in pricing["group_tiers"]]
        pricing["seasonal_rates"] = [SeasonalRate.from_dict(r) for r in pricing["seasonal_rates"]]
        assert validate_step(5, valid_draft).is_valid

    def test_policy_instances(self, valid_draft):
        valid_draft.pricing["cancellation_policy"] = CancellationPolicy(48, "fixed", Decimal("15"))
        valid_draft.pricing["deposit_policy"] = DepositPolicy(True, "percentage", Decimal("20"), 7)
        assert validate_step(5, valid_draft).is_valid

    @pytest.mark.parametrize("policy", ["strict", 12, ["fee"], None])
    def test_malformed_policies_ignored(self, valid_draft, policy):
        valid_draft.pricing["cancellation_policy"] = policy
        valid_draft.pricing["deposit_policy"] = policy
        assert validate_step(5, valid_draft).is_valid

    def test_tiers_not_a_list(self, valid_draft):
        valid_draft.pricing["group_tiers"] = "10-25"
        assert validate_step(5, valid_draft).errors == {"pricing.group_tiers": "Must be a list"}

    @pytest.mark.parametrize("seo", [["title"], "title", 3])
    def test_malformed_seo_data(self, valid_draft, seo):
        valid_draft.media["seo_data"] = seo
        errors = validate_step(6, valid_draft).errors
        assert set(errors) == {"media.seo_data.meta_title", "media.seo_data.meta_description"}

    def test_malformed_whole_sections(self):
        draft = OfferingDraft()
        draft.basic_info = None
        draft.scheduling = "weekly"
        draft.pricing = [1, 2]
        draft.media = 5

        aggregated = validate_all_steps(draft)

        assert "basic_info.name" in aggregated[2]
        assert "scheduling.timezone" in aggregated[4]
        assert "pricing.currency" in aggregated[5]
        assert "media.images" in aggregated[6]

    def test_unreadable_draft_fails_closed(self):
        result = validate_step(2, object())
        assert result.errors == {"step": "This step could not be validated"}


class TestAggregation:

    def test_unknown_step(self, valid_draft):
        assert validate_step(9, valid_draft).errors == {"step": "Unknown wizard step: 9"}

    def test_validate_all_steps_reports_failing_steps_only(self, valid_draft):
        valid_draft.scheduling["timezone"] = ""
        valid_draft.media["images"] = []
        assert set(validate_all_steps(valid_draft)) == {4, 6}

    def test_empty_draft_fails_every_step_but_scheduling(self):
        assert set(validate_all_steps(OfferingDraft())) == {1, 2, 3, 5, 6}

    def test_completion_of_full_draft(self, valid_draft):
        assert completion_percentage(valid_draft) == 100
        sections = section_completion(valid_draft)
        assert sections["basic_info"] == {
            "completed": 5, "total": 5, "has_errors": False, "has_warnings": False,
        }

    def test_completion_of_empty_draft(self):
        sections = section_completion(OfferingDraft())
        assert sections["scheduling"]["completed"] == 2
        assert sections["pricing"]["has_errors"]
        assert 0 < completion_percentage(OfferingDraft()) < 100
