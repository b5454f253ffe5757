"""
Pure function validators for wizard steps.

validate_step(step_id, draft) returns a ValidationResult mapping field
paths to human-readable messages. Validators never raise and never
mutate the draft. The configuration step dispatches through the
ProductTypeRegistry.
"""

import logging
from decimal import Decimal
from dataclasses import asdict, dataclass, field, is_dataclass

from . import product_types  # noqa: F401  registers the built-in product types
from .choices import Currency, DiscountType, TaxMode
from .conf import get_setting
from .fields import as_date, as_int, get_path, is_blank, is_positive_int
from .money import to_decimal
from .registry import ProductTypeRegistry
from .steps import REVIEW_STEP, VALIDATED_STEP_IDS, WIZARD_STEPS

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100
MAX_DURATION_MINUTES = 10080  # 7 days
MAX_DESCRIPTION_LENGTH = 2000
SHORT_DESCRIPTION_WARNING = 50
RECOMMENDED_IMAGE_COUNT = 3


def _as_map(value) -> dict:
    """Nested section as a dict: dataclasses are expanded, anything else is empty."""
    if isinstance(value, dict):
        return value
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return {}


def _as_list(value) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating one wizard step.

    Attributes:
        errors: Field path -> error message (empty if valid)
        warnings: Field path -> advisory message; never blocks navigation
    """

    errors: dict[str, str] = field(default_factory=dict)
    warnings: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def __bool__(self) -> bool:
        """Allow truthy/falsy evaluation based on is_valid."""
        return self.is_valid


def _validate_business_type(draft) -> ValidationResult:
    errors = {}
    if is_blank(draft.business_type):
        errors["business_type"] = "Business type is required"
    if is_blank(draft.product_type):
        errors["product_type"] = "Product type is required"
    elif ProductTypeRegistry.get(draft.product_type) is None:
        errors["product_type"] = f"Unknown product type: {draft.product_type}"
    return ValidationResult(errors=errors)


def _validate_basic_info(draft) -> ValidationResult:
    info = _as_map(draft.basic_info)
    errors = {}
    warnings = {}

    name = info.get("name")
    if is_blank(name):
        errors["basic_info.name"] = "Offering name is required"
    elif len(str(name)) > MAX_NAME_LENGTH:
        errors["basic_info.name"] = f"Name must be less than {MAX_NAME_LENGTH} characters"

    min_length = as_int(get_setting("DESCRIPTION_MIN_LENGTH")) or 0
    description = str(info.get("description") or "").strip()
    if min_length and len(description) < min_length:
        errors["basic_info.description"] = (
            f"Description must be at least {min_length} characters"
        )
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        errors["basic_info.description"] = (
            f"Description must be less than {MAX_DESCRIPTION_LENGTH} characters"
        )
    elif len(description) < SHORT_DESCRIPTION_WARNING:
        warnings["basic_info.description"] = "Consider adding more detail to your description"

    if is_blank(info.get("location")):
        errors["basic_info.location"] = "Location is required"
    if is_blank(info.get("category")):
        errors["basic_info.category"] = "Category is required"

    duration = info.get("duration")
    if not is_positive_int(duration):
        errors["basic_info.duration"] = "Duration must be a positive whole number of minutes"
    elif as_int(duration) > MAX_DURATION_MINUTES:
        errors["basic_info.duration"] = "Duration cannot exceed 7 days (10,080 minutes)"

    return ValidationResult(errors=errors, warnings=warnings)


def _validate_configuration(draft) -> ValidationResult:
    try:
        config_errors = ProductTypeRegistry.validate_config(
            draft.product_type, draft.product_config or {}
        )
    except Exception:
        # a crashing plugin blocks the step
        logger.exception(f"Product config validator failed for {draft.product_type}")
        return ValidationResult(
            errors={"product_config": "Configuration could not be validated"}
        )

    errors = {}
    for key, message in config_errors.items():
        path = key if key == "product_type" else f"product_config.{key}"
        errors[path] = message
    return ValidationResult(errors=errors)


def _validate_scheduling(draft) -> ValidationResult:
    scheduling = _as_map(draft.scheduling)
    errors = {}
    if is_blank(scheduling.get("schedule_type")):
        errors["scheduling.schedule_type"] = "Schedule type is required"
    if is_blank(scheduling.get("timezone")):
        errors["scheduling.timezone"] = "Timezone is required"
    return ValidationResult(errors=errors)


def _validate_pricing(draft) -> ValidationResult:
    pricing = _as_map(draft.pricing)
    errors = {}

    base = _as_map(pricing.get("base_pricing"))
    if to_decimal(base.get("adult")) <= 0:
        errors["pricing.base_pricing.adult"] = (
            "Adult price is required and must be greater than 0"
        )
    for category in ("child", "student", "senior"):
        if to_decimal(base.get(category)) < 0:
            errors[f"pricing.base_pricing.{category}"] = (
                f"{category.capitalize()} price cannot be negative"
            )

    currency = pricing.get("currency")
    if is_blank(currency):
        errors["pricing.currency"] = "Currency is required"
    elif currency not in Currency.values:
        errors["pricing.currency"] = f"Unsupported currency: {currency}"

    if to_decimal(pricing.get("tax_rate")) < 0:
        errors["pricing.tax_rate"] = "Tax rate cannot be negative"
    tax_mode = pricing.get("tax_mode")
    if tax_mode and tax_mode not in TaxMode.values:
        errors["pricing.tax_mode"] = f"Unknown tax mode: {tax_mode}"

    for key in ("group_tiers", "seasonal_rates"):
        if pricing.get(key) not in (None, "") and not isinstance(pricing[key], (list, tuple)):
            errors[f"pricing.{key}"] = "Must be a list"

    for i, tier in enumerate(_as_list(pricing.get("group_tiers"))):
        prefix = f"pricing.group_tiers[{i}]"
        if not isinstance(tier, dict) and not is_dataclass(tier):
            errors[prefix] = "Group tier must be an object"
            continue
        tier = _as_map(tier)
        min_size = as_int(tier.get("min_size"))
        max_size = as_int(tier.get("max_size"))
        if min_size is None or min_size < 1:
            errors[f"{prefix}.min_size"] = "Minimum size must be at least 1"
        if max_size is None or (min_size is not None and max_size < min_size):
            errors[f"{prefix}.max_size"] = "Maximum size must be at least the minimum size"
        if tier.get("discount_type") not in DiscountType.values:
            errors[f"{prefix}.discount_type"] = "Discount type must be percentage or fixed"
        value = to_decimal(tier.get("discount_value"))
        if value < 0:
            errors[f"{prefix}.discount_value"] = "Discount cannot be negative"
        elif tier.get("discount_type") == DiscountType.PERCENTAGE and value > 100:
            errors[f"{prefix}.discount_value"] = "Discount cannot exceed 100%"

    for i, rate in enumerate(_as_list(pricing.get("seasonal_rates"))):
        prefix = f"pricing.seasonal_rates[{i}]"
        if not isinstance(rate, dict) and not is_dataclass(rate):
            errors[prefix] = "Seasonal rate must be an object"
            continue
        rate = _as_map(rate)
        if is_blank(rate.get("name")):
            errors[f"{prefix}.name"] = "Season name is required"
        if to_decimal(rate.get("price_multiplier")) <= 0:
            errors[f"{prefix}.price_multiplier"] = "Price multiplier must be greater than 0"
        start = as_date(rate.get("start_date"))
        end = as_date(rate.get("end_date"))
        if start is None:
            errors[f"{prefix}.start_date"] = "Start date is required"
        if end is None:
            errors[f"{prefix}.end_date"] = "End date is required"
        elif start is not None and end < start:
            errors[f"{prefix}.end_date"] = "End date cannot be before start date"

    cancellation = _as_map(pricing.get("cancellation_policy"))
    hours = cancellation.get("free_cancellation_hours")
    if hours not in (None, "") and (as_int(hours) is None or as_int(hours) < 0):
        errors["pricing.cancellation_policy.free_cancellation_hours"] = (
            "Free cancellation hours cannot be negative"
        )
    if to_decimal(cancellation.get("fee_value")) < 0:
        errors["pricing.cancellation_policy.fee_value"] = "Cancellation fee cannot be negative"

    deposit = _as_map(pricing.get("deposit_policy"))
    if to_decimal(deposit.get("value")) < 0:
        errors["pricing.deposit_policy.value"] = "Deposit cannot be negative"
    due_days = deposit.get("due_days")
    if due_days not in (None, "") and (as_int(due_days) is None or as_int(due_days) < 0):
        errors["pricing.deposit_policy.due_days"] = "Payment due days cannot be negative"

    return ValidationResult(errors=errors)


def _validate_media(draft) -> ValidationResult:
    media = _as_map(draft.media)
    errors = {}
    warnings = {}

    images = media.get("images") or []
    if not isinstance(images, list) or len(images) == 0:
        errors["media.images"] = "At least one image is required"
    elif len(images) < RECOMMENDED_IMAGE_COUNT:
        warnings["media.images"] = "Consider adding more images to showcase your offering"

    seo = _as_map(media.get("seo_data"))
    if is_blank(seo.get("meta_title")):
        errors["media.seo_data.meta_title"] = "Meta title is required"
    if is_blank(seo.get("meta_description")):
        errors["media.seo_data.meta_description"] = "Meta description is required"

    return ValidationResult(errors=errors, warnings=warnings)


def _validate_review(draft) -> ValidationResult:
    return ValidationResult()


STEP_VALIDATORS = {
    1: _validate_business_type,
    2: _validate_basic_info,
    3: _validate_configuration,
    4: _validate_scheduling,
    5: _validate_pricing,
    6: _validate_media,
    REVIEW_STEP: _validate_review,
}


def validate_step(step_id: int, draft) -> ValidationResult:
    """
    Validate one wizard step of a draft.

    Args:
        step_id: Wizard step (1..7)
        draft: The OfferingDraft to check

    Returns:
        ValidationResult; an unknown step id or a draft the step cannot
        read is reported as an error
    """
    validator = STEP_VALIDATORS.get(step_id)
    if validator is None:
        return ValidationResult(errors={"step": f"Unknown wizard step: {step_id}"})
    try:
        return validator(draft)
    except Exception:
        logger.exception(f"Validator for step {step_id} failed")
        return ValidationResult(errors={"step": "This step could not be validated"})


def validate_all_steps(draft) -> dict[int, dict[str, str]]:
    """
    Validate steps 1-6 and aggregate their errors.

    Returns:
        Dict mapping step id -> error map, only for steps with errors
        (empty dict = the draft can be submitted)
    """
    aggregated = {}
    for step_id in VALIDATED_STEP_IDS:
        result = validate_step(step_id, draft)
        if result.errors:
            aggregated[step_id] = dict(result.errors)
    return aggregated


def _is_filled(value) -> bool:
    if is_blank(value) or value is False:
        return False
    if isinstance(value, (int, float, Decimal)):
        return to_decimal(value) > 0
    return True


def section_completion(draft) -> dict[str, dict]:
    """
    Summarize required-field completion per wizard step.

    Returns:
        Dict keyed by step key with completed/total counts and
        has_errors/has_warnings flags
    """
    sections = {}
    for step in WIZARD_STEPS:
        if not step.required_fields:
            continue
        completed = 0
        for path in step.required_fields:
            if path == "product_config":
                filled = bool(draft.product_config) and not _validate_configuration(draft).errors
            else:
                filled = _is_filled(get_path(draft, path))
            if filled:
                completed += 1
        result = validate_step(step.id, draft)
        sections[step.key] = {
            "completed": completed,
            "total": len(step.required_fields),
            "has_errors": bool(result.errors),
            "has_warnings": bool(result.warnings),
        }
    return sections


def completion_percentage(draft) -> int:
    """Percentage of required fields filled across all steps."""
    sections = section_completion(draft)
    total = sum(section["total"] for section in sections.values())
    if total == 0:
        return 0
    completed = sum(section["completed"] for section in sections.values())
    return round(completed * 100 / total)
