"""Wizard step catalog.

The seven steps are fixed, process-wide and read-only.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WizardStep:
    """A step of the offering creation wizard.

    Attributes:
        id: Position in the wizard (1..7)
        key: Stable machine name
        title: Human-readable title
        description: Short subtitle for the progress bar
        required_fields: Dotted draft paths the step validates
    """

    id: int
    key: str
    title: str
    description: str
    required_fields: tuple[str, ...] = ()


FIRST_STEP = 1
REVIEW_STEP = 7

WIZARD_STEPS: tuple[WizardStep, ...] = (
    WizardStep(
        1, "business_type", "Business Type", "Choose your offering type",
        ("business_type", "product_type"),
    ),
    WizardStep(
        2, "basic_info", "Basic Info", "Name and description",
        ("basic_info.name", "basic_info.description", "basic_info.location",
         "basic_info.category", "basic_info.duration"),
    ),
    WizardStep(
        3, "configuration", "Configuration", "Product-specific settings",
        ("product_config",),
    ),
    WizardStep(
        4, "scheduling", "Scheduling", "Availability and dates",
        ("scheduling.schedule_type", "scheduling.timezone"),
    ),
    WizardStep(
        5, "pricing", "Pricing", "Pricing and policies",
        ("pricing.base_pricing.adult", "pricing.currency"),
    ),
    WizardStep(
        6, "media", "Media", "Photos and marketing",
        ("media.images", "media.seo_data.meta_title", "media.seo_data.meta_description"),
    ),
    WizardStep(7, "review", "Review", "Final review and publish"),
)

# Steps that contribute fields to submission validation
VALIDATED_STEP_IDS: tuple[int, ...] = tuple(
    step.id for step in WIZARD_STEPS if step.id != REVIEW_STEP
)


def get_step(step_id: int) -> WizardStep | None:
    """Return the catalog entry for step_id, or None if out of range."""
    for step in WIZARD_STEPS:
        if step.id == step_id:
            return step
    return None
