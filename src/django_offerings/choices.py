"""Enumerated configuration for offerings.

Kept out of models.py so the pure engine modules can import them
without the app registry being ready.
"""

from django.db import models


class ProductType(models.TextChoices):
    """Product types an offering can be configured as."""

    SEAT = "seat", "Bus Tour"
    CAPACITY = "capacity", "Boat Cruise"
    OPEN = "open", "Walking Tour"
    EQUIPMENT = "equipment", "Equipment Rental"
    PACKAGE = "package", "Multi-Activity Package"
    TIMESLOT = "timeslot", "Class/Workshop"


class Currency(models.TextChoices):
    """Currencies accepted for offering prices."""

    CAD = "CAD", "Canadian Dollar"
    USD = "USD", "US Dollar"
    EUR = "EUR", "Euro"
    GBP = "GBP", "British Pound"
    AUD = "AUD", "Australian Dollar"


class TaxMode(models.TextChoices):
    """Whether displayed prices already include tax."""

    EXCLUSIVE = "exclusive", "Tax added at checkout"
    INCLUSIVE = "inclusive", "Tax included in price"


class DiscountType(models.TextChoices):
    """How a discount or fee value is interpreted."""

    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed amount"


class PublishingMode(models.TextChoices):
    """What happens to the draft on submission."""

    DRAFT = "draft", "Save as draft"
    IMMEDIATE = "immediate", "Publish now"
    SCHEDULED = "scheduled", "Schedule publishing"


class StepStatus(models.TextChoices):
    """Status of a wizard step."""

    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    ERROR = "error", "Error"


class OfferingStatus(models.TextChoices):
    """Status of a persisted offering."""

    DRAFT = "draft", "Draft"
    ACTIVE = "active", "Active"
    SCHEDULED = "scheduled", "Scheduled"
