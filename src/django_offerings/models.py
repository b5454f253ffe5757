"""Persistence models for offering drafts and published offerings.

Write through the gateways only:
- DatabaseDraftPersistence -> OfferingDraftRecord
- DatabasePublishingGateway -> Offering
"""

import uuid
from decimal import Decimal

from django.db import models

from .choices import Currency, OfferingStatus, ProductType


class TimeStampedUUIDModel(models.Model):
    """Abstract base model with a UUID primary key and timestamps."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class OfferingDraftRecord(TimeStampedUUIDModel):
    """
    Autosaved wizard progress.

    The primary key is the draft_id of the OfferingDraft it stores.
    revision only moves forward: a save carrying an older revision than
    the stored one is rejected.
    """

    tenant_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    name = models.CharField(max_length=200, blank=True, default="")
    product_type = models.CharField(
        max_length=20, choices=ProductType.choices, blank=True, default=""
    )
    form_data = models.JSONField(default=dict)
    revision = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-updated_at"]
        verbose_name = "offering draft"
        verbose_name_plural = "offering drafts"

    def __str__(self):
        return self.name or f"Draft {self.pk}"


class Offering(TimeStampedUUIDModel):
    """
    An offering produced by submitting the wizard.

    status is draft (saved, not visible), active (published) or
    scheduled (published automatically at publish_at).
    """

    tenant_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    draft_id = models.UUIDField(null=True, blank=True, db_index=True)
    name = models.CharField(max_length=200)
    product_type = models.CharField(max_length=20, choices=ProductType.choices)
    status = models.CharField(
        max_length=20, choices=OfferingStatus.choices, default=OfferingStatus.DRAFT
    )
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)
    base_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payload = models.JSONField(default=dict)
    publish_at = models.DateTimeField(null=True, blank=True)
    published_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(base_price__gte=0),
                name="offering_base_price_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    ~models.Q(status=OfferingStatus.SCHEDULED) | models.Q(publish_at__isnull=False)
                ),
                name="offering_scheduled_requires_publish_at",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_status_display()})"

    @property
    def is_published(self) -> bool:
        return self.status == OfferingStatus.ACTIVE
