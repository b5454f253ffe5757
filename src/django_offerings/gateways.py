"""Persistence and publishing gateways.

The wizard and autosaver talk to these interfaces only. Gateways are
async; the database implementations run their ORM work in a thread via
asgiref's sync_to_async.

Publishing failures are returned as PublishResult.fail(...). Draft
persistence failures propagate to the caller (the AutoSaver logs them).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from asgiref.sync import sync_to_async
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .choices import OfferingStatus
from .draft import OfferingDraft
from .money import round_money
from .pricing import BasePricing

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    """Result of a publishing operation."""

    success: bool
    error: Optional[str] = None
    offering_id: Optional[str] = None
    draft_id: Optional[str] = None

    @classmethod
    def ok(cls, offering_id: str = None, draft_id: str = None) -> "PublishResult":
        return cls(success=True, offering_id=offering_id, draft_id=draft_id)

    @classmethod
    def fail(cls, error: str, draft_id: str = None) -> "PublishResult":
        return cls(success=False, error=error, draft_id=draft_id)


class DraftPersistence(ABC):
    """Stores in-progress wizard drafts."""

    @abstractmethod
    async def save_progress(self, draft: OfferingDraft, revision: int = 0) -> bool:
        """Persist a draft snapshot.

        Args:
            draft: Snapshot of the draft to store
            revision: Store revision the snapshot reflects; 0 means untracked

        Returns:
            True if stored, False if a newer revision was already stored
        """
        raise NotImplementedError

    @abstractmethod
    async def load_draft(self, draft_id: str) -> Optional[OfferingDraft]:
        """The stored draft with draft.revision set to its stored revision, or None."""
        raise NotImplementedError

    @abstractmethod
    async def delete_draft(self, draft_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def list_drafts(self, tenant_id: str) -> list[dict]:
        """Summaries of a tenant's drafts, most recently updated first."""
        raise NotImplementedError


class PublishingGateway(ABC):
    """Turns a validated draft into an offering."""

    @abstractmethod
    async def save_draft(self, draft: OfferingDraft, name: str = None) -> PublishResult:
        raise NotImplementedError

    @abstractmethod
    async def publish_immediately(self, draft: OfferingDraft) -> PublishResult:
        raise NotImplementedError

    @abstractmethod
    async def schedule_publishing(self, draft: OfferingDraft, iso_datetime: str) -> PublishResult:
        """Publish the draft automatically at iso_datetime (must be in the future)."""
        raise NotImplementedError


# =============================================================================
# Django ORM implementations
# =============================================================================


def _valid_pk(draft_id) -> bool:
    from .models import OfferingDraftRecord

    try:
        OfferingDraftRecord._meta.pk.to_python(draft_id)
    except ValidationError:
        return False
    return draft_id is not None


class DatabaseDraftPersistence(DraftPersistence):
    """Stores drafts as OfferingDraftRecord rows keyed by draft_id."""

    async def save_progress(self, draft, revision=0):
        return await sync_to_async(self._save_progress)(draft, revision)

    async def load_draft(self, draft_id):
        return await sync_to_async(self._load_draft)(draft_id)

    async def delete_draft(self, draft_id):
        return await sync_to_async(self._delete_draft)(draft_id)

    async def list_drafts(self, tenant_id):
        return await sync_to_async(self._list_drafts)(tenant_id)

    def _save_progress(self, draft, revision):
        from .models import OfferingDraftRecord

        with transaction.atomic():
            record = (
                OfferingDraftRecord.objects.select_for_update()
                .filter(pk=draft.draft_id)
                .first()
            )
            if record is None:
                record = OfferingDraftRecord(pk=draft.draft_id)
            elif revision and record.revision >= revision:
                logger.warning(
                    f"Rejected stale save for draft {draft.draft_id}: "
                    f"revision {revision} <= stored {record.revision}"
                )
                return False

            record.tenant_id = draft.tenant_id or ""
            record.name = str((draft.basic_info or {}).get("name") or "")[:200]
            record.product_type = draft.product_type or ""
            record.form_data = draft.to_dict()
            record.revision = revision
            record.save()

        logger.debug(f"Stored draft {draft.draft_id} at revision {revision}")
        return True

    def _load_draft(self, draft_id):
        from .models import OfferingDraftRecord

        if not _valid_pk(draft_id):
            return None
        record = OfferingDraftRecord.objects.filter(pk=draft_id).first()
        if record is None:
            return None
        draft = OfferingDraft.from_dict(record.form_data)
        draft.revision = record.revision
        return draft

    def _delete_draft(self, draft_id):
        from .models import OfferingDraftRecord

        if not _valid_pk(draft_id):
            return False
        deleted, _ = OfferingDraftRecord.objects.filter(pk=draft_id).delete()
        return deleted > 0

    def _list_drafts(self, tenant_id):
        from .models import OfferingDraftRecord

        return [
            {
                "draft_id": str(record.pk),
                "name": record.name,
                "product_type": record.product_type,
                "revision": record.revision,
                "updated_at": record.updated_at,
            }
            for record in OfferingDraftRecord.objects.filter(tenant_id=tenant_id)
        ]


class DatabasePublishingGateway(PublishingGateway):
    """Creates Offering rows and removes the autosaved draft record."""

    async def save_draft(self, draft, name=None):
        return await sync_to_async(self._create)(draft, OfferingStatus.DRAFT, name=name)

    async def publish_immediately(self, draft):
        return await sync_to_async(self._create)(draft, OfferingStatus.ACTIVE)

    async def schedule_publishing(self, draft, iso_datetime):
        publish_at = iso_datetime
        if isinstance(iso_datetime, str):
            try:
                publish_at = parse_datetime(iso_datetime)
            except ValueError:
                publish_at = None
        if not isinstance(publish_at, datetime):
            return PublishResult.fail(f"Invalid publish time: {iso_datetime}", draft.draft_id)
        if timezone.is_naive(publish_at):
            publish_at = timezone.make_aware(publish_at)
        if publish_at <= timezone.now():
            return PublishResult.fail("Publish time must be in the future", draft.draft_id)
        return await sync_to_async(self._create)(
            draft, OfferingStatus.SCHEDULED, publish_at=publish_at
        )

    def _create(self, draft, status, name=None, publish_at=None):
        from .models import Offering, OfferingDraftRecord

        pricing = draft.pricing or {}
        base_pricing = BasePricing.from_dict(pricing.get("base_pricing"))
        try:
            with transaction.atomic():
                offering = Offering.objects.create(
                    tenant_id=draft.tenant_id or "",
                    draft_id=draft.draft_id,
                    name=name or (draft.basic_info or {}).get("name") or "Untitled offering",
                    product_type=draft.product_type,
                    status=status,
                    currency=pricing.get("currency") or "USD",
                    base_price=round_money(base_pricing.adult),
                    payload=draft.to_dict(),
                    publish_at=publish_at,
                    published_at=timezone.now() if status == OfferingStatus.ACTIVE else None,
                )
                OfferingDraftRecord.objects.filter(pk=draft.draft_id).delete()
        except DatabaseError:
            logger.exception(f"Could not create offering from draft {draft.draft_id}")
            return PublishResult.fail("Offering could not be saved", draft.draft_id)

        logger.info(f"Offering {offering.pk} created from draft {draft.draft_id} ({status})")
        return PublishResult.ok(offering_id=str(offering.pk), draft_id=draft.draft_id)
