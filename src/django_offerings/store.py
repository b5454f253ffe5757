"""Form state store: sole owner of the offering draft.

The store is created at wizard start and disposed on successful submit
(or by the caller). Every update is a merge, never a wholesale replace,
and bumps a monotonically increasing revision used by autosave to
order concurrent writes.
"""

import copy
import logging
from typing import Callable

from django.utils import timezone

from .draft import DICT_SECTIONS, SECTIONS, OfferingDraft
from .exceptions import StoreDisposedError, UnknownSectionError

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, "FormStateStore"], None]


class FormStateStore:
    """Holds the draft being edited and tracks unsaved changes.

    Attributes:
        revision: Incremented on every change
        saved_revision: Last revision reported persisted via mark_saved()
    """

    def __init__(self, draft: OfferingDraft | None = None, tenant_id: str = ""):
        self._draft = draft if draft is not None else OfferingDraft(tenant_id=tenant_id)
        self._subscribers: list[Subscriber] = []
        self._disposed = False
        self.revision = 0
        self.saved_revision = 0

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def draft(self) -> OfferingDraft:
        self._check_alive()
        return self._draft

    @property
    def draft_id(self) -> str:
        return self._draft.draft_id

    @property
    def is_dirty(self) -> bool:
        return self.revision > self.saved_revision

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def snapshot(self) -> tuple[OfferingDraft, int]:
        """Deep copy of the draft together with the revision it reflects."""
        self._check_alive()
        return self._draft.copy(), self.revision

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def update_form_data(self, section: str, partial) -> None:
        """
        Merge partial data into one section of the draft.

        Dict sections are shallow-merged: keys in partial overwrite, other
        keys are kept, lists are replaced wholesale. Scalar sections
        (business_type, product_type, is_draft) are assigned.

        Raises:
            UnknownSectionError: If section is not a draft section
            StoreDisposedError: If the store has been disposed
        """
        self._check_alive()
        if section not in SECTIONS:
            raise UnknownSectionError(section)

        if section in DICT_SECTIONS:
            if not isinstance(partial, dict):
                raise TypeError(f"Section '{section}' expects a dict, got {type(partial).__name__}")
            current = getattr(self._draft, section) or {}
            current.update(copy.deepcopy(partial))
            setattr(self._draft, section, current)
        else:
            setattr(self._draft, section, partial)

        self._draft.last_modified = timezone.now()
        self.revision += 1
        logger.debug(f"Draft {self.draft_id} section '{section}' updated (revision {self.revision})")
        self._notify(section)

    def load(self, draft: OfferingDraft, revision: int | None = None) -> None:
        """
        Install a draft fetched from persistence; it counts as saved.

        The store resumes counting from the stored revision (draft.revision
        unless given) so the next edit is newer than what persistence holds.
        """
        self._check_alive()
        stored = draft.revision if revision is None else revision
        self._draft = draft
        self.revision = max(self.revision + 1, stored or 0)
        self.saved_revision = self.revision
        self._notify("*")

    def reset(self) -> None:
        """Restore every section to its defaults, keeping draft and tenant ids."""
        self._check_alive()
        self._draft = OfferingDraft(
            draft_id=self._draft.draft_id,
            tenant_id=self._draft.tenant_id,
        )
        self.revision += 1
        self._notify("*")

    def mark_saved(self, revision: int) -> None:
        """Record that the given revision has been persisted."""
        if revision > self.saved_revision:
            self.saved_revision = revision
            self._draft.revision = revision

    # -------------------------------------------------------------------------
    # Subscribers
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Call callback(section, store) after every change.

        Returns:
            A function that removes the subscription
        """
        self._check_alive()
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, section: str) -> None:
        for callback in list(self._subscribers):
            try:
                callback(section, self)
            except Exception:
                logger.exception(f"Form state subscriber failed for draft {self.draft_id}")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def dispose(self) -> None:
        """Release subscribers; any later mutation raises StoreDisposedError."""
        if self._disposed:
            return
        self._disposed = True
        self._subscribers.clear()
        logger.debug(f"Form state store for draft {self.draft_id} disposed")

    def _check_alive(self) -> None:
        if self._disposed:
            raise StoreDisposedError(self._draft.draft_id)
