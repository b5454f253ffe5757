"""Debounced autosave of the form state store.

Last write wins by store revision: each write carries the revision of
the snapshot it persists, writes that are not newer than the last
persisted revision are skipped, and at most one write per draft is in
flight at a time.
"""

import asyncio
import logging

from django.utils import timezone

from .conf import get_draft_persistence, get_setting
from .store import FormStateStore

logger = logging.getLogger(__name__)


class AutoSaver:
    """Persists a FormStateStore through a DraftPersistence gateway.

    Usage:
        saver = AutoSaver(store)
        store.subscribe(saver.on_change)   # or call saver.schedule()
        ...
        await saver.close()
    """

    def __init__(self, store: FormStateStore, persistence=None, delay: float | None = None):
        self.store = store
        self._persistence = persistence
        self.delay = float(get_setting("AUTOSAVE_DELAY") if delay is None else delay)
        self._lock = asyncio.Lock()
        self._timer: asyncio.Task | None = None
        self.persisted_revision = 0
        self.last_saved_at = None
        self.last_error: Exception | None = None
        self.is_saving = False

    @property
    def persistence(self):
        if self._persistence is None:
            self._persistence = get_draft_persistence()
        return self._persistence

    @property
    def is_pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def on_change(self, section: str, store: FormStateStore) -> None:
        """Store subscriber: restart the debounce timer."""
        self.schedule()

    def schedule(self) -> None:
        """(Re)start the debounce timer. Requires a running event loop."""
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._debounced())

    def cancel(self) -> None:
        """Cancel a pending debounced save, if any."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _debounced(self) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        await self.save_now()

    async def save_now(self) -> bool:
        """
        Persist the current draft immediately.

        Returns:
            True if the write landed, False if skipped or failed
        """
        async with self._lock:
            if self.store.is_disposed:
                return False
            draft, revision = self.store.snapshot()
            if revision <= max(self.persisted_revision, self.store.saved_revision):
                logger.debug(f"Draft {draft.draft_id} revision {revision} already persisted")
                return False

            self.is_saving = True
            try:
                landed = await self.persistence.save_progress(draft, revision=revision)
            except Exception as e:
                logger.exception(f"Autosave failed for draft {draft.draft_id}")
                self.last_error = e
                return False
            finally:
                self.is_saving = False

            if landed is False:
                logger.warning(
                    f"Discarding stale autosave for draft {draft.draft_id}: "
                    f"a newer revision than {revision} is already stored"
                )
                self.persisted_revision = revision
                return False

            self.persisted_revision = revision
            self.last_error = None
            self.last_saved_at = timezone.now()
            self.store.mark_saved(revision)
            logger.info(f"Draft {draft.draft_id} saved at revision {revision}")
            return True

    async def flush(self) -> bool:
        """Cancel the debounce timer and save any unsaved changes now."""
        self.cancel()
        if self.store.is_disposed or not self.store.is_dirty:
            return False
        return await self.save_now()

    async def close(self, save: bool = True) -> None:
        """Stop autosaving, optionally performing a final save."""
        if save:
            await self.flush()
        else:
            self.cancel()
