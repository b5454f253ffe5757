"""Wizard controller: the step-gated state machine.

States are steps 1..7 plus the terminal ``submitted`` state, reached
only from the review step through submit_form().

Transitions:
- next: guarded by validation of the current step, capped at 7
- prev: unguarded, floored at 1
- jump: to any step <= current step, unguarded; forward jumps are ignored

Validation failures are data (ValidationResult, SubmissionResult).
Misuse (navigating after submission, submitting twice) raises.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from django.utils import timezone

from . import validators
from .choices import PublishingMode, StepStatus
from .conf import get_publishing_gateway
from .exceptions import InvalidTransition, SubmissionInProgressError
from .steps import FIRST_STEP, REVIEW_STEP, WIZARD_STEPS
from .store import FormStateStore

logger = logging.getLogger(__name__)

SUBMITTED = "submitted"


@dataclass
class StepState:
    """Last known status of a wizard step."""

    status: str = StepStatus.PENDING
    errors: dict[str, str] = field(default_factory=dict)
    warnings: dict[str, str] = field(default_factory=dict)
    last_updated: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == StepStatus.COMPLETED


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of submit_form().

    Attributes:
        success: True if the gateway accepted the offering
        errors: Step id -> error map when validation blocked submission
        error: Human-readable message when the gateway failed
        offering_id: Id of the created offering, if any
    """

    success: bool
    errors: dict[int, dict[str, str]] = field(default_factory=dict)
    error: str | None = None
    offering_id: str | None = None


class WizardController:
    """Drives a FormStateStore through the seven wizard steps."""

    def __init__(self, store: FormStateStore, publishing_gateway=None):
        self.store = store
        self._gateway = publishing_gateway
        self.current_step = FIRST_STEP
        self.step_states: dict[int, StepState] = {}
        self.is_submitting = False
        self.is_submitted = False
        self.offering_id: str | None = None
        self.reset_step_states()

    @property
    def gateway(self):
        if self._gateway is None:
            self._gateway = get_publishing_gateway()
        return self._gateway

    @property
    def state(self):
        """Current step id, or "submitted" once the wizard has finished."""
        return SUBMITTED if self.is_submitted else self.current_step

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_step(self, step_id: int | None = None) -> bool:
        """
        Validate a step against the current draft and record its state.

        A validator that raises counts as a failed validation.

        Returns:
            True iff the step has no errors
        """
        step_id = self.current_step if step_id is None else step_id
        try:
            result = validators.validate_step(step_id, self.store.draft)
        except Exception:
            logger.exception(f"Validation of step {step_id} raised for draft {self.store.draft_id}")
            self._record(step_id, StepStatus.ERROR, {"step": "Step could not be validated"}, {})
            return False

        status = StepStatus.COMPLETED if result.is_valid else StepStatus.ERROR
        self._record(step_id, status, result.errors, result.warnings)
        return result.is_valid

    def _record(self, step_id, status, errors, warnings) -> None:
        self.step_states[step_id] = StepState(
            status=status,
            errors=dict(errors),
            warnings=dict(warnings),
            last_updated=timezone.now(),
        )

    # =========================================================================
    # Navigation
    # =========================================================================

    def next_step(self) -> bool:
        """Advance one step if the current step validates. Returns True if moved."""
        self._check_not_submitted("next")
        if not self.validate_step(self.current_step):
            logger.debug(f"Step {self.current_step} has errors, staying put")
            return False
        if self.current_step >= REVIEW_STEP:
            return False
        self._move_to(self.current_step + 1)
        return True

    def prev_step(self) -> bool:
        """Go back one step without validating. Returns True if moved."""
        self._check_not_submitted("prev")
        if self.current_step <= FIRST_STEP:
            return False
        self._move_to(self.current_step - 1)
        return True

    def go_to_step(self, step_id: int) -> bool:
        """Jump to an already visited step. Forward jumps are ignored."""
        self._check_not_submitted(step_id)
        if not isinstance(step_id, int) or not FIRST_STEP <= step_id <= self.current_step:
            logger.debug(f"Ignoring jump from step {self.current_step} to {step_id}")
            return False
        self._move_to(step_id)
        return True

    def allowed_transitions(self) -> list[int]:
        """
        Step ids reachable from the current step right now.

        Does not record step states; the forward step is listed only if
        the current step validates.
        """
        if self.is_submitted:
            return []
        reachable = list(range(FIRST_STEP, self.current_step))
        if self.current_step < REVIEW_STEP:
            try:
                result = validators.validate_step(self.current_step, self.store.draft)
            except Exception:
                logger.exception(f"Validation of step {self.current_step} raised")
            else:
                if result.is_valid:
                    reachable.append(self.current_step + 1)
        return reachable

    def _move_to(self, step_id: int) -> None:
        logger.debug(f"Draft {self.store.draft_id}: step {self.current_step} -> {step_id}")
        self.current_step = step_id
        state = self.step_states[step_id]
        if state.status == StepStatus.PENDING:
            state.status = StepStatus.IN_PROGRESS
            state.last_updated = timezone.now()

    def _check_not_submitted(self, target) -> None:
        if self.is_submitted:
            raise InvalidTransition(SUBMITTED, target, "Wizard has already been submitted")

    # =========================================================================
    # Progress
    # =========================================================================

    def is_step_completed(self, step_id: int) -> bool:
        state = self.step_states.get(step_id)
        return state is not None and state.is_completed

    def completed_steps_count(self) -> int:
        return sum(1 for state in self.step_states.values() if state.is_completed)

    def progress_percentage(self) -> int:
        return round(self.completed_steps_count() * 100 / len(WIZARD_STEPS))

    def reset_step_states(self) -> None:
        self.step_states = {step.id: StepState() for step in WIZARD_STEPS}
        self.step_states[self.current_step].status = StepStatus.IN_PROGRESS

    def reset(self) -> None:
        """Restore the draft defaults and return to the first step."""
        self._check_not_submitted(FIRST_STEP)
        self.store.reset()
        self.current_step = FIRST_STEP
        self.reset_step_states()

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit_form(
        self,
        mode: str = PublishingMode.IMMEDIATE,
        scheduled_at=None,
        draft_name: str | None = None,
    ) -> SubmissionResult:
        """
        Validate steps 1-6 and hand the draft to the publishing gateway.

        Args:
            mode: "draft", "immediate" or "scheduled"
            scheduled_at: Publish time (datetime or ISO string) for "scheduled"
            draft_name: Optional name when saving as draft

        Returns:
            SubmissionResult; on success the wizard is submitted and the
            store disposed, on failure the draft and step are untouched

        Raises:
            InvalidTransition: If not on the review step or already submitted
            SubmissionInProgressError: If a submission is already pending
        """
        self._check_not_submitted(SUBMITTED)
        if self.current_step != REVIEW_STEP:
            raise InvalidTransition(
                self.current_step, SUBMITTED, "Submission is only allowed from the review step"
            )
        if self.is_submitting:
            raise SubmissionInProgressError(self.store.draft_id)

        self.is_submitting = True
        try:
            return await self._submit(mode, scheduled_at, draft_name)
        finally:
            self.is_submitting = False

    async def _submit(self, mode, scheduled_at, draft_name) -> SubmissionResult:
        draft_id = self.store.draft_id
        step_errors = validators.validate_all_steps(self.store.draft)
        for step_id, errors in step_errors.items():
            self._record(step_id, StepStatus.ERROR, errors, {})
        if step_errors:
            logger.warning(f"Submission of draft {draft_id} blocked by steps {sorted(step_errors)}")
            return SubmissionResult(
                success=False,
                errors=step_errors,
                error="Please fix the errors in the highlighted steps",
            )

        if mode == PublishingMode.SCHEDULED:
            if not scheduled_at:
                return SubmissionResult(success=False, error="A publish time is required for scheduling")
            if isinstance(scheduled_at, datetime):
                scheduled_at = scheduled_at.isoformat()
        elif mode not in PublishingMode.values:
            return SubmissionResult(success=False, error=f"Unknown publishing mode: {mode}")

        draft, _revision = self.store.snapshot()
        try:
            if mode == PublishingMode.DRAFT:
                result = await self.gateway.save_draft(draft, name=draft_name)
            elif mode == PublishingMode.SCHEDULED:
                result = await self.gateway.schedule_publishing(draft, scheduled_at)
            else:
                result = await self.gateway.publish_immediately(draft)
        except Exception as e:
            logger.exception(f"Publishing gateway failed for draft {draft_id}")
            return SubmissionResult(success=False, error=str(e) or "Submission failed")

        if not result.success:
            logger.warning(f"Publishing gateway rejected draft {draft_id}: {result.error}")
            return SubmissionResult(success=False, error=result.error or "Submission failed")

        self._record(REVIEW_STEP, StepStatus.COMPLETED, {}, {})
        self.offering_id = result.offering_id
        self.is_submitted = True
        self.store.dispose()
        logger.info(f"Draft {draft_id} submitted ({mode}), offering {result.offering_id}")
        return SubmissionResult(success=True, offering_id=result.offering_id)
