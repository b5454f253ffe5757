"""Tests for the wizard controller state machine and submission."""
import asyncio
from datetime import datetime, timezone as dt_timezone
from unittest.mock import patch

import pytest

from django_offerings.choices import StepStatus
from django_offerings.exceptions import InvalidTransition, SubmissionInProgressError
from django_offerings.gateways import PublishResult
from django_offerings.store import FormStateStore
from django_offerings.wizard import SUBMITTED, WizardController

from tests.fakes import RecordingPublishingGateway


@pytest.fixture
def wizard(store, publishing_gateway):
    return WizardController(store, publishing_gateway=publishing_gateway)


@pytest.fixture
def empty_wizard(empty_draft, publishing_gateway):
    return WizardController(FormStateStore(empty_draft), publishing_gateway=publishing_gateway)


def walk_to_review(wizard):
    for _ in range(6):
        assert wizard.next_step()
    assert wizard.current_step == 7


class TestNavigation:
    """next is guarded, prev and jump-back are not."""

    def test_starts_on_first_step(self, wizard):
        assert wizard.current_step == 1
        assert wizard.state == 1
        assert wizard.step_states[1].status == StepStatus.IN_PROGRESS

    def test_next_blocked_by_errors(self, empty_wizard):
        assert not empty_wizard.next_step()
        assert empty_wizard.current_step == 1
        state = empty_wizard.step_states[1]
        assert state.status == StepStatus.ERROR
        assert "business_type" in state.errors

    def test_next_advances_when_valid(self, wizard):
        assert wizard.next_step()
        assert wizard.current_step == 2
        assert wizard.is_step_completed(1)
        assert wizard.step_states[2].status == StepStatus.IN_PROGRESS

    def test_next_is_capped_at_review(self, wizard):
        walk_to_review(wizard)
        assert not wizard.next_step()
        assert wizard.current_step == 7

    def test_next_fails_closed_when_validation_raises(self, wizard):
        with patch("django_offerings.wizard.validators.validate_step", side_effect=RuntimeError("boom")):
            assert not wizard.next_step()
        assert wizard.current_step == 1
        assert wizard.step_states[1].status == StepStatus.ERROR

    def test_prev_never_validates_and_floors_at_one(self, wizard):
        walk_to_review(wizard)
        wizard.store.update_form_data("basic_info", {"name": ""})
        for expected in (6, 5, 4, 3, 2, 1, 1):
            wizard.prev_step()
            assert wizard.current_step == expected

    def test_prev_on_first_step(self, empty_wizard):
        assert not empty_wizard.prev_step()
        assert empty_wizard.current_step == 1

    def test_forward_jump_ignored(self, wizard):
        wizard.next_step()
        assert not wizard.go_to_step(5)
        assert wizard.current_step == 2

    def test_backward_jump_allowed(self, wizard):
        walk_to_review(wizard)
        assert wizard.go_to_step(3)
        assert wizard.current_step == 3

    @pytest.mark.parametrize("target", [0, -1, 8, "2"])
    def test_out_of_range_jump_ignored(self, wizard, target):
        walk_to_review(wizard)
        assert not wizard.go_to_step(target)
        assert wizard.current_step == 7

    def test_allowed_transitions(self, wizard, empty_wizard):
        wizard.next_step()
        assert wizard.allowed_transitions() == [1, 3]
        assert empty_wizard.allowed_transitions() == []


class TestProgress:

    def test_progress_counts_completed_steps(self, wizard):
        assert wizard.progress_percentage() == 0
        walk_to_review(wizard)
        assert wizard.completed_steps_count() == 6
        assert wizard.progress_percentage() == 86
        wizard.validate_step(7)
        assert wizard.progress_percentage() == 100

    def test_step_state_records_warnings(self, wizard):
        wizard.store.update_form_data("media", {"images": ["one.jpg"]})
        assert wizard.validate_step(6)
        assert "media.images" in wizard.step_states[6].warnings

    def test_reset(self, wizard):
        walk_to_review(wizard)
        wizard.reset()
        assert wizard.current_step == 1
        assert wizard.completed_steps_count() == 0
        assert wizard.store.draft.product_type == ""


@pytest.mark.asyncio
class TestSubmission:
    """submit_form validates steps 1-6 and delegates to the gateway."""

    async def test_submit_only_from_review(self, wizard):
        with pytest.raises(InvalidTransition):
            await wizard.submit_form()

    async def test_publish_immediately(self, wizard, publishing_gateway):
        walk_to_review(wizard)
        result = await wizard.submit_form()

        assert result.success
        assert result.offering_id == "offering-1"
        assert publishing_gateway.calls[0][0] == "publish_immediately"
        assert wizard.is_submitted
        assert wizard.state == SUBMITTED
        assert wizard.store.is_disposed

    async def test_gateway_receives_snapshot(self, wizard, publishing_gateway):
        walk_to_review(wizard)
        await wizard.submit_form()
        submitted = publishing_gateway.calls[0][1]
        assert submitted is not wizard.store._draft
        assert submitted.basic_info["name"] == "Sunset Coastal Bus Tour"

    async def test_save_as_draft_with_name(self, wizard, publishing_gateway):
        walk_to_review(wizard)
        result = await wizard.submit_form(mode="draft", draft_name="Autumn version")
        assert result.success
        assert publishing_gateway.calls[0][0] == "save_draft"
        assert publishing_gateway.calls[0][2] == "Autumn version"

    async def test_schedule_publishing(self, wizard, publishing_gateway):
        walk_to_review(wizard)
        when = datetime(2030, 1, 1, 9, 0, tzinfo=dt_timezone.utc)
        result = await wizard.submit_form(mode="scheduled", scheduled_at=when)
        assert result.success
        assert publishing_gateway.calls[0][0] == "schedule_publishing"
        assert publishing_gateway.calls[0][2] == "2030-01-01T09:00:00+00:00"

    async def test_schedule_requires_time(self, wizard, publishing_gateway):
        walk_to_review(wizard)
        result = await wizard.submit_form(mode="scheduled")
        assert not result.success
        assert publishing_gateway.calls == []
        assert not wizard.store.is_disposed

    async def test_unknown_mode(self, wizard):
        walk_to_review(wizard)
        result = await wizard.submit_form(mode="later")
        assert not result.success
        assert "later" in result.error

    async def test_validation_errors_block_submission(self, wizard, publishing_gateway):
        walk_to_review(wizard)
        wizard.store.update_form_data("pricing", {"base_pricing": {"adult": 0}})
        wizard.store.update_form_data("media", {"images": []})

        result = await wizard.submit_form()

        assert not result.success
        assert set(result.errors) == {5, 6}
        assert "pricing.base_pricing.adult" in result.errors[5]
        assert publishing_gateway.calls == []
        assert wizard.current_step == 7
        assert wizard.step_states[5].status == StepStatus.ERROR
        assert not wizard.store.is_disposed

    async def test_malformed_sections_return_errors(self, wizard, publishing_gateway):
        walk_to_review(wizard)
        wizard.store.update_form_data("media", {"seo_data": ["not", "a", "map"]})
        wizard.store.update_form_data("pricing", {"cancellation_policy": "strict"})

        result = await wizard.submit_form()

        assert not result.success
        assert set(result.errors) == {6}
        assert "media.seo_data.meta_title" in result.errors[6]
        assert publishing_gateway.calls == []

    async def test_gateway_failure_result(self, store):
        gateway = RecordingPublishingGateway(result=PublishResult.fail("Quota exceeded"))
        wizard = WizardController(store, publishing_gateway=gateway)
        walk_to_review(wizard)

        result = await wizard.submit_form()

        assert not result.success
        assert result.error == "Quota exceeded"
        assert wizard.current_step == 7
        assert not wizard.is_submitted
        assert wizard.store.draft.basic_info["name"] == "Sunset Coastal Bus Tour"

    async def test_gateway_exception_is_caught(self, store):
        gateway = RecordingPublishingGateway(error=ConnectionError("network down"))
        wizard = WizardController(store, publishing_gateway=gateway)
        walk_to_review(wizard)

        result = await wizard.submit_form()

        assert not result.success
        assert result.error == "network down"
        assert not wizard.is_submitting
        assert not wizard.store.is_disposed

    async def test_second_submit_while_pending_raises(self, store):
        release = asyncio.Event()

        class SlowGateway(RecordingPublishingGateway):
            async def publish_immediately(self, draft):
                await release.wait()
                return await super().publish_immediately(draft)

        wizard = WizardController(store, publishing_gateway=SlowGateway())
        walk_to_review(wizard)

        first = asyncio.create_task(wizard.submit_form())
        await asyncio.sleep(0)
        assert wizard.is_submitting
        with pytest.raises(SubmissionInProgressError):
            await wizard.submit_form()

        release.set()
        assert (await first).success

    async def test_navigation_after_submit_raises(self, wizard):
        walk_to_review(wizard)
        await wizard.submit_form()

        with pytest.raises(InvalidTransition):
            wizard.next_step()
        with pytest.raises(InvalidTransition):
            wizard.prev_step()
        with pytest.raises(InvalidTransition):
            wizard.go_to_step(1)
        with pytest.raises(InvalidTransition):
            await wizard.submit_form()
        assert wizard.allowed_transitions() == []
