"""Tests for the generic phase controller"""
import random
from enum import Enum

import pytest

from git_housekeeper.core.controller import NEXT_ITEM, PhaseController, Transition, resolve_transition
from git_housekeeper.core.merge import MERGE_TRANSITIONS, MergeOrchestrator
from git_housekeeper.models.workflow import Event, EventKind, WorkflowPhase, WorkflowSession

from tests.conftest import FakeGateway, FakeScheduler


class Step(Enum):
    INIT = "init"
    WORKING = "working"
    REVIEW = "review"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


class ItemSession(WorkflowSession):
    def __init__(self, items):
        super().__init__(phase=Step.INIT)
        self.items = tuple(items)


class ReviewController(PhaseController):
    """Minimal controller: start runs a hook, then each item is reviewed."""

    NAME = "Review"
    TRANSITIONS = {
        (Step.INIT, EventKind.START): Transition(Step.WORKING),
        (Step.WORKING, EventKind.SUCCEEDED): Transition(Step.REVIEW),
        (Step.WORKING, EventKind.FAILED): Transition(Step.ERROR),
        (Step.REVIEW, EventKind.ACCEPT): Transition(NEXT_ITEM, advance_cursor=True),
    }
    TERMINAL_PHASES = frozenset({Step.DONE, Step.ERROR, Step.CANCELLED})
    CANCELLED_PHASE = Step.CANCELLED
    ERROR_PHASE = Step.ERROR
    NEXT_ITEM_PHASE = Step.REVIEW
    EXHAUSTED_PHASE = Step.DONE

    def __init__(self, items, fail=False, **kwargs):
        super().__init__(ItemSession(items), **kwargs)
        self.fail = fail
        self.hook_calls = 0

    def _on_enter_working(self, event):
        self.hook_calls += 1
        if self.fail:
            return Event(EventKind.FAILED, message="boom")
        return Event(EventKind.SUCCEEDED, message="ready")


class TestResolveTransition:
    """Test the pure transition lookup."""

    def test_unknown_event_is_not_accepted(self):
        assert resolve_transition(MERGE_TRANSITIONS, WorkflowPhase.CONFIRM, EventKind.RESUME, 0, 2) is None

    def test_next_item_with_items_left(self):
        result = resolve_transition(
            MERGE_TRANSITIONS, WorkflowPhase.MERGING, EventKind.SUCCEEDED, 0, 2,
            WorkflowPhase.CONFIRM, WorkflowPhase.PUSH_CONFIRMATION,
        )
        assert result == (WorkflowPhase.CONFIRM, 1)

    def test_next_item_exhausted(self):
        result = resolve_transition(
            MERGE_TRANSITIONS, WorkflowPhase.CONFIRM, EventKind.DECLINE, 1, 2,
            WorkflowPhase.CONFIRM, WorkflowPhase.PUSH_CONFIRMATION,
        )
        assert result == (WorkflowPhase.PUSH_CONFIRMATION, 2)

    def test_non_item_transition_keeps_cursor(self):
        result = resolve_transition(MERGE_TRANSITIONS, WorkflowPhase.CONFIRM, EventKind.ACCEPT, 1, 2)
        assert result == (WorkflowPhase.MERGING, 1)


class TestPhaseController:
    """Test advancing, hooks, listeners, cancellation and auto-exit."""

    def test_entry_hook_completion_is_fed_back(self):
        controller = ReviewController(["a", "b"], scheduler=FakeScheduler())

        controller.start()

        assert controller.phase == Step.REVIEW
        assert controller.log == "ready"
        assert controller.hook_calls == 1

    def test_items_walked_to_exhaustion(self):
        controller = ReviewController(["a", "b"], scheduler=FakeScheduler())
        controller.start()

        controller.advance(Event.accept())
        assert (controller.phase, controller.cursor) == (Step.REVIEW, 1)

        controller.advance(Event.accept())
        assert (controller.phase, controller.cursor) == (Step.DONE, 2)

    def test_invalid_event_is_ignored(self, caplog):
        controller = ReviewController(["a"], scheduler=FakeScheduler())
        controller.start()

        with caplog.at_level("DEBUG"):
            controller.advance(Event.resume())

        assert (controller.phase, controller.cursor) == (Step.REVIEW, 0)
        assert "Ignoring resume in review" in caplog.text

    def test_transitions_logged_at_debug(self, caplog):
        controller = ReviewController(["a"], scheduler=FakeScheduler())

        with caplog.at_level("DEBUG"):
            controller.start()

        assert "[Review] init -> working" in caplog.text
        assert "[Review] working -> review" in caplog.text

    def test_listeners_see_every_phase(self):
        controller = ReviewController(["a"], scheduler=FakeScheduler())
        seen = []
        controller.add_listener(lambda session: seen.append(session.phase))

        controller.start()

        assert seen == [Step.WORKING, Step.REVIEW]

    def test_failing_listener_does_not_break_workflow(self):
        controller = ReviewController(["a"], scheduler=FakeScheduler())

        def broken(session):
            raise RuntimeError("render failed")

        controller.add_listener(broken)
        controller.start()

        assert controller.phase == Step.REVIEW

    def test_cancel_from_non_terminal_phase(self):
        scheduler = FakeScheduler()
        exits = []
        controller = ReviewController(["a"], scheduler=scheduler, on_exit=exits.append)
        controller.start()

        controller.advance(Event.cancel())

        assert controller.phase == Step.CANCELLED
        assert controller.is_terminal
        scheduler.fire()
        assert exits == [Step.CANCELLED]

    def test_cancel_requested_mid_hook_applies_at_boundary(self):
        controller = ReviewController(["a"], scheduler=FakeScheduler())

        def cancel_while_working():
            controller.hook_calls += 1
            controller.request_cancel()
            return Event(EventKind.SUCCEEDED)

        controller._on_enter_working = lambda event: cancel_while_working()
        controller.start()

        assert controller.hook_calls == 1
        assert controller.phase == Step.CANCELLED

    def test_completion_applied_before_cancel(self):
        controller = ReviewController(["a"], scheduler=FakeScheduler())
        entered = []
        controller.add_listener(lambda session: entered.append(session.phase))

        def cancel_then_succeed():
            controller.request_cancel()
            return Event(EventKind.SUCCEEDED, message="ready")

        controller._on_enter_working = lambda event: cancel_then_succeed()
        controller.start()

        assert entered == [Step.WORKING, Step.REVIEW, Step.CANCELLED]
        assert controller.log == "ready Cancelled."

    def test_pending_cancel_applied_before_next_input(self):
        controller = ReviewController(["a", "b"], scheduler=FakeScheduler())
        controller.start()
        controller.request_cancel()

        controller.advance(Event.accept())

        assert (controller.phase, controller.cursor) == (Step.CANCELLED, 0)

    def test_cancel_in_terminal_phase_is_ignored(self):
        controller = ReviewController([], fail=True, scheduler=FakeScheduler())
        controller.start()
        assert controller.phase == Step.ERROR

        controller.advance(Event.cancel())

        assert controller.phase == Step.ERROR

    def test_terminal_phase_schedules_exit_with_delay(self):
        scheduler = FakeScheduler()
        exits = []
        controller = ReviewController(["a"], exit_delay=1.5, scheduler=scheduler, on_exit=exits.append)
        controller.start()
        assert scheduler.pending == []

        controller.advance(Event.accept())

        assert [handle.delay for handle in scheduler.pending] == [1.5]
        assert exits == []
        scheduler.fire()
        assert exits == [Step.DONE]

    def test_error_phase_uses_error_delay(self):
        scheduler = FakeScheduler()
        controller = ReviewController(["a"], fail=True, exit_delay=1.5, error_exit_delay=5, scheduler=scheduler)

        controller.start()

        assert controller.phase == Step.ERROR
        assert [handle.delay for handle in scheduler.pending] == [5]

    def test_cancel_pending_exit(self):
        scheduler = FakeScheduler()
        exits = []
        controller = ReviewController(["a"], scheduler=scheduler, on_exit=exits.append)
        controller.start()
        controller.advance(Event.accept())

        controller.cancel_pending_exit()
        scheduler.fire()

        assert exits == []

    def test_stale_exit_is_not_delivered(self):
        scheduler = FakeScheduler()
        exits = []
        controller = ReviewController(["a"], scheduler=scheduler, on_exit=exits.append)
        controller.start()
        controller.advance(Event.accept())
        handle = scheduler.pending[0]

        controller.session.phase = Step.REVIEW
        handle.callback()

        assert exits == []

    def test_cursor_cannot_move_backward(self):
        controller = ReviewController(["a", "b"], scheduler=FakeScheduler())
        controller.session.cursor = 1

        with pytest.raises(RuntimeError):
            controller._enter(Step.REVIEW, 0, Event.accept())


class TestCursorProperty:
    """Cursor is non-decreasing and moves by at most one per accepted transition."""

    EVENTS = [
        Event.accept(),
        Event.decline(),
        Event.resume(),
        Event.start(),
        Event(EventKind.SUCCEEDED),
        Event(EventKind.FAILED),
    ]

    @pytest.mark.parametrize("seed", range(25))
    def test_random_event_sequences(self, seed, pr_source):
        rng = random.Random(seed)
        gateway = FakeGateway()

        def flaky(args, env=None):
            if args[0] == "merge" and rng.random() < 0.5:
                gateway.fail(args, "CONFLICT")
            else:
                gateway.responses.pop(tuple(args), None)
            return FakeGateway.run(gateway, args, env)

        gateway.run = flaky
        orchestrator = MergeOrchestrator(
            gateway, pr_source, {"exit_delay": 0, "sequential": True}, scheduler=FakeScheduler()
        )
        cursors = [orchestrator.cursor]
        orchestrator.add_listener(lambda session: cursors.append(session.cursor))

        orchestrator.start()
        for _ in range(40):
            orchestrator.advance(rng.choice(self.EVENTS))

        for before, after in zip(cursors, cursors[1:]):
            assert after - before in (0, 1)
        assert orchestrator.cursor <= len(orchestrator.session.items)
