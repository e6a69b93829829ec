"""Generic phase controller for linear, checkpointed interactive workflows.

A workflow is a transition table plus side-effecting handlers:

* ``TRANSITIONS`` maps ``(phase, EventKind)`` to a :class:`Transition`. The
  lookup itself (:func:`resolve_transition`) is pure.
* ``ACTIONS`` maps ``(phase, EventKind)`` to a method name run *before* the
  lookup; it may return a replacement event (e.g. resume -> succeeded).
* ``_on_enter_<phase>`` hooks run after a phase is entered and may return a
  completion event, which is fed straight back into :meth:`advance`.

``advance`` is the only entry point that mutates ``phase`` and ``cursor``.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from git_housekeeper.logging_config import get_logger
from git_housekeeper.models.workflow import Event, EventKind, WorkflowSession
from git_housekeeper.utils.threading import ThreadingScheduler

logger = get_logger(__name__)


class _NextItem:
    """Transition target resolved against the cursor: next item or exhausted."""

    def __repr__(self) -> str:
        return "NEXT_ITEM"


NEXT_ITEM = _NextItem()


@dataclass(frozen=True)
class Transition:
    target: Any  # A phase, or NEXT_ITEM
    advance_cursor: bool = False


TransitionTable = Mapping[Tuple[Enum, EventKind], Transition]


def resolve_transition(
    table: TransitionTable,
    phase: Enum,
    kind: EventKind,
    cursor: int,
    total: int,
    next_item_phase: Optional[Enum] = None,
    exhausted_phase: Optional[Enum] = None,
) -> Optional[Tuple[Enum, int]]:
    """Next ``(phase, cursor)`` for an event, or None if the event is not accepted.

    The cursor moves by exactly one on transitions that resolve an item and
    never moves backward.
    """
    transition = table.get((phase, kind))
    if transition is None:
        return None

    new_cursor = cursor + 1 if transition.advance_cursor else cursor
    target = transition.target
    if target is NEXT_ITEM:
        target = next_item_phase if new_cursor < total else exhausted_phase
    return target, new_cursor


class PhaseController:
    """Drives one :class:`WorkflowSession` through a transition table."""

    NAME = "Workflow"
    TRANSITIONS: Dict[Tuple[Enum, EventKind], Transition] = {}
    ACTIONS: Dict[Tuple[Enum, EventKind], str] = {}
    TERMINAL_PHASES: frozenset = frozenset()
    CANCELLED_PHASE: Optional[Enum] = None
    ERROR_PHASE: Optional[Enum] = None
    NEXT_ITEM_PHASE: Optional[Enum] = None
    EXHAUSTED_PHASE: Optional[Enum] = None

    def __init__(
        self,
        session: WorkflowSession,
        exit_delay: float = 1.5,
        error_exit_delay: Optional[float] = None,
        scheduler: Optional[Callable] = None,
        on_exit: Optional[Callable[[Enum], None]] = None,
    ):
        """
        Args:
            session: Session state; its phase and cursor are owned by this controller
            exit_delay: Seconds between entering a terminal phase and ``on_exit``
            error_exit_delay: Delay used for the error phase (defaults to exit_delay)
            scheduler: ``scheduler(delay, callback)`` returning a handle with ``cancel()``
            on_exit: Called with the terminal phase once the delay elapses
        """
        self.session = session
        self.exit_delay = exit_delay
        self.error_exit_delay = exit_delay if error_exit_delay is None else error_exit_delay
        self._scheduler = scheduler or ThreadingScheduler()
        self._on_exit = on_exit
        self._exit_handle = None
        self._listeners: List[Callable[[WorkflowSession], None]] = []
        self._lock = threading.RLock()
        self._cancel_requested = threading.Event()

    @property
    def phase(self) -> Enum:
        return self.session.phase

    @property
    def cursor(self) -> int:
        return self.session.cursor

    @property
    def log(self) -> str:
        return self.session.log

    @property
    def is_terminal(self) -> bool:
        return self.session.phase in self.TERMINAL_PHASES

    @property
    def total_items(self) -> int:
        return len(getattr(self.session, "items", ()))

    def add_listener(self, listener: Callable[[WorkflowSession], None]) -> None:
        """Register a callback invoked after every phase or status-line change."""
        self._listeners.append(listener)

    def start(self) -> None:
        self.advance(Event.start())

    def request_cancel(self) -> None:
        """Ask for cancellation from any thread.

        Honoured at the next phase boundary; a command already issued runs
        to completion first.
        """
        self._cancel_requested.set()

    def advance(self, event: Event) -> None:
        """Feed one event (operator input or completion) into the workflow."""
        if event.kind is EventKind.CANCEL:
            self.request_cancel()

        with self._lock:
            if self._cancel_requested.is_set():
                self._cancel_requested.clear()
                if not self.is_terminal:
                    self._cancel()
                return

            # Completion events are always applied; a cancel requested while
            # a hook ran is honoured once the resulting phase has been entered.
            pending: Optional[Event] = event
            while pending is not None:
                pending = self._step(pending)

            if self._cancel_requested.is_set():
                self._cancel_requested.clear()
                if not self.is_terminal:
                    self._cancel(keep_log=True)

    def _step(self, event: Event) -> Optional[Event]:
        phase = self.session.phase

        if event.kind is EventKind.CANCEL:
            if not self.is_terminal:
                self._cancel()
            return None

        action_name = self.ACTIONS.get((phase, event.kind))
        if action_name is not None:
            replacement = getattr(self, action_name)(event)
            if replacement is not None:
                event = replacement

        resolved = resolve_transition(
            self.TRANSITIONS,
            phase,
            event.kind,
            self.session.cursor,
            self.total_items,
            self.NEXT_ITEM_PHASE,
            self.EXHAUSTED_PHASE,
        )
        if resolved is None:
            logger.debug(f"[{self.NAME}] Ignoring {event.kind.value} in {phase.value}")
            if event.message:
                self._set_log(event.message)
            return None

        target, cursor = resolved
        return self._enter(target, cursor, event)

    def _enter(self, target: Enum, cursor: int, event: Event) -> Optional[Event]:
        previous = self.session.phase
        if cursor < self.session.cursor:
            raise RuntimeError(f"Cursor may not move backward ({self.session.cursor} -> {cursor})")

        self._cancel_pending_exit()
        self.session.phase = target
        self.session.cursor = cursor
        if event.message:
            self.session.log = event.message
        logger.debug(f"[{self.NAME}] {previous.value} -> {target.value} (cursor {cursor})")
        self._notify()

        follow_up = None
        hook = getattr(self, f"_on_enter_{target.name.lower()}", None)
        if hook is not None:
            if self._cancel_requested.is_set() and target not in self.TERMINAL_PHASES:
                logger.debug(f"[{self.NAME}] Cancel requested, not running {target.value}")
            else:
                follow_up = hook(event)

        if target in self.TERMINAL_PHASES:
            self._schedule_exit(target)
        return follow_up

    def _cancel(self, keep_log: bool = False) -> None:
        if self.CANCELLED_PHASE is None:
            raise RuntimeError(f"{self.NAME} does not support cancellation")
        logger.info(f"[{self.NAME}] Cancelled in {self.session.phase.value}")
        message = "Cancelled."
        if keep_log and self.session.log:
            message = f"{self.session.log} Cancelled."
        self._enter(self.CANCELLED_PHASE, self.session.cursor, Event(EventKind.CANCEL, message=message))

    def _set_log(self, message: str) -> None:
        """Replace the status line without changing phase."""
        self.session.log = message
        logger.info(f"[{self.NAME}] {message}")
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.session)
            except Exception as e:
                logger.warning(f"[{self.NAME}] Listener failed: {e}")

    def _schedule_exit(self, phase: Enum) -> None:
        delay = self.error_exit_delay if phase == self.ERROR_PHASE else self.exit_delay
        logger.debug(f"[{self.NAME}] Exiting in {delay}s ({phase.value})")
        self._exit_handle = self._scheduler(delay, partial(self._fire_exit, phase))

    def _fire_exit(self, phase: Enum) -> None:
        self._exit_handle = None
        if self.session.phase != phase:
            return
        if self._on_exit is not None:
            self._on_exit(phase)

    def _cancel_pending_exit(self) -> None:
        if self._exit_handle is not None:
            self._exit_handle.cancel()
            self._exit_handle = None

    def cancel_pending_exit(self) -> None:
        """Drop a scheduled exit, e.g. when the operator leaves the screen first."""
        with self._lock:
            self._cancel_pending_exit()
