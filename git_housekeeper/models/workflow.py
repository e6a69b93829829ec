"""Workflow phases, events and session state."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from git_housekeeper.models.branch import OrphanSet
from git_housekeeper.models.pull_request import PRRef


class WorkflowPhase(Enum):
    """Phases of the dependency-update merge workflow."""
    INIT = "init"
    SETUP = "setup"
    LOADING = "loading"
    CONFIRM = "confirm"
    MERGING = "merging"
    CONFLICT = "conflict"
    PUSH_CONFIRMATION = "push-confirmation"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


class PrunePhase(Enum):
    """Phases of the branch prune workflow."""
    INIT = "init"
    SETUP = "setup"
    LOADING = "loading"
    SELECTION = "selection"
    CONFIRM = "confirm"
    REMOVING = "removing"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


class OpenPRsPhase(Enum):
    """Phases of the open-PR picker."""
    INIT = "init"
    LOADING = "loading"
    SELECTION = "selection"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


class EventKind(Enum):
    """Inputs accepted by a phase controller."""
    # Operator input
    START = "start"
    SELECT = "select"
    ACCEPT = "accept"
    DECLINE = "decline"
    RESUME = "resume"
    CANCEL = "cancel"
    # Completion of an external operation
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    EMPTY = "empty"


@dataclass(frozen=True)
class Event:
    kind: EventKind
    payload: Any = None
    message: Optional[str] = None

    @classmethod
    def start(cls) -> "Event":
        return cls(EventKind.START)

    @classmethod
    def accept(cls) -> "Event":
        return cls(EventKind.ACCEPT)

    @classmethod
    def decline(cls) -> "Event":
        return cls(EventKind.DECLINE)

    @classmethod
    def resume(cls) -> "Event":
        return cls(EventKind.RESUME)

    @classmethod
    def cancel(cls) -> "Event":
        return cls(EventKind.CANCEL)

    @classmethod
    def select(cls, values) -> "Event":
        return cls(EventKind.SELECT, payload=tuple(values))


@dataclass
class WorkflowSession:
    """State of one run of a workflow; phase and cursor belong to its controller."""
    phase: Enum
    cursor: int = 0
    log: str = ""


@dataclass
class MergeSession(WorkflowSession):
    phase: Enum = WorkflowPhase.INIT
    items: Tuple[PRRef, ...] = ()
    merged: List[PRRef] = field(default_factory=list)
    skipped: List[PRRef] = field(default_factory=list)
    pushed: bool = False

    @property
    def current_item(self) -> Optional[PRRef]:
        if 0 <= self.cursor < len(self.items):
            return self.items[self.cursor]
        return None


@dataclass
class PruneSession(WorkflowSession):
    phase: Enum = PrunePhase.INIT
    orphans: OrphanSet = field(default_factory=OrphanSet)
    default_branch: Optional[str] = None
    selected: Tuple[str, ...] = ()
    deleted: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    stashed: bool = False
    repository_info: str = ""


@dataclass
class OpenPRsSession(WorkflowSession):
    phase: Enum = OpenPRsPhase.INIT
    items: Tuple[PRRef, ...] = ()
    opened: Optional[PRRef] = None
