"""Branch model and related enums"""
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional


class TrackingState(Enum):
    """How a local branch relates to the remote."""
    TRACKED = "tracked"  # Upstream exists on the remote
    GONE = "gone"  # Upstream was tracked but no longer exists
    UNTRACKED = "untracked"  # No counterpart on the remote


ORPHAN_STATES = frozenset({TrackingState.GONE, TrackingState.UNTRACKED})


@dataclass(frozen=True)
class BranchRef:
    """A local branch with its reconciliation details.

    ``last_commit_time``, ``ahead`` and ``behind`` are None when the lookup
    failed ("unknown"), never a guessed value.
    """
    name: str
    tracking_state: TrackingState
    last_commit_time: Optional[datetime] = None
    ahead: Optional[int] = None  # Commits on the branch not on the default branch
    behind: Optional[int] = None  # Commits on the default branch not on the branch

    @property
    def is_orphaned(self) -> bool:
        return self.tracking_state in ORPHAN_STATES

    @property
    def divergence_known(self) -> bool:
        return self.ahead is not None and self.behind is not None

    def with_details(
        self,
        last_commit_time: Optional[datetime],
        ahead: Optional[int],
        behind: Optional[int],
    ) -> "BranchRef":
        return replace(self, last_commit_time=last_commit_time, ahead=ahead, behind=behind)


class OrphanSet:
    """Immutable, name-keyed snapshot of orphaned branches.

    Membership and equality are by branch name and details; iteration order
    carries no meaning, use ``sorted()`` for presentation.
    """

    __slots__ = ("_branches",)

    def __init__(self, branches: Iterable[BranchRef] = ()):
        by_name: Dict[str, BranchRef] = {}
        for branch in branches:
            if not branch.is_orphaned:
                raise ValueError(
                    f"Branch '{branch.name}' is {branch.tracking_state.value}, not orphaned"
                )
            by_name.setdefault(branch.name, branch)
        object.__setattr__(self, "_branches", by_name)

    def __setattr__(self, key, value):
        raise AttributeError("OrphanSet is immutable")

    def __contains__(self, item) -> bool:
        name = item.name if isinstance(item, BranchRef) else item
        return name in self._branches

    def __iter__(self) -> Iterator[BranchRef]:
        return iter(self._branches.values())

    def __len__(self) -> int:
        return len(self._branches)

    def __bool__(self) -> bool:
        return bool(self._branches)

    def __eq__(self, other) -> bool:
        if not isinstance(other, OrphanSet):
            return NotImplemented
        return self._branches == other._branches

    def __hash__(self) -> int:
        return hash(frozenset(self._branches.values()))

    def __repr__(self) -> str:
        return f"OrphanSet({sorted(self._branches)!r})"

    @property
    def names(self) -> frozenset:
        return frozenset(self._branches)

    def get(self, name: str) -> Optional[BranchRef]:
        return self._branches.get(name)

    def sorted(self) -> List[BranchRef]:
        """Branches ordered by name."""
        return [self._branches[name] for name in sorted(self._branches)]
