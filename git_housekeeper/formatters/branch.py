"""Branch label formatting utilities."""

from rich.text import Text

from git_housekeeper.constants import SYMBOL_AHEAD, SYMBOL_BEHIND, SYMBOL_GONE, SYMBOL_LOCAL_ONLY, UNKNOWN
from git_housekeeper.formatters.date import format_commit_date
from git_housekeeper.models.branch import BranchRef, TrackingState


def format_tracking_state(state: TrackingState) -> str:
    """
    Format how a branch relates to the remote.

    Args:
        state: Tracking state of the branch

    Returns:
        Symbol plus short description, e.g. "✗ gone"
    """
    if state == TrackingState.GONE:
        return f"{SYMBOL_GONE} gone"
    if state == TrackingState.UNTRACKED:
        return f"{SYMBOL_LOCAL_ONLY} local"
    return state.value


def format_divergence(branch: BranchRef) -> str:
    """
    Format commits ahead of and behind the default branch.

    Returns:
        "↑2 ↓5", or "↑N/A ↓N/A" when the comparison failed
    """
    ahead = UNKNOWN if branch.ahead is None else branch.ahead
    behind = UNKNOWN if branch.behind is None else branch.behind
    return f"{SYMBOL_AHEAD}{ahead} {SYMBOL_BEHIND}{behind}"


def format_orphan_label(branch: BranchRef) -> Text:
    """
    Build the selection-list label for an orphaned branch.

    Example:
        "feature/old (last commit: 3/7/24 2:05 PM | diff: ↑2 ↓5)"
    """
    ahead = UNKNOWN if branch.ahead is None else branch.ahead
    behind = UNKNOWN if branch.behind is None else branch.behind

    label = Text(branch.name)
    label.append(f" (last commit: {format_commit_date(branch.last_commit_time)} | diff: ", style="dim")
    label.append(f"{SYMBOL_AHEAD}{ahead}", style="green")
    label.append(" ")
    label.append(f"{SYMBOL_BEHIND}{behind}", style="red")
    label.append(")", style="dim")
    return label
