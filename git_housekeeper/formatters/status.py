"""Deletion confirmation and summary formatting utilities."""

from typing import Iterable, List, Sequence, Tuple

from git_housekeeper.formatters.branch import format_tracking_state
from git_housekeeper.models.branch import OrphanSet


def format_deletion_confirmation_items(names: Iterable[str], orphans: OrphanSet) -> str:
    """
    Format the branches about to be deleted for the confirmation dialog.

    Args:
        names: Selected branch names, in selection order
        orphans: Snapshot the names were selected from

    Returns:
        One bullet per branch, e.g. "  • feature/old (✗ gone)"
    """
    lines = []
    for name in names:
        branch = orphans.get(name)
        if branch is None:
            lines.append(f"  • {name}")
        else:
            lines.append(f"  • {name} ({format_tracking_state(branch.tracking_state)})")
    return "\n".join(lines)


def format_deletion_summary(deleted: Sequence[str], failed: Sequence[Tuple[str, str]]) -> List[str]:
    """
    Format the outcome of a prune as display lines.

    Args:
        deleted: Names of deleted branches
        failed: (name, error) pairs for branches that could not be deleted
    """
    lines = [f"✓ Deleted {name}" for name in deleted]
    lines.extend(f"✗ {name}: {error}" for name, error in failed)
    return lines
