"""Display service for orphaned branch reports"""
from typing import Optional

from rich.console import Console
from rich.table import Table

from git_housekeeper.constants import MSG_NO_ORPHANS, ORPHAN_COLUMNS
from git_housekeeper.formatters import format_commit_date, format_divergence, format_tracking_state
from git_housekeeper.logging_config import get_logger
from git_housekeeper.models.branch import OrphanSet, TrackingState

console = Console()
logger = get_logger(__name__)


class DisplayService:
    def __init__(self, verbose: bool = False, debug: bool = False, output: Optional[Console] = None):
        self.verbose = verbose
        self.debug_mode = debug
        self.console = output or console

    def display_orphan_table(self, orphans: OrphanSet, default_branch: Optional[str] = None, show_summary: bool = False) -> None:
        """Display a table of orphaned branches."""
        if not orphans:
            self.console.print(MSG_NO_ORPHANS)
            return

        title = f"Orphaned branches (diff vs {default_branch})" if default_branch else "Orphaned branches"
        table = Table(title=title)

        for col in ORPHAN_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for branch in orphans.sorted():
            row_style = "yellow" if branch.tracking_state == TrackingState.GONE else None
            table.add_row(
                branch.name,
                format_tracking_state(branch.tracking_state),
                format_commit_date(branch.last_commit_time),
                format_divergence(branch),
                style=row_style,
            )

        self.console.print(table)

        if show_summary:
            gone = sum(1 for b in orphans if b.tracking_state == TrackingState.GONE)
            self.console.print("\nLegend:")
            self.console.print("✗ = Upstream deleted     ○ = Never pushed")
            self.console.print("↑ = Commits not on the default branch   ↓ = Commits missing from the branch")
            self.console.print("\nSummary:")
            self.console.print(f"Orphaned branches: {len(orphans)}")
            self.console.print(f"Upstream gone: {gone}")
            self.console.print(f"Local only: {len(orphans) - gone}")
