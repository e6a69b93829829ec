"""Formatting utilities for git-housekeeper.

- date: Commit time formatting
- branch: Orphaned branch labels and divergence
- pr: Pull request labels and prompts
- status: Deletion confirmation and summary
"""

# Date formatters
from .date import format_commit_date

# Branch formatters
from .branch import format_divergence, format_orphan_label, format_tracking_state

# Pull request formatters
from .pr import format_merge_prompt, format_pr_label

# Status formatters
from .status import format_deletion_confirmation_items, format_deletion_summary

__all__ = [
    # Date
    "format_commit_date",
    # Branch
    "format_divergence",
    "format_orphan_label",
    "format_tracking_state",
    # Pull requests
    "format_merge_prompt",
    "format_pr_label",
    # Status
    "format_deletion_confirmation_items",
    "format_deletion_summary",
]
