"""Pull request label formatting utilities."""

from git_housekeeper.models.pull_request import PRRef


def format_pr_label(pr: PRRef) -> str:
    """Option label for a pull request, e.g. ``#12 - Bump requests (deps)``."""
    return f"#{pr.number} - {pr.title}"


def format_merge_prompt(pr: PRRef, staging_branch: str) -> str:
    """Confirmation question asked before merging a pull request."""
    return f"Merge PR #{pr.number} ({pr.head_ref_name}) into {staging_branch}?\n\n{pr.title}"
