"""Shared constants for git-housekeeper."""

import re
from dataclasses import dataclass
from typing import List


# Marker git prints in `git branch -vv` when the upstream ref no longer exists.
# Real git renders it as "[origin/feature: gone]"; a bare "[gone]" is accepted too.
GONE_MARKER_PATTERN = re.compile(r"\[(?:[^\]\s]+: )?gone\]")

# Leading markers in `git branch -vv`: current branch, branch checked out in another worktree
CURRENT_BRANCH_MARKER = "*"
WORKTREE_BRANCH_MARKER = "+"

UNKNOWN = "N/A"

# Symbol constants
SYMBOL_AHEAD = "↑"
SYMBOL_BEHIND = "↓"
SYMBOL_GONE = "✗"
SYMBOL_LOCAL_ONLY = "○"


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


ORPHAN_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("tracking", "Tracking", 10),
    ColumnDefinition("last_commit", "Last Commit", 16),
    ColumnDefinition("divergence", "Diff vs default", 16),
]


@dataclass
class MenuAction:
    """Entry in the top-level menu."""

    key: str
    label: str
    hint: str


MENU_ACTIONS: List[MenuAction] = [
    MenuAction(
        "prune",
        "Prune branches",
        "remove local branches that don't exist upstream or were never pushed",
    ),
    MenuAction(
        "dependabot",
        "Merge dependency PRs",
        "merge dependency-update pull requests into the staging branch",
    ),
    MenuAction("prs", "Open a pull request", "pick an open pull request and open it in the browser"),
]


# Status lines
MSG_NO_ORPHANS = "👍 No local branches found that are not present upstream."
MSG_NO_SELECTION = "No branches selected for deletion."
MSG_NOT_A_REPOSITORY = "Not a git repository."
MSG_NO_DEPENDENCY_PRS = "🚫 No matching dependency-update PRs found."
MSG_NO_OPEN_PRS = "No open pull requests found."
MSG_GO_BACK = "Press Esc to go back."
