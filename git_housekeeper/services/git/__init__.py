"""Git-related services for git-housekeeper."""

from .gateway import CommandResult, GitGateway
from .branch_queries import BranchQueries
from .operations import GitOperations
from .github import PullRequestSource

__all__ = [
    "CommandResult",
    "GitGateway",
    "BranchQueries",
    "GitOperations",
    "PullRequestSource",
]
