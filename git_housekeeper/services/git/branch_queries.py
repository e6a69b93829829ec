"""Read-only branch queries and the parsers for their output."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple, Union

from git_housekeeper.constants import (
    CURRENT_BRANCH_MARKER,
    GONE_MARKER_PATTERN,
    WORKTREE_BRANCH_MARKER,
)
from git_housekeeper.exceptions import CommandFailure
from git_housekeeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_housekeeper.config import Config
    from git_housekeeper.services.git.gateway import GitGateway

logger = get_logger(__name__)


def parse_branch_names(output: str) -> List[str]:
    """Split `git branch --format=%(refname:short)` output into names."""
    return [line.strip() for line in output.split("\n") if line.strip()]


def normalize_remote_branches(names: Iterable[str], remote_name: str) -> List[str]:
    """Strip the remote prefix from remote-tracking branch names.

    The symbolic ``<remote>/HEAD`` entry (rendered as ``<remote>`` by newer
    git) is not a branch and is dropped.
    """
    prefix = f"{remote_name}/"
    normalized = []
    for name in names:
        if name == remote_name:
            continue
        if name.startswith(prefix):
            name = name[len(prefix):]
        if name == "HEAD":
            continue
        normalized.append(name)
    return normalized


def parse_gone_branches(verbose_output: str) -> List[str]:
    """Extract branch names whose upstream is marked gone in `git branch -vv`.

    Lines look like::

        * feature/a  1a2b3c4 [origin/feature/a: gone] Commit subject
          feature/b  5d6e7f8 [origin/feature/b] Commit subject
    """
    gone = []
    for line in verbose_output.split("\n"):
        if not GONE_MARKER_PATTERN.search(line):
            continue
        parts = line.split()
        if not parts:
            continue
        if parts[0] in (CURRENT_BRANCH_MARKER, WORKTREE_BRANCH_MARKER):
            parts = parts[1:]
        if parts:
            gone.append(parts[0])
    return gone


def parse_ahead_behind(output: str) -> Tuple[int, int]:
    """Parse `git rev-list --left-right --count A...B` output into (ahead, behind)."""
    parts = output.split()
    if len(parts) != 2:
        raise ValueError(f"Unexpected rev-list output: {output!r}")
    return int(parts[0]), int(parts[1])


class BranchQueries:
    """Service for querying branch information through the gateway."""

    def __init__(self, gateway: "GitGateway", config: Union["Config", dict]):
        self.gateway = gateway
        self.config = config
        self.remote_name = config.get("remote_name", "origin")
        self.default_branch_fallback = config.get("default_branch_fallback", "main")

        logger.debug("Branch queries service initialized")

    def fetch_prune(self) -> None:
        """Fetch and remove stale remote-tracking refs."""
        self.gateway.run(["fetch", "--prune", self.remote_name])

    def list_local_branches(self) -> List[str]:
        output = self.gateway.run(["branch", "--format=%(refname:short)"]).stdout
        return sorted(parse_branch_names(output))

    def list_remote_branches(self) -> List[str]:
        """Remote branch names with the remote prefix stripped."""
        output = self.gateway.run(
            ["branch", "-r", "--format=%(refname:short)"]
        ).stdout
        return sorted(normalize_remote_branches(parse_branch_names(output), self.remote_name))

    def list_gone_branches(self) -> List[str]:
        output = self.gateway.run(["branch", "-vv"]).stdout
        return parse_gone_branches(output)

    def resolve_default_branch(self) -> str:
        """Name of the remote's default branch, e.g. ``main``.

        Reads the ``<remote>/HEAD`` symbolic ref. Never raises: on failure the
        configured fallback is returned and a warning is logged.
        """
        ref_prefix = f"refs/remotes/{self.remote_name}/"
        try:
            output = self.gateway.run(
                ["symbolic-ref", f"refs/remotes/{self.remote_name}/HEAD"]
            ).stdout.strip()
            if output.startswith(ref_prefix) and len(output) > len(ref_prefix):
                return output[len(ref_prefix):]
            logger.warning(f"Unexpected remote HEAD reference: {output!r}")
        except CommandFailure as e:
            logger.debug(f"Could not read {self.remote_name}/HEAD: {e}")

        logger.warning(
            f"Could not determine remote default branch, defaulting to "
            f"{self.remote_name}/{self.default_branch_fallback}."
        )
        return self.default_branch_fallback

    def remote_ref(self, branch_name: str) -> str:
        return f"{self.remote_name}/{branch_name}"

    def get_last_commit_time(self, branch_name: str) -> Optional[datetime]:
        """Committer time of the branch tip, None when it cannot be read."""
        try:
            output = self.gateway.run(
                ["log", "-1", "--format=%ct", branch_name, "--"]
            ).stdout.strip()
            return datetime.fromtimestamp(int(output), tz=timezone.utc)
        except (CommandFailure, ValueError) as e:
            logger.debug(f"Error getting last commit time for {branch_name}: {e}")
            return None

    def get_ahead_behind(self, branch_name: str, reference: str) -> Tuple[Optional[int], Optional[int]]:
        """Commits ahead of and behind ``reference``; (None, None) when unknown."""
        try:
            output = self.gateway.run(
                ["rev-list", "--left-right", "--count", f"{branch_name}...{reference}", "--"]
            ).stdout
            return parse_ahead_behind(output)
        except (CommandFailure, ValueError) as e:
            logger.debug(f"Could not compute diff for branch {branch_name}: {e}")
            return None, None

    def get_current_branch(self) -> Optional[str]:
        """Checked-out branch name, None on a detached HEAD."""
        name = self.gateway.run(["rev-parse", "--abbrev-ref", "HEAD"]).stdout.strip()
        return None if name == "HEAD" else name

    def has_uncommitted_changes(self) -> bool:
        status = self.gateway.run(["status", "--porcelain"]).stdout
        return bool(status.strip())

    def get_remote_url(self) -> str:
        return self.gateway.run(["remote", "get-url", self.remote_name]).stdout.strip()
