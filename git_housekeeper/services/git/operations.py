"""Git operations that mutate the working tree, index or refs.

Every method here issues its commands sequentially and waits for completion;
callers must never run two of them concurrently against the same work tree.
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Union

from git_housekeeper.exceptions import CommandFailure, MergeConflictError
from git_housekeeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_housekeeper.config import Config
    from git_housekeeper.services.git.gateway import GitGateway

logger = get_logger(__name__)

# Finalizing a merge must never wait for an editor
NON_INTERACTIVE_ENV = {"GIT_EDITOR": "true", "GIT_MERGE_AUTOEDIT": "no"}


class GitOperations:
    """Service for mutating Git operations."""

    def __init__(self, gateway: "GitGateway", config: Union["Config", dict]):
        self.gateway = gateway
        self.config = config
        self.remote_name = config.get("remote_name", "origin")
        self.in_git_operation = False  # Track if a mutating command is in flight

        logger.debug("Git operations initialized")

    @contextmanager
    def _git_operation(self):
        """Context manager to track git operations."""
        self.in_git_operation = True
        try:
            yield
        finally:
            self.in_git_operation = False

    def stash_changes(self, message: str) -> bool:
        """Stash uncommitted changes, including untracked files.

        Returns:
            bool: True if changes were stashed, False if nothing to stash
        """
        with self._git_operation():
            status = self.gateway.run(["status", "--porcelain"]).stdout
            if not status.strip():
                logger.debug("No uncommitted changes to stash")
                return False

            self.gateway.run(["stash", "push", "--include-untracked", "-m", message])
            logger.info(f"Stashed uncommitted changes: {message}")
            return True

    def checkout(self, branch_name: str) -> None:
        with self._git_operation():
            self.gateway.run(["checkout", branch_name])
            logger.info(f"Checked out {branch_name}")

    def pull(self, branch_name: str) -> None:
        """Bring ``branch_name`` up to date with its remote counterpart."""
        with self._git_operation():
            self.gateway.run(["pull", "--no-edit", self.remote_name, branch_name])

    def fetch_branch(self, branch_name: str) -> None:
        with self._git_operation():
            self.gateway.run(["fetch", self.remote_name, branch_name])

    def merge_no_ff(self, branch_name: str) -> None:
        """Merge the remote-tracking ``branch_name`` with a merge commit.

        A failed merge is left in place (conflict markers, MERGE_HEAD) for
        manual resolution; nothing is aborted here.

        Raises:
            MergeConflictError: if the merge did not complete
        """
        ref = f"{self.remote_name}/{branch_name}"
        with self._git_operation():
            try:
                self.gateway.run(["merge", "--no-ff", "--no-edit", ref], env=NON_INTERACTIVE_ENV)
            except CommandFailure as e:
                raise MergeConflictError(branch_name, e.stderr)
        logger.info(f"Merged {ref}")

    def continue_merge(self, branch_name: str) -> None:
        """Finalize an in-progress merge after manual conflict resolution.

        Raises:
            MergeConflictError: if unresolved paths remain or no merge is in progress
        """
        with self._git_operation():
            try:
                self.gateway.run(["merge", "--continue"], env=NON_INTERACTIVE_ENV)
            except CommandFailure as e:
                raise MergeConflictError(branch_name, e.stderr)
        logger.info(f"Finalized merge of {branch_name}")

    def push(self, branch_name: str) -> None:
        with self._git_operation():
            self.gateway.run(["push", self.remote_name, branch_name])
            logger.info(f"Pushed {branch_name} to {self.remote_name}")

    def delete_branch(self, branch_name: str) -> None:
        """Force-delete a local branch. Remote branches are never touched."""
        with self._git_operation():
            self.gateway.run(["branch", "-D", branch_name])
            logger.info(f"Deleted local branch {branch_name}")
