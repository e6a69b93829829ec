"""Custom exceptions for git-housekeeper"""

from typing import Optional, Sequence, Union


class HousekeeperError(Exception):
    """Base exception for all git-housekeeper errors."""
    pass


class CommandFailure(HousekeeperError):
    """Exception raised when an external git command exits non-zero."""

    def __init__(
        self,
        command: Union[str, Sequence[str]],
        stderr: Optional[str] = None,
        status: Optional[int] = None,
    ):
        if not isinstance(command, str):
            command = " ".join(str(part) for part in command)
        self.command = command
        self.stderr = (stderr or "").strip()
        self.status = status

        error_msg = f"'{command}' failed"
        if status is not None:
            error_msg += f" (exit {status})"
        if self.stderr:
            error_msg += f": {self.stderr}"

        super().__init__(error_msg)


class NotARepositoryError(HousekeeperError):
    """Exception raised when the working directory is not inside a git work tree."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class GitHubAPIError(HousekeeperError):
    """Exception raised for errors in GitHub API operations."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = f"GitHub API operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class MergeConflictError(HousekeeperError):
    """Raised when a merge (or its continuation) leaves unresolved state.

    This is an expected, recoverable condition: the orchestrator pauses for
    manual resolution instead of treating it as a crash.
    """

    def __init__(self, item: str, stderr: Optional[str] = None):
        self.item = item
        self.stderr = (stderr or "").strip()
        error_msg = f"Merge of '{item}' did not complete"
        if self.stderr:
            error_msg += f": {self.stderr}"
        super().__init__(error_msg)
