"""Command gateway: the single place git commands are executed."""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import git

from git_housekeeper.exceptions import CommandFailure, NotARepositoryError
from git_housekeeper.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a successful command."""
    stdout: str
    stderr: str = ""


class GitGateway:
    """Runs git commands inside one work tree and captures their output."""

    def __init__(self, repo_path: str):
        """Resolve the work-tree root for ``repo_path``.

        Raises:
            NotARepositoryError: if ``repo_path`` is not inside a git work tree
        """
        try:
            repo = git.Repo(repo_path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            raise NotARepositoryError(repo_path)

        try:
            if repo.bare or repo.working_tree_dir is None:
                raise NotARepositoryError(repo_path)
            self.repo_root = str(repo.working_tree_dir)
        finally:
            repo.close()

        logger.debug(f"Git gateway initialized at {self.repo_root}")

    def _get_git(self) -> git.Git:
        """Get a fresh command wrapper.

        ``git.Git`` holds no repository state, so one per call keeps
        concurrent read-only lookups independent of each other.
        """
        return git.Git(self.repo_root)

    def run(self, args: Sequence[str], env: Optional[Dict[str, str]] = None) -> CommandResult:
        """Run ``git <args>`` and return its output.

        Raises:
            CommandFailure: on non-zero exit
        """
        command = ["git", *args]
        logger.debug(f"$ {' '.join(command)}")
        try:
            _, stdout, stderr = self._get_git().execute(
                command, with_extended_output=True, env=env
            )
        except git.exc.GitCommandError as e:
            stderr = e.stderr if isinstance(e.stderr, str) else str(e.stderr or "")
            # GitPython wraps stderr as "\n  stderr: '...'"
            stderr = stderr.strip()
            if stderr.startswith("stderr:"):
                stderr = stderr[len("stderr:"):].strip().strip("'")
            logger.debug(f"Command failed ({e.status}): {' '.join(command)}: {stderr}")
            raise CommandFailure(command, stderr, e.status if isinstance(e.status, int) else None)
        except git.exc.GitCommandNotFound as e:
            raise CommandFailure(command, str(e))

        return CommandResult(stdout=stdout, stderr=stderr)

    def repository_info(self) -> str:
        """Describe the local root and its configured remotes."""
        try:
            remotes = self.run(["remote", "-v"]).stdout.strip()
        except CommandFailure as e:
            logger.debug(f"Could not list remotes: {e}")
            remotes = ""
        return f"Local repository: {self.repo_root}\n\nUpstream repository:\n{remotes or '(none)'}"
