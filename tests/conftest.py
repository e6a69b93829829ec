"""Pytest fixtures for git-housekeeper tests"""
import tempfile
import threading
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from git_housekeeper.config import Config
from git_housekeeper.exceptions import CommandFailure
from git_housekeeper.models.pull_request import PRRef
from git_housekeeper.services.git.gateway import CommandResult


LOCAL_BRANCHES = ("branch", "--format=%(refname:short)")
REMOTE_BRANCHES = ("branch", "-r", "--format=%(refname:short)")
VERBOSE_BRANCHES = ("branch", "-vv")
FETCH_PRUNE = ("fetch", "--prune", "origin")
REMOTE_HEAD = ("symbolic-ref", "refs/remotes/origin/HEAD")
CURRENT_BRANCH = ("rev-parse", "--abbrev-ref", "HEAD")
STATUS = ("status", "--porcelain")


class FakeGateway:
    """Scripted stand-in for GitGateway.

    Responses are keyed by the argument tuple. A response may be a string
    (stdout), an exception (raised), or a list consumed one entry per call
    (the last entry repeats). Unscripted commands succeed with empty output.
    """

    def __init__(self, responses=None, repo_root="/fake/repo"):
        self.repo_root = repo_root
        self.responses = dict(responses or {})
        self.calls = []
        self.envs = {}
        self._lock = threading.Lock()

    def script(self, args, response):
        self.responses[tuple(args)] = response

    def fail(self, args, stderr="error", status=1):
        self.responses[tuple(args)] = CommandFailure(["git", *args], stderr, status)

    def run(self, args, env=None):
        key = tuple(args)
        with self._lock:
            self.calls.append(key)
            if env is not None:
                self.envs[key] = env
            response = self.responses.get(key, "")
            if isinstance(response, list):
                response = response.pop(0) if len(response) > 1 else response[0]
        if isinstance(response, Exception):
            raise response
        return CommandResult(stdout=response)

    def repository_info(self):
        return f"Local repository: {self.repo_root}\n\nUpstream repository:\norigin\tgit@github.com:test/repo.git (fetch)"

    def ran(self, *args):
        return tuple(args) in self.calls

    def count(self, *args):
        return self.calls.count(tuple(args))

    def mutating_calls(self):
        return [
            call for call in self.calls
            if call[:2] == ("branch", "-D") or call[0] in ("checkout", "stash", "merge", "push", "pull")
        ]


class FakeTimerHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Records scheduled callbacks; ``fire()`` runs the ones still pending."""

    def __init__(self):
        self.handles = []

    def __call__(self, delay, callback):
        handle = FakeTimerHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [handle for handle in self.handles if not handle.cancelled]

    def fire(self):
        for handle in self.pending:
            handle.cancelled = True
            handle.callback()


def script_branches(gateway, local, remote, verbose="", remote_head="refs/remotes/origin/main"):
    """Script the listing commands the reconciler issues."""
    gateway.script(LOCAL_BRANCHES, "\n".join(local) + "\n")
    gateway.script(REMOTE_BRANCHES, "\n".join(f"origin/{name}" for name in remote) + "\n")
    gateway.script(VERBOSE_BRANCHES, verbose)
    if remote_head is None:
        gateway.fail(REMOTE_HEAD, "fatal: ref refs/remotes/origin/HEAD is not a symbolic ref", 128)
    else:
        gateway.script(REMOTE_HEAD, remote_head + "\n")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    """Default configuration with sequential lookups and no exit delay."""
    return Config(sequential=True, exit_delay=0, error_exit_delay=0)


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        "remote_name": "origin",
        "default_branch_fallback": "main",
        "staging_branch": "staging",
        "pr_base_branch": "main",
        "verbose": False,
        "debug": False,
        "sequential": True,
        "exit_delay": 0,
        "github_token": "test_token_for_testing",
        "max_prs_to_fetch": 100,
    }


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def dependency_prs():
    """Two dependency-update PRs as the source returns them."""
    return [
        PRRef(1, "chore(deps): bump a", "dependabot/npm/a", "https://github.com/test/repo/pull/1"),
        PRRef(2, "chore(deps-dev): bump b", "dependabot/npm/b", "https://github.com/test/repo/pull/2"),
    ]


@pytest.fixture
def pr_source(dependency_prs):
    source = Mock()
    source.list_pull_requests.return_value = list(dependency_prs)
    return source


def _configure_user(repo):
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")


def commit_file(repo, filename, content, message):
    path = Path(repo.working_dir) / filename
    path.write_text(content)
    repo.index.add([filename])
    return repo.index.commit(message)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with a bare "remote" for testing.

    Layout:
        main        pushed, origin/HEAD -> origin/main
        feat-gone   pushed, then deleted on the remote
        feat-local  never pushed
        feat-kept   pushed and still on the remote
    """
    remote_path = temp_dir / "remote.git"
    remote = git.Repo.init(remote_path, bare=True)
    remote.git.symbolic_ref("HEAD", "refs/heads/main")

    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()
    repo = git.Repo.init(repo_path)
    _configure_user(repo)

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")
    repo.git.branch("-M", "main")
    repo.create_remote("origin", str(remote_path))
    repo.git.push("-u", "origin", "main")
    repo.git.remote("set-head", "origin", "main")

    for name in ("feat-gone", "feat-kept"):
        repo.git.checkout("-b", name)
        commit_file(repo, f"{name}.txt", f"{name}\n", f"Add {name}")
        repo.git.push("-u", "origin", name)
        repo.git.checkout("main")

    repo.git.checkout("-b", "feat-local")
    commit_file(repo, "local.txt", "local\n", "Local work")
    commit_file(repo, "local2.txt", "more local\n", "More local work")
    repo.git.checkout("main")

    commit_file(repo, "main.txt", "main moves on\n", "Main moves on")
    repo.git.push("origin", "main")

    # Delete feat-gone on the remote only
    remote.git.branch("-D", "feat-gone")

    yield repo

    repo.close()
    remote.close()
