"""GitHub pull request source"""

import os
from typing import Callable, List, Optional, TYPE_CHECKING, Union
from urllib.parse import urlparse

from github import Auth, Github
from github.GithubException import GithubException

from git_housekeeper.exceptions import GitHubAPIError
from git_housekeeper.logging_config import get_logger
from git_housekeeper.models.pull_request import PRRef

if TYPE_CHECKING:
    from github.Repository import Repository
    from git_housekeeper.config import Config

logger = get_logger(__name__)


def parse_repository_slug(remote_url: str) -> str:
    """Extract ``owner/repo`` from an SSH or HTTPS GitHub remote URL."""
    if remote_url.startswith("git@"):
        # git@github.com:org/repo.git
        if ":" not in remote_url:
            raise GitHubAPIError("parse_remote", f"Unrecognized remote URL: {remote_url}")
        path = remote_url.split(":", 1)[1]
    else:
        # https://github.com/org/repo.git or ssh://git@github.com/org/repo.git
        path = urlparse(remote_url).path

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]

    if path.count("/") != 1:
        raise GitHubAPIError("parse_remote", f"Unrecognized remote URL: {remote_url}")
    return path


class PullRequestSource:
    """Lists pull requests of the repository behind the configured remote."""

    def __init__(self, config: Union["Config", dict], remote_url_provider: Optional[Callable[[], str]] = None):
        """
        Args:
            config: Configuration (token, fetch limit)
            remote_url_provider: Called on first use to connect lazily
        """
        self.config = config
        self.remote_url_provider = remote_url_provider
        self.github_token = config.get("github_token") or os.environ.get("GITHUB_TOKEN")
        self.max_prs = config.get("max_prs_to_fetch", 100)
        self.github_repo: Optional[str] = None
        self.github: Optional[Github] = None
        self.gh_repo: Optional["Repository"] = None

    def setup_github_api(self, remote_url: str) -> None:
        """Connect to the repository behind ``remote_url``.

        Raises:
            GitHubAPIError: if the URL is not a GitHub repository or the API call fails
        """
        if "github.com" not in remote_url:
            raise GitHubAPIError("setup", f"Not a GitHub remote: {remote_url}")

        self.github_repo = parse_repository_slug(remote_url)

        try:
            if self.github_token:
                self.github = Github(auth=Auth.Token(self.github_token))
            else:
                logger.info("[GitHub] No GITHUB_TOKEN found, using unauthenticated access")
                self.github = Github()
            self.gh_repo = self.github.get_repo(self.github_repo)
        except GithubException as e:
            raise GitHubAPIError("get_repo", f"{self.github_repo}: {e}")
        except Exception as e:
            # Transport errors (connection refused, timeouts) come from requests
            logger.error(f"[GitHub] Failed to setup GitHub API: {e}")
            raise GitHubAPIError("get_repo", f"{self.github_repo}: {e}")

        logger.debug(f"[GitHub] Pull request source ready for {self.github_repo}")

    def list_pull_requests(self, base: Optional[str] = None, state: str = "open") -> List[PRRef]:
        """Pull requests in API order, at most ``max_prs_to_fetch`` of them.

        Raises:
            GitHubAPIError: if the API call fails
        """
        if self.gh_repo is None and self.remote_url_provider is not None:
            self.setup_github_api(self.remote_url_provider())
        if self.gh_repo is None:
            raise GitHubAPIError("list_pull_requests", "GitHub API is not set up")

        kwargs = {"state": state}
        if base:
            kwargs["base"] = base

        try:
            prs = []
            for pr in self.gh_repo.get_pulls(**kwargs):
                prs.append(
                    PRRef(
                        number=pr.number,
                        title=pr.title,
                        head_ref_name=pr.head.ref,
                        url=pr.html_url,
                    )
                )
                if len(prs) >= self.max_prs:
                    logger.debug(f"[GitHub] Stopped after {self.max_prs} pull requests")
                    break
        except GithubException as e:
            raise GitHubAPIError("list_pull_requests", str(e))
        except Exception as e:
            logger.error(f"[GitHub] Failed to list pull requests: {e}")
            raise GitHubAPIError("list_pull_requests", str(e))

        logger.debug(f"[GitHub] Fetched {len(prs)} pull requests (base={base}, state={state})")
        return prs

    def close(self) -> None:
        """Close the GitHub API connection to clean up resources."""
        if self.github:
            try:
                self.github.close()
                logger.debug("[GitHub] Closed GitHub API connection")
            except Exception as e:
                logger.debug(f"[GitHub] Error closing GitHub API connection: {e}")
