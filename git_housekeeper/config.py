"""Configuration handling for git-housekeeper"""

import re
from dataclasses import dataclass, field
from typing import Optional, List

DEFAULT_STASH_MESSAGE = "git-housekeeper: auto-stash"


@dataclass
class Config:
    """Configuration for git-housekeeper with validation."""

    # Remote and branch names
    remote_name: str = "origin"
    default_branch_fallback: str = "main"  # Used when the remote HEAD cannot be read
    staging_branch: str = "staging"
    pr_base_branch: str = "main"

    # Dependency-update PR detection
    dependency_branch_prefixes: List[str] = field(default_factory=lambda: ["dependabot/"])
    dependency_title_pattern: str = r"\(deps(-dev)?\)"

    # Workflow behaviour
    exit_delay: float = 1.5  # Seconds a terminal status line stays visible
    error_exit_delay: float = 5.0
    stash_message: str = DEFAULT_STASH_MESSAGE

    # Execution modes
    verbose: bool = False
    debug: bool = False
    sequential: bool = False  # Force sequential per-branch lookups
    workers: Optional[int] = None  # Number of parallel workers (None = auto-detect)

    # GitHub integration
    github_token: Optional[str] = None
    max_prs_to_fetch: int = 100

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_branch_names()
        self._validate_dependency_patterns()
        self._validate_exit_delay()
        self._validate_workers()
        self._validate_max_prs()

    def _validate_branch_names(self):
        """Validate remote and branch names are not empty."""
        for name in ("remote_name", "default_branch_fallback", "staging_branch", "pr_base_branch"):
            value = getattr(self, name)
            if not value or not value.strip():
                raise ValueError(f"{name} cannot be empty")
            setattr(self, name, value.strip())

    def _validate_dependency_patterns(self):
        """Validate the title pattern compiles and prefixes are a list."""
        if not isinstance(self.dependency_branch_prefixes, list):
            raise ValueError("dependency_branch_prefixes must be a list")
        try:
            re.compile(self.dependency_title_pattern)
        except re.error as e:
            raise ValueError(
                f"dependency_title_pattern is not a valid regex: {self.dependency_title_pattern!r} ({e})"
            )

    def _validate_exit_delay(self):
        """Validate exit delays are not negative."""
        for name in ("exit_delay", "error_exit_delay"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} cannot be negative, got {value}")

    def _validate_workers(self):
        """Validate workers is positive when given."""
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    def _validate_max_prs(self):
        """Validate max_prs_to_fetch is positive."""
        if self.max_prs_to_fetch <= 0:
            raise ValueError(f"max_prs_to_fetch must be positive, got {self.max_prs_to_fetch}")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "remote_name": self.remote_name,
            "default_branch_fallback": self.default_branch_fallback,
            "staging_branch": self.staging_branch,
            "pr_base_branch": self.pr_base_branch,
            "dependency_branch_prefixes": self.dependency_branch_prefixes,
            "dependency_title_pattern": self.dependency_title_pattern,
            "exit_delay": self.exit_delay,
            "error_exit_delay": self.error_exit_delay,
            "stash_message": self.stash_message,
            "verbose": self.verbose,
            "debug": self.debug,
            "sequential": self.sequential,
            "workers": self.workers,
            "github_token": self.github_token,
            "max_prs_to_fetch": self.max_prs_to_fetch,
        }

    def get(self, key: str, default=None):
        """Get config value by key, mirroring dict access."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = set(cls.__dataclass_fields__)
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
