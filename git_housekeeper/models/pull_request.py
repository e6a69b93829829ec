"""Pull request model"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PRRef:
    """A pull request as returned by the PR source; immutable for the session."""
    number: int
    title: str
    head_ref_name: str
    url: Optional[str] = None

    def __post_init__(self):
        if self.number <= 0:
            raise ValueError(f"PR number must be positive, got {self.number}")
