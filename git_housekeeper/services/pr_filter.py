"""Dependency-update pull request detection."""
import re
from typing import Iterable, List, Pattern, Sequence, Union

from git_housekeeper.models.pull_request import PRRef

DEFAULT_TITLE_PATTERN = r"\(deps(-dev)?\)"
DEFAULT_BRANCH_PREFIXES = ("dependabot/",)


def compile_title_pattern(pattern: Union[str, Pattern] = DEFAULT_TITLE_PATTERN) -> Pattern:
    if isinstance(pattern, str):
        return re.compile(pattern, re.IGNORECASE)
    return pattern


def is_dependency_update(
    pr: PRRef,
    title_pattern: Union[str, Pattern] = DEFAULT_TITLE_PATTERN,
    branch_prefixes: Sequence[str] = DEFAULT_BRANCH_PREFIXES,
) -> bool:
    """True when the title carries a ``(deps)``-style marker or the branch
    follows a dependency bot's naming convention."""
    if compile_title_pattern(title_pattern).search(pr.title):
        return True
    return any(pr.head_ref_name.startswith(prefix) for prefix in branch_prefixes)


def filter_dependency_updates(
    prs: Iterable[PRRef],
    title_pattern: Union[str, Pattern] = DEFAULT_TITLE_PATTERN,
    branch_prefixes: Sequence[str] = DEFAULT_BRANCH_PREFIXES,
) -> List[PRRef]:
    """Dependency-update PRs, in the order the source returned them."""
    pattern = compile_title_pattern(title_pattern)
    return [pr for pr in prs if is_dependency_update(pr, pattern, branch_prefixes)]
