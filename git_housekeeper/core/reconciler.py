"""Branch reconciliation: which local branches have lost their remote counterpart."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union, TYPE_CHECKING

from git_housekeeper.logging_config import get_logger
from git_housekeeper.models.branch import BranchRef, OrphanSet, TrackingState
from git_housekeeper.services.git.branch_queries import BranchQueries
from git_housekeeper.utils.threading import get_optimal_worker_count

if TYPE_CHECKING:
    from git_housekeeper.config import Config
    from git_housekeeper.services.git.gateway import GitGateway

logger = get_logger(__name__)

BranchLookup = Tuple[Optional[datetime], Optional[int], Optional[int]]


def combine_orphan_signals(
    local_branches: List[str],
    remote_branches: List[str],
    gone_branches: List[str],
) -> Dict[str, TrackingState]:
    """Union of the two orphan signals, keyed by branch name.

    Signal A: local names with no remote branch of the same name.
    Signal B: branches whose tracked upstream is marked gone.

    Neither signal is sufficient alone. A misses branches whose local
    tracking metadata outlived a force-deleted upstream under some
    configurations; B misses branches that were never pushed. A branch
    flagged by both appears once, as gone.
    """
    remote = set(remote_branches)
    candidates: Dict[str, TrackingState] = {}

    for name in local_branches:
        if name not in remote:
            candidates[name] = TrackingState.UNTRACKED

    for name in gone_branches:
        candidates[name] = TrackingState.GONE

    return candidates


class BranchReconciler:
    """Computes the orphaned-branch set with commit times and divergence."""

    def __init__(
        self,
        gateway: "GitGateway",
        config: Union["Config", dict],
        queries: Optional[BranchQueries] = None,
    ):
        self.config = config
        self.queries = queries or BranchQueries(gateway, config)
        self.sequential = config.get("sequential", False) or config.get("debug", False)
        self.workers = config.get("workers")

    def compute_orphaned_branches(self) -> OrphanSet:
        """Fetch with pruning, then derive a fresh orphan snapshot.

        Structural lookups (fetch, branch listings) propagate
        ``CommandFailure``; per-branch details degrade to unknown.
        """
        self.queries.fetch_prune()

        local_branches = self.queries.list_local_branches()
        remote_branches = self.queries.list_remote_branches()
        gone_branches = self.queries.list_gone_branches()

        candidates = combine_orphan_signals(local_branches, remote_branches, gone_branches)
        logger.info(
            f"{len(local_branches)} local, {len(remote_branches)} remote, "
            f"{len(gone_branches)} gone -> {len(candidates)} orphaned"
        )

        if not candidates:
            return OrphanSet()

        default_branch = self.queries.resolve_default_branch()
        reference = self.queries.remote_ref(default_branch)

        details = self._lookup_details(sorted(candidates), reference)

        return OrphanSet(
            BranchRef(name, state).with_details(*details[name])
            for name, state in candidates.items()
        )

    def _lookup_branch(self, branch_name: str, reference: str) -> BranchLookup:
        """Commit time and ahead/behind for one branch; each may be unknown."""
        last_commit_time = self.queries.get_last_commit_time(branch_name)
        ahead, behind = self.queries.get_ahead_behind(branch_name, reference)
        return last_commit_time, ahead, behind

    def _lookup_details(self, branch_names: List[str], reference: str) -> Dict[str, BranchLookup]:
        """Fan the read-only lookups out, fan results back in keyed by name."""
        if self.sequential or len(branch_names) == 1:
            return {name: self._lookup_branch(name, reference) for name in branch_names}

        max_workers = min(len(branch_names), get_optimal_worker_count(self.workers))
        logger.debug(f"Looking up {len(branch_names)} branches using {max_workers} workers")

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                name: executor.submit(self._lookup_branch, name, reference)
                for name in branch_names
            }
            return {name: future.result() for name, future in futures.items()}
