"""Interactive removal of orphaned local branches."""

from typing import Optional, Union, TYPE_CHECKING

from git_housekeeper.config import DEFAULT_STASH_MESSAGE
from git_housekeeper.constants import MSG_NO_ORPHANS, MSG_NO_SELECTION, MSG_NOT_A_REPOSITORY
from git_housekeeper.core.controller import PhaseController, Transition
from git_housekeeper.core.reconciler import BranchReconciler
from git_housekeeper.exceptions import CommandFailure, HousekeeperError
from git_housekeeper.logging_config import get_logger
from git_housekeeper.models.workflow import Event, EventKind, PrunePhase, PruneSession
from git_housekeeper.services.git.branch_queries import BranchQueries
from git_housekeeper.services.git.operations import GitOperations

if TYPE_CHECKING:
    from git_housekeeper.config import Config
    from git_housekeeper.services.git.gateway import GitGateway

logger = get_logger(__name__)

P = PrunePhase
E = EventKind

PRUNE_TRANSITIONS = {
    (P.INIT, E.START): Transition(P.SETUP),
    (P.SETUP, E.SUCCEEDED): Transition(P.LOADING),
    (P.SETUP, E.FAILED): Transition(P.ERROR),
    (P.LOADING, E.SUCCEEDED): Transition(P.SELECTION),
    (P.LOADING, E.EMPTY): Transition(P.DONE),
    (P.LOADING, E.FAILED): Transition(P.ERROR),
    (P.SELECTION, E.SELECT): Transition(P.CONFIRM),
    (P.SELECTION, E.EMPTY): Transition(P.SELECTION),
    (P.CONFIRM, E.ACCEPT): Transition(P.REMOVING),
    (P.CONFIRM, E.DECLINE): Transition(P.SELECTION),
    (P.REMOVING, E.SUCCEEDED): Transition(P.DONE),
    (P.REMOVING, E.FAILED): Transition(P.ERROR),
}


class PruneFlow(PhaseController):
    """Lists orphaned branches, lets the operator pick some, deletes them.

    Deletion runs from the default branch: if another branch is checked
    out, local changes are stashed and the default branch checked out
    first, so the branch being deleted is never the current one.
    """

    NAME = "Prune"
    TRANSITIONS = PRUNE_TRANSITIONS
    ACTIONS = {
        (P.SELECTION, E.SELECT): "_record_selection",
    }
    TERMINAL_PHASES = frozenset({P.DONE, P.ERROR, P.CANCELLED})
    CANCELLED_PHASE = P.CANCELLED
    ERROR_PHASE = P.ERROR

    def __init__(
        self,
        gateway: "GitGateway",
        config: Union["Config", dict],
        scheduler=None,
        on_exit=None,
        queries: Optional[BranchQueries] = None,
        operations: Optional[GitOperations] = None,
        reconciler: Optional[BranchReconciler] = None,
    ):
        super().__init__(
            PruneSession(),
            exit_delay=config.get("exit_delay", 1.5),
            error_exit_delay=config.get("error_exit_delay"),
            scheduler=scheduler,
            on_exit=on_exit,
        )
        self.gateway = gateway
        self.config = config
        self.queries = queries or BranchQueries(gateway, config)
        self.operations = operations or GitOperations(gateway, config)
        self.reconciler = reconciler or BranchReconciler(gateway, config, queries=self.queries)
        self.stash_message = config.get("stash_message", DEFAULT_STASH_MESSAGE)

    def _on_enter_setup(self, event: Event) -> Event:
        try:
            self.gateway.run(["rev-parse", "--is-inside-work-tree"])
        except CommandFailure as e:
            logger.error(f"Repository check failed: {e}")
            return Event(E.FAILED, message=MSG_NOT_A_REPOSITORY)

        self.session.repository_info = self.gateway.repository_info()
        logger.info(self.session.repository_info)
        return Event(E.SUCCEEDED, message="Fetching git branches...")

    def _on_enter_loading(self, event: Event) -> Event:
        try:
            orphans = self.reconciler.compute_orphaned_branches()
        except HousekeeperError as e:
            logger.error(f"Reconciliation failed: {e}")
            return Event(E.FAILED, message=f"Error fetching branches: {e}")

        self.session.orphans = orphans
        if not orphans:
            return Event(E.EMPTY, message=MSG_NO_ORPHANS)
        return Event(E.SUCCEEDED, message=f"Found {len(orphans)} local branches not present upstream.")

    def _record_selection(self, event: Event) -> Event:
        selected = []
        for name in event.payload or ():
            if name not in self.session.orphans:
                logger.debug(f"Ignoring selection of unknown branch '{name}'")
                continue
            if name not in selected:
                selected.append(name)

        if not selected:
            return Event(E.EMPTY, message=MSG_NO_SELECTION)

        self.session.selected = tuple(selected)
        return Event(E.SELECT, payload=self.session.selected, message=f"{len(selected)} branches selected.")

    def _on_enter_removing(self, event: Event) -> Event:
        default_branch = self.queries.resolve_default_branch()
        self.session.default_branch = default_branch

        try:
            current = self.queries.get_current_branch()
            if current != default_branch:
                self.session.stashed = self.operations.stash_changes(self.stash_message)
                self._set_log(f"Switching to {default_branch}...")
                self.operations.checkout(default_branch)
                current = default_branch
        except HousekeeperError as e:
            logger.error(f"Could not switch to {default_branch}: {e}")
            return Event(E.FAILED, message=f"Could not switch to {default_branch}: {e}")

        for name in self.session.selected:
            if name == current:
                logger.warning(f"Refusing to delete checked-out branch '{name}'")
                self.session.failed.append((name, "branch is checked out"))
                continue
            self._set_log(f"Deleting {name}...")
            try:
                self.operations.delete_branch(name)
                self.session.deleted.append(name)
            except CommandFailure as e:
                logger.error(f"Failed to delete branch {name}: {e}")
                self.session.failed.append((name, e.stderr or str(e)))

        message = f"🗑️ Deleted {len(self.session.deleted)} branches."
        if self.session.failed:
            failed_names = ", ".join(name for name, _ in self.session.failed)
            message += f" Could not delete: {failed_names}."
        return Event(E.SUCCEEDED, message=message)
