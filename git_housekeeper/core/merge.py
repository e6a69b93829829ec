"""Merge orchestrator for dependency-update pull requests.

Walks the open dependency-update PRs one at a time, merging each accepted
one into the staging branch with ``--no-ff``. A conflict pauses the walk
until the operator resolves it outside the tool and asks to resume.
"""

from typing import Optional, Protocol, List, Union, TYPE_CHECKING

from git_housekeeper.config import DEFAULT_STASH_MESSAGE
from git_housekeeper.constants import MSG_NO_DEPENDENCY_PRS
from git_housekeeper.core.controller import NEXT_ITEM, PhaseController, Transition
from git_housekeeper.exceptions import HousekeeperError
from git_housekeeper.logging_config import get_logger
from git_housekeeper.models.pull_request import PRRef
from git_housekeeper.models.workflow import Event, EventKind, MergeSession, WorkflowPhase
from git_housekeeper.services.git.operations import GitOperations
from git_housekeeper.services.pr_filter import (
    DEFAULT_BRANCH_PREFIXES,
    DEFAULT_TITLE_PATTERN,
    filter_dependency_updates,
)

if TYPE_CHECKING:
    from git_housekeeper.config import Config
    from git_housekeeper.services.git.gateway import GitGateway

logger = get_logger(__name__)

P = WorkflowPhase
E = EventKind


class PullRequestLister(Protocol):
    def list_pull_requests(self, base: Optional[str] = None, state: str = "open") -> List[PRRef]:
        ...


MERGE_TRANSITIONS = {
    (P.INIT, E.START): Transition(P.SETUP),
    (P.SETUP, E.SUCCEEDED): Transition(P.LOADING),
    (P.SETUP, E.FAILED): Transition(P.ERROR),
    (P.LOADING, E.SUCCEEDED): Transition(P.CONFIRM),
    (P.LOADING, E.EMPTY): Transition(P.DONE),
    (P.LOADING, E.FAILED): Transition(P.ERROR),
    (P.CONFIRM, E.ACCEPT): Transition(P.MERGING),
    (P.CONFIRM, E.DECLINE): Transition(NEXT_ITEM, advance_cursor=True),
    (P.MERGING, E.SUCCEEDED): Transition(NEXT_ITEM, advance_cursor=True),
    (P.MERGING, E.FAILED): Transition(P.CONFLICT),
    (P.CONFLICT, E.SUCCEEDED): Transition(NEXT_ITEM, advance_cursor=True),
    (P.CONFLICT, E.FAILED): Transition(P.CONFLICT),
    (P.PUSH_CONFIRMATION, E.ACCEPT): Transition(P.DONE),
    (P.PUSH_CONFIRMATION, E.DECLINE): Transition(P.DONE),
}


class MergeOrchestrator(PhaseController):
    """Merges accepted dependency-update PRs into the staging branch."""

    NAME = "Merge"
    TRANSITIONS = MERGE_TRANSITIONS
    ACTIONS = {
        (P.CONFIRM, E.DECLINE): "_skip_item",
        (P.CONFLICT, E.RESUME): "_resume_merge",
        (P.PUSH_CONFIRMATION, E.ACCEPT): "_push",
        (P.PUSH_CONFIRMATION, E.DECLINE): "_skip_push",
    }
    TERMINAL_PHASES = frozenset({P.DONE, P.ERROR, P.CANCELLED})
    CANCELLED_PHASE = P.CANCELLED
    ERROR_PHASE = P.ERROR
    NEXT_ITEM_PHASE = P.CONFIRM
    EXHAUSTED_PHASE = P.PUSH_CONFIRMATION

    def __init__(
        self,
        gateway: "GitGateway",
        pr_source: PullRequestLister,
        config: Union["Config", dict],
        scheduler=None,
        on_exit=None,
        operations: Optional[GitOperations] = None,
    ):
        super().__init__(
            MergeSession(),
            exit_delay=config.get("exit_delay", 1.5),
            error_exit_delay=config.get("error_exit_delay"),
            scheduler=scheduler,
            on_exit=on_exit,
        )
        self.config = config
        self.pr_source = pr_source
        self.operations = operations or GitOperations(gateway, config)
        self.staging_branch = config.get("staging_branch", "staging")
        self.pr_base_branch = config.get("pr_base_branch", "main")
        self.stash_message = config.get("stash_message", DEFAULT_STASH_MESSAGE)

    @property
    def current_item(self) -> Optional[PRRef]:
        return self.session.current_item

    def _on_enter_setup(self, event: Event) -> Event:
        staging = self.staging_branch
        try:
            if self.operations.stash_changes(self.stash_message):
                self._set_log("📦 Stashed uncommitted changes.")

            self._set_log(f"🔁 Checking out {staging}...")
            self.operations.checkout(staging)

            self._set_log(f"⬇️ Pulling latest {staging}...")
            self.operations.pull(staging)
        except HousekeeperError as e:
            logger.error(f"Setup failed: {e}")
            return Event(E.FAILED, message=f"Error during setup: {e}")

        return Event(E.SUCCEEDED, message=f"🔁 {staging} is up to date.")

    def _on_enter_loading(self, event: Event) -> Event:
        self._set_log("📡 Fetching open PRs from GitHub...")
        try:
            prs = self.pr_source.list_pull_requests(base=self.pr_base_branch, state="open")
        except HousekeeperError as e:
            logger.error(f"Fetching pull requests failed: {e}")
            return Event(E.FAILED, message=f"Error fetching PRs: {e}")

        items = filter_dependency_updates(
            prs,
            title_pattern=self.config.get("dependency_title_pattern", DEFAULT_TITLE_PATTERN),
            branch_prefixes=self.config.get("dependency_branch_prefixes", DEFAULT_BRANCH_PREFIXES),
        )
        logger.info(f"{len(items)} of {len(prs)} open PRs are dependency updates")
        if not items:
            return Event(E.EMPTY, message=MSG_NO_DEPENDENCY_PRS)

        self.session.items = tuple(items)
        return Event(E.SUCCEEDED, message=f"Found {len(items)} dependency-update PRs.")

    def _on_enter_merging(self, event: Event) -> Event:
        pr = self.current_item
        head = pr.head_ref_name
        try:
            self._set_log(f"📥 Fetching {head}...")
            self.operations.fetch_branch(head)

            self._set_log(f"🔀 Merging {head} into {self.staging_branch}...")
            self.operations.merge_no_ff(head)
        except HousekeeperError as e:
            logger.warning(f"Merge of #{pr.number} stopped: {e}")
            return Event(
                E.FAILED,
                message=f"❌ Merge conflict with {head}. Resolve it manually, then press Enter to continue.",
            )

        self.session.merged.append(pr)
        return Event(E.SUCCEEDED, message=f"✅ Merged {head} into {self.staging_branch}.")

    def _resume_merge(self, event: Event) -> Event:
        pr = self.current_item
        head = pr.head_ref_name
        self._set_log(f"Continuing merge of {head}...")
        try:
            self.operations.continue_merge(head)
        except HousekeeperError as e:
            logger.warning(f"Merge of #{pr.number} still unresolved: {e}")
            return Event(
                E.FAILED,
                message=f"Merge of {head} is not finished. Resolve all conflicts, then press Enter again.",
            )

        self.session.merged.append(pr)
        return Event(E.SUCCEEDED, message=f"✅ Resolved and merged {head}.")

    def _skip_item(self, event: Event) -> Event:
        pr = self.current_item
        self.session.skipped.append(pr)
        logger.info(f"Skipped #{pr.number} ({pr.head_ref_name})")
        return Event(E.DECLINE, message=f"⏭️ Skipped {pr.head_ref_name}.")

    def _push(self, event: Event) -> Event:
        self._set_log(f"🚀 Pushing {self.staging_branch}...")
        try:
            self.operations.push(self.staging_branch)
        except HousekeeperError as e:
            logger.error(f"Push failed: {e}")
            return Event(E.ACCEPT, message=f"Error pushing {self.staging_branch}: {e}")

        self.session.pushed = True
        return Event(E.ACCEPT, message=f"🚀 Pushed {self.staging_branch} to {self.operations.remote_name}.")

    def _skip_push(self, event: Event) -> Event:
        return Event(E.DECLINE, message=f"💾 Skipped push. {self.staging_branch} is updated locally.")
