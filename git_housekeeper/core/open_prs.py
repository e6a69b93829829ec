"""Open-PR picker: list open pull requests, open the chosen one in a browser."""

from typing import Callable, Optional, Union, TYPE_CHECKING

from git_housekeeper.constants import MSG_NO_OPEN_PRS
from git_housekeeper.core.controller import PhaseController, Transition
from git_housekeeper.exceptions import HousekeeperError
from git_housekeeper.logging_config import get_logger
from git_housekeeper.models.workflow import Event, EventKind, OpenPRsPhase, OpenPRsSession

if TYPE_CHECKING:
    from git_housekeeper.config import Config
    from git_housekeeper.core.merge import PullRequestLister

logger = get_logger(__name__)

P = OpenPRsPhase
E = EventKind

OPEN_PRS_TRANSITIONS = {
    (P.INIT, E.START): Transition(P.LOADING),
    (P.LOADING, E.SUCCEEDED): Transition(P.SELECTION),
    (P.LOADING, E.EMPTY): Transition(P.ERROR),
    (P.LOADING, E.FAILED): Transition(P.ERROR),
    (P.SELECTION, E.SELECT): Transition(P.DONE),
}


class OpenPRsFlow(PhaseController):
    NAME = "PRs"
    TRANSITIONS = OPEN_PRS_TRANSITIONS
    ACTIONS = {
        (P.SELECTION, E.SELECT): "_open_selected",
    }
    TERMINAL_PHASES = frozenset({P.DONE, P.ERROR, P.CANCELLED})
    CANCELLED_PHASE = P.CANCELLED
    ERROR_PHASE = P.ERROR

    def __init__(
        self,
        pr_source: "PullRequestLister",
        config: Union["Config", dict],
        opener: Callable[[str], None],
        scheduler=None,
        on_exit=None,
    ):
        """
        Args:
            pr_source: Lists open pull requests
            config: Configuration
            opener: Opens a URL, e.g. in the default browser
        """
        super().__init__(
            OpenPRsSession(),
            exit_delay=config.get("exit_delay", 1.5),
            error_exit_delay=config.get("error_exit_delay"),
            scheduler=scheduler,
            on_exit=on_exit,
        )
        self.pr_source = pr_source
        self.opener = opener

    def _on_enter_loading(self, event: Event) -> Event:
        self._set_log("📡 Fetching open PRs from GitHub...")
        try:
            prs = self.pr_source.list_pull_requests(state="open")
        except HousekeeperError as e:
            logger.error(f"Fetching pull requests failed: {e}")
            return Event(E.FAILED, message=f"Error fetching open PRs: {e}")

        if not prs:
            return Event(E.EMPTY, message=MSG_NO_OPEN_PRS)

        self.session.items = tuple(prs)
        return Event(E.SUCCEEDED, message=f"Found {len(prs)} open PRs.")

    def _open_selected(self, event: Event) -> Optional[Event]:
        numbers = set(event.payload or ())
        pr = next((item for item in self.session.items if item.number in numbers), None)
        if pr is None or not pr.url:
            logger.debug(f"No openable pull request in selection {event.payload!r}")
            return Event(E.EMPTY)

        self.opener(pr.url)
        self.session.opened = pr
        return Event(E.SELECT, payload=event.payload, message=f"Opened #{pr.number} in the browser.")
