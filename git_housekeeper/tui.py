"""Interactive TUI for git-housekeeper using Textual."""

import asyncio
from typing import Iterable, Optional, Union

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widget import Widget
from textual.widgets import Footer, OptionList, SelectionList, Static
from textual.widgets.option_list import Option

from .__version__ import __version__
from .config import Config
from .constants import MENU_ACTIONS
from .core import MergeOrchestrator, OpenPRsFlow, PhaseController, PruneFlow
from .formatters import (
    format_deletion_confirmation_items,
    format_deletion_summary,
    format_merge_prompt,
    format_orphan_label,
    format_pr_label,
)
from .logging_config import get_logger
from .models.workflow import Event, OpenPRsPhase, PrunePhase, WorkflowPhase, WorkflowSession
from .services.git import BranchQueries, GitGateway, PullRequestSource
from .ui.screens import Dialog
from .ui.widgets import NonExpandingHeader, StatusLine

logger = get_logger(__name__)


class MenuScreen(Screen):
    """Top-level action picker."""

    BINDINGS = [
        Binding("escape", "app.quit", "Quit", show=False),
    ]

    def compose(self) -> ComposeResult:
        yield NonExpandingHeader(show_clock=True, icon="")
        yield Static("What would you like to do?", id="menu-title")
        yield OptionList(
            *[
                Option(Text.assemble((action.label, "bold"), (f"  {action.hint}", "dim")), id=action.key)
                for action in MENU_ACTIONS
            ],
            id="menu",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#menu", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.app.start_action(event.option.id)


class FlowScreen(Screen):
    """Screen driving one workflow controller.

    Controller calls run in worker threads; every view update is marshalled
    back onto the UI thread with ``call_from_thread``.
    """

    FLOW_TITLE = ""
    BINDINGS = [
        Binding("escape", "cancel", "Back"),
    ]

    def __init__(self, gateway: GitGateway, config: Config):
        super().__init__()
        self.gateway = gateway
        self.config = config
        self.controller: PhaseController = self.build_controller()
        self.controller.add_listener(self._on_session_changed)
        self._rendered_key = None

    def build_controller(self) -> PhaseController:
        raise NotImplementedError

    def compose(self) -> ComposeResult:
        yield NonExpandingHeader(show_clock=True, icon="")
        with Vertical(id="flow-body"):
            yield from self.compose_body()
        yield StatusLine(id="status")
        yield Footer()

    def compose_body(self) -> Iterable[Widget]:
        return ()

    def on_mount(self) -> None:
        self.sub_title = self.FLOW_TITLE
        self._render_session()
        self.advance(Event.start())

    def on_unmount(self) -> None:
        self.controller.cancel_pending_exit()
        if not self.controller.is_terminal:
            self.controller.request_cancel()

    @work(thread=False)
    async def advance(self, event: Event) -> None:
        """Feed an event to the controller without blocking the UI."""
        await asyncio.to_thread(self.controller.advance, event)

    def _on_session_changed(self, session: WorkflowSession) -> None:
        self.app.call_from_thread(self._render_session)

    def _on_flow_exit(self, phase) -> None:
        self.app.call_from_thread(self.finish, phase)

    def _render_session(self) -> None:
        if not self.is_mounted:
            return
        session = self.controller.session
        self.query_one(StatusLine).show_status(session.log, is_error=session.phase.value == "error")

        key = (session.phase, session.cursor)
        first_visit = key != self._rendered_key
        self._rendered_key = key
        self.render_phase(session, first_visit)

    def render_phase(self, session: WorkflowSession, first_visit: bool) -> None:
        """Update the body for the current phase; ``first_visit`` is True once per (phase, cursor)."""

    def action_cancel(self) -> None:
        if self.controller.is_terminal:
            self.controller.cancel_pending_exit()
            self.app.leave_flow()
            return
        self.controller.request_cancel()
        self.advance(Event.cancel())

    def finish(self, phase) -> None:
        """Leave the screen once a terminal phase has been shown long enough."""
        if phase.value == "done":
            self.app.exit(return_code=0)
        elif phase.value == "error":
            self.app.exit(return_code=1)
        else:
            self.app.leave_flow()


class PruneScreen(FlowScreen):
    FLOW_TITLE = "Prune branches"
    BINDINGS = [
        Binding("enter", "submit", "Delete selected", priority=True),
        Binding("i", "show_repository", "Repository"),
    ]

    def build_controller(self) -> PruneFlow:
        return PruneFlow(self.gateway, self.config, on_exit=self._on_flow_exit)

    def compose_body(self) -> Iterable[Widget]:
        yield Static("Select branches to delete (space to toggle, enter to confirm):", id="prompt")
        yield SelectionList[str](id="branches")

    def render_phase(self, session, first_visit: bool) -> None:
        phase = session.phase
        branches = self.query_one("#branches", SelectionList)
        prompt = self.query_one("#prompt", Static)

        if phase == PrunePhase.SELECTION and first_visit:
            if branches.option_count == 0:
                branches.add_options(
                    (format_orphan_label(branch), branch.name) for branch in session.orphans.sorted()
                )
            branches.focus()
        elif phase == PrunePhase.CONFIRM and first_visit:
            items = format_deletion_confirmation_items(session.selected, session.orphans)
            self.app.push_screen(
                Dialog(f"Delete these branches?\n\n{items}"),
                self._handle_delete_confirmation,
            )
        elif phase == PrunePhase.DONE and first_visit and (session.deleted or session.failed):
            prompt.update("\n".join(format_deletion_summary(session.deleted, session.failed)))

        branches.display = phase in (PrunePhase.SELECTION, PrunePhase.CONFIRM)
        prompt.display = branches.display or phase == PrunePhase.DONE

    def action_submit(self) -> None:
        if self.controller.phase != PrunePhase.SELECTION:
            return
        selected = self.query_one("#branches", SelectionList).selected
        self.advance(Event.select(selected))

    def action_show_repository(self) -> None:
        info = self.controller.session.repository_info
        if info:
            self.app.push_screen(Dialog(info, confirm=False))

    def _handle_delete_confirmation(self, confirmed: Optional[bool]) -> None:
        self.advance(Event.accept() if confirmed else Event.decline())


class DependabotScreen(FlowScreen):
    FLOW_TITLE = "Merge dependency PRs"
    BINDINGS = [
        Binding("enter", "resume", "Continue merge", priority=True),
    ]

    def build_controller(self) -> MergeOrchestrator:
        queries = BranchQueries(self.gateway, self.config)
        self.pr_source = PullRequestSource(self.config, remote_url_provider=queries.get_remote_url)
        return MergeOrchestrator(self.gateway, self.pr_source, self.config, on_exit=self._on_flow_exit)

    def compose_body(self) -> Iterable[Widget]:
        yield Static(id="current-pr")
        yield Static(id="merge-progress")

    def on_unmount(self) -> None:
        super().on_unmount()
        self.pr_source.close()

    def render_phase(self, session, first_visit: bool) -> None:
        phase = session.phase
        pr = session.current_item
        staging = self.config.staging_branch

        if pr is not None:
            self.query_one("#current-pr", Static).update(
                f"PR {session.cursor + 1}/{len(session.items)}: {format_pr_label(pr)}"
            )
        else:
            self.query_one("#current-pr", Static).update("")
        if session.items:
            self.query_one("#merge-progress", Static).update(
                Text(f"Merged {len(session.merged)} | Skipped {len(session.skipped)}", style="dim")
            )

        if not first_visit:
            return
        if phase == WorkflowPhase.CONFIRM:
            self.app.push_screen(
                Dialog(format_merge_prompt(pr, staging), yes_variant="success"),
                self._handle_answer,
            )
        elif phase == WorkflowPhase.PUSH_CONFIRMATION:
            self.app.push_screen(
                Dialog(f"Push {staging} to {self.config.remote_name}?", yes_variant="success"),
                self._handle_answer,
            )

    def action_resume(self) -> None:
        if self.controller.phase == WorkflowPhase.CONFLICT:
            self.advance(Event.resume())

    def _handle_answer(self, confirmed: Optional[bool]) -> None:
        self.advance(Event.accept() if confirmed else Event.decline())


class OpenPRsScreen(FlowScreen):
    FLOW_TITLE = "Open a pull request"

    def build_controller(self) -> OpenPRsFlow:
        queries = BranchQueries(self.gateway, self.config)
        self.pr_source = PullRequestSource(self.config, remote_url_provider=queries.get_remote_url)
        return OpenPRsFlow(self.pr_source, self.config, opener=self._open_url, on_exit=self._on_flow_exit)

    def compose_body(self) -> Iterable[Widget]:
        yield OptionList(id="prs")

    def on_unmount(self) -> None:
        super().on_unmount()
        self.pr_source.close()

    def render_phase(self, session, first_visit: bool) -> None:
        prs = self.query_one("#prs", OptionList)
        if session.phase == OpenPRsPhase.SELECTION and first_visit:
            prs.clear_options()
            prs.add_options([Option(format_pr_label(pr), id=str(pr.number)) for pr in session.items])
            prs.focus()
        prs.display = session.phase == OpenPRsPhase.SELECTION

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.advance(Event.select([int(event.option.id)]))

    def _open_url(self, url: str) -> None:
        self.app.call_from_thread(self.app.open_url, url)


FLOW_SCREENS = {
    "prune": PruneScreen,
    "dependabot": DependabotScreen,
    "prs": OpenPRsScreen,
}


class HousekeeperApp(App):
    """Interactive TUI for git-housekeeper."""

    TITLE = "Git Housekeeper"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        background: $surface;
    }

    #menu-title, #prompt {
        padding: 1 2;
    }

    #flow-body {
        height: 1fr;
        padding: 0 1;
    }

    #current-pr {
        padding: 1 1 0 1;
        text-style: bold;
    }

    #merge-progress {
        padding: 0 1;
    }

    SelectionList, OptionList {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, gateway: GitGateway, config: Union[Config, dict], action: Optional[str] = None):
        super().__init__()
        self.gateway = gateway
        self.config = config if isinstance(config, Config) else Config.from_dict(config)
        self.initial_action = action

    def on_mount(self) -> None:
        if self.initial_action:
            self.start_action(self.initial_action)
        else:
            self.push_screen(MenuScreen())

    def start_action(self, key: str) -> None:
        screen_class = FLOW_SCREENS.get(key)
        if screen_class is None:
            logger.error(f"Unknown action: {key}")
            self.notify(f"Unknown action: {key}", severity="error")
            return
        logger.debug(f"Starting {key}")
        self.push_screen(screen_class(self.gateway, self.config))

    def leave_flow(self) -> None:
        """Return to the menu, or quit when launched straight into an action."""
        if self.initial_action:
            self.exit(return_code=0)
        else:
            self.pop_screen()
