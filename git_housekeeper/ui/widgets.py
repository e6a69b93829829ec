"""Custom widgets for git-housekeeper TUI."""

from textual.app import ComposeResult, RenderResult
from textual.events import Click
from textual.widgets import Header, Static
from textual.widgets._header import HeaderIcon, HeaderTitle, HeaderClockSpace
from rich.text import Text

from git_housekeeper.__version__ import __version__
from git_housekeeper.constants import MSG_GO_BACK


class VersionDisplay(HeaderClockSpace):
    """Custom widget to display version in place of clock."""

    DEFAULT_CSS = """
    VersionDisplay {
        width: auto;
        dock: right;
        padding: 0 1;
        background: $foreground 5%;
        color: $text;
        text-align: center;
        text-opacity: 85%;
    }
    """

    def render(self) -> RenderResult:
        return Text(f"v{__version__}")


class NonExpandingHeader(Header):
    """Header that ignores clicks and shows the version instead of a clock."""

    def compose(self) -> ComposeResult:
        yield HeaderIcon().data_bind(Header.icon)
        yield HeaderTitle()
        yield VersionDisplay() if self._show_clock else HeaderClockSpace()

    def on_click(self, event: Click) -> None:
        event.stop()


class StatusLine(Static):
    """Latest human-readable status of a workflow."""

    DEFAULT_CSS = """
    StatusLine {
        dock: bottom;
        height: auto;
        background: $panel;
        padding: 1;
    }

    StatusLine.-error {
        color: $error;
    }
    """

    def show_status(self, message: str, is_error: bool = False) -> None:
        text = Text(message or "")
        if is_error:
            text.append(f"\n{MSG_GO_BACK}", style="dim")
        self.set_class(is_error, "-error")
        self.update(text)
