"""Modal dialog for git-housekeeper TUI."""

from typing import Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class Dialog(ModalScreen[bool]):
    """Message box answered with yes/no, or closed when ``confirm`` is off.

    Dismisses with True only for an explicit yes; escape, no and close
    all dismiss with False.
    """

    DEFAULT_CSS = """
    Dialog {
        align: center middle;
        background: $background 60%;
    }

    Dialog > VerticalScroll {
        width: 72;
        max-width: 90%;
        height: auto;
        max-height: 80%;
        border: round $accent;
        background: $panel;
        padding: 0 1;
    }

    Dialog #dialog-buttons {
        height: auto;
        align-horizontal: right;
        margin-top: 1;
    }

    Dialog #dialog-buttons Button {
        margin-left: 1;
    }
    """

    BINDINGS = [
        Binding("y", "answer(True)", "Yes"),
        Binding("n", "answer(False)", "No"),
        Binding("escape", "answer(False)", "Close", show=False),
    ]

    def __init__(self, message: str, confirm: bool = True, yes_variant: str = "error"):
        super().__init__()
        self.message = message
        self.confirm = confirm
        self.yes_variant = yes_variant

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(self.message, id="dialog-message")
            with Horizontal(id="dialog-buttons"):
                if self.confirm:
                    yield Button("Yes", variant=self.yes_variant, id="yes")
                    yield Button("No", id="no")
                else:
                    yield Button("Close", variant="primary", id="close")

    def on_mount(self) -> None:
        self.query_one("#no" if self.confirm else "#close", Button).focus()

    def check_action(self, action: str, parameters: tuple) -> Optional[bool]:
        # y and n only mean something when there is a question
        if action == "answer" and parameters and parameters[0] is True:
            return self.confirm
        return True

    def action_answer(self, answer: bool) -> None:
        self.dismiss(answer and self.confirm)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")
