from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.validation import Function, Integer, Validator
from textual.widgets import Button, Input, Label, MarkdownViewer


class ReportInputDialog(ModalScreen[str]):
    """
    Base class for the report viewer's prompts. Shows the subclass's prompt, an
    optional hint describing the values this report accepts, and an input field.
    Dismisses with the entered value if it passes the validator, else with None.
    """

    DEFAULT_CSS = """
    ReportInputDialog {
        align: center middle;
    }

    ReportInputDialog > Vertical {
        background: $panel;
        height: auto;
        width: auto;
        border: thick $primary;
    }

    ReportInputDialog > Vertical > * {
        width: auto;
        height: auto;
    }

    ReportInputDialog Input {
        width: 40;
        margin: 1;
    }

    ReportInputDialog Label {
        margin-left: 2;
    }

    ReportInputDialog #hint {
        color: $text-muted;
    }

    ReportInputDialog #buttons {
        width: 100%;
        align-horizontal: right;
        padding-right: 1;
    }

    ReportInputDialog Button {
        margin-right: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "app.pop_screen", "", show=False),
    ]

    prompt = ""
    placeholder = ""

    def __init__(
            self,
            initial: str = "",
            *,
            hint: str = "",
            validator: Validator | None = None,
    ) -> None:
        super().__init__()
        self.initial = initial
        self.hint = hint
        self.validator = validator or Function(function=lambda s: True)

    def compose(self) -> ComposeResult:
        with Vertical():
            with Vertical(id="input"):
                yield Label(self.prompt, markup=False)
                if self.hint:
                    yield Label(self.hint, id="hint", markup=False)
                yield Input(self.initial, placeholder=self.placeholder, validators=[self.validator])
            with Horizontal(id="buttons"):
                yield Button("OK", id="ok", variant="primary")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one(Input).focus()

    @on(Button.Pressed, "#cancel")
    def cancel_input(self) -> None:
        self.dismiss()

    @on(Input.Submitted)
    @on(Button.Pressed, "#ok")
    def accept_input(self) -> None:
        value = self.query_one(Input).value.strip()
        if value and self.validator.validate(value).is_valid:
            self.dismiss(value)
        else:
            self.dismiss()


class FindDialog(ReportInputDialog):
    prompt = "Find (in any source's line):"
    placeholder = "text to find, ignoring case"


class GotoLineDialog(ReportInputDialog):
    prompt = "Go to line:"
    placeholder = "line number"

    def __init__(self, row_count: int) -> None:
        # line numbers past the end go to the last line
        super().__init__(hint=f"report lines: 1 - {row_count}", validator=Integer(minimum=1))


class GotoTimestampDialog(ReportInputDialog):
    prompt = "Go to timestamp:"
    placeholder = "YYYY-MM-DD HH:MM:SS.fff"

    def __init__(
            self,
            initial: str,
            *,
            first_timestamp: str,
            last_timestamp: str,
            validator: Validator,
    ) -> None:
        super().__init__(
            initial,
            hint=f"report covers: {first_timestamp} - {last_timestamp}",
            validator=validator,
        )


def report_summary(source_names: list[str], row_count: int) -> str:
    """
    Markdown section describing the report being viewed, added to the help/about text.
    """
    sources = "\n".join(f"{i}. `{name}`" for i, name in enumerate(source_names, start=1))
    return f"\n## This report\n\n{row_count} rows, one column per source:\n\n{sources}\n"


class ModalAboutDialog(ModalScreen[type(None)]):
    """
    Modal dialog showing the help/about text, followed by a summary of the report.
    """

    DEFAULT_CSS = """
    ModalAboutDialog {
        align: center middle;
    }

    ModalAboutDialog > Vertical {
        background: $panel;
        height: auto;
        width: auto;
        border: thick $primary;
    }

    ModalAboutDialog MarkdownViewer {
        height: 24;
        width: 76;
    }

    ModalAboutDialog #buttons {
        width: 100%;
        height: auto;
        align-horizontal: center;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "app.pop_screen", "", show=False),
        Binding("enter", "app.pop_screen", "", show=False),
    ]

    def __init__(self, about_text: str, *, source_names: list[str], row_count: int) -> None:
        super().__init__()
        self.content = about_text + report_summary(source_names, row_count)

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer(self.content, show_table_of_contents=False)
            with Horizontal(id="buttons"):
                yield Button("OK", id="ok", variant="primary")

    def on_mount(self) -> None:
        self.query_one(MarkdownViewer).focus()

    @on(Button.Pressed, "#ok")
    def ok_clicked(self) -> None:
        self.dismiss()
