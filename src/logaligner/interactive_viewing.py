import asyncio
from datetime import datetime
from functools import partial
import textwrap
import types

import littletable as lt
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Footer

from logaligner.tui.dialogs import FindDialog, GotoLineDialog, GotoTimestampDialog, ModalAboutDialog
from logaligner.tui.validators import TimestampValidator


def _max_line_count(sseq: list[str]) -> int:
    """
    The number of lines for this row is the maximum number of newlines
    in any value, plus 1.
    """
    return max(s.count("\n") for s in sseq) + 1


def _make_cells(values: list[str], right_justify_first: bool = False) -> list[Text]:
    cells = [Text(value) for value in values]
    if right_justify_first:
        cells[0].justify = "right"
    return cells


class InteractiveReportViewerApp(App):
    """
    Class to display an aligned report using textual TUI.
    """
    TITLE = "logaligner"

    BINDINGS = [
        Binding(key="q", action="quit", description="Quit"),
        Binding(key="ctrl+d", action="toggle_dark", description="Toggle Dark Mode"),
        Binding(key="f", action="find", description="Find"),
        Binding(key="n", action="find_next", description="Next"),
        Binding(key="p", action="find_prev", description="Prev"),
        Binding(key="l", action="goto_line", description="Go to line"),
        Binding(key="t", action="goto_timestamp", description="Go to timestamp"),
        Binding(key="h", action="help_about", description="Help/About"),
    ]

    def __init__(self, *args, **kwargs):
        from logaligner.logaligner import parse_time_using, VALID_INPUT_TIME_FORMATS

        super().__init__(*args, **kwargs)
        self.log_file_names: list[str] = []
        self.field_names: list[str] = []
        self.report_table: lt.Table = None  # noqa
        self.display_width: int = 0
        self.show_line_numbers: bool = False
        self.current_search_string: str = ""
        self.current_goto_timestamp_string: str = ""
        self.timestamp_validator = TimestampValidator(
            timestamp_parser=partial(parse_time_using, formats=VALID_INPUT_TIME_FORMATS),
        )

    def config(
            self,
            *,
            log_file_names: list[str],
            show_line_numbers: bool,
            report_table: lt.Table,
            field_names: list[str],
            display_width: int = 0,
    ) -> None:
        self.log_file_names = log_file_names
        self.show_line_numbers = show_line_numbers
        self.report_table = report_table
        self.field_names = field_names
        self.display_width = display_width

    def compose(self) -> ComposeResult:
        yield DataTable()
        yield Footer()

    def on_mount(self) -> None:
        self.load_data()

    @work
    async def load_data(self):
        fixed_cols = 2 if self.show_line_numbers else 1

        display_table = self.query_one(DataTable)
        display_table.cursor_type = "row"
        display_table.zebra_stripes = True
        display_table.fixed_columns = fixed_cols
        display_table.add_columns(*(Text(name) for name in self.field_names))

        # guesstimate how much width to allocate to each file
        screen_width = self.display_width or self.size.width
        timestamp_allowance = 25
        line_number_allowance = 8 if self.show_line_numbers else 0
        screen_width_for_files = screen_width - timestamp_allowance - line_number_allowance
        width_per_file = max(int(screen_width_for_files * 0.9 // len(self.log_file_names)), 8)

        row_ns: types.SimpleNamespace
        for i, row_ns in enumerate(self.report_table, start=1):
            if i % 10 == 0:
                # give other UI tasks a chance to work
                await asyncio.sleep(0)
            row_values = [getattr(row_ns, fname) for fname in self.field_names]

            # wrap individual cells (except never wrap the timestamp or leading line number)
            wrapped_row_values = row_values[:fixed_cols]
            for cell_value in row_values[fixed_cols:]:
                if len(cell_value) > width_per_file:
                    cell_value = "\n ".join(textwrap.wrap(cell_value, width_per_file - 1))
                wrapped_row_values.append(cell_value)

            # log lines are shown as plain Text, so nothing in them is read as markup
            display_table.add_row(
                *_make_cells(wrapped_row_values, right_justify_first=self.show_line_numbers),
                height=_max_line_count(wrapped_row_values),
            )

    #
    # methods to support go to find/next/prev search functions
    #

    def action_find(self) -> None:
        self.app.push_screen(
            FindDialog(self.current_search_string),
            self.save_search_string_and_move_to_next
        )

    def action_find_next(self) -> None:
        self.move_to_next_search_line()

    def action_find_prev(self) -> None:
        self.move_to_prev_search_line()

    def get_current_cursor_line_index(self) -> int:
        dt: DataTable = self.query_one(DataTable)
        return dt.cursor_row

    def get_current_cursor_timestamp(self) -> datetime:
        current_rec = self.report_table[self.get_current_cursor_line_index()]
        return self.timestamp_validator.convert_time_str(current_rec.timestamp)

    def save_search_string_and_move_to_next(self, search_str) -> None:
        if not search_str:
            return

        self.current_search_string = search_str
        self.move_to_next_search_line()

    def _move_to_relative_search_line(self, move_delta: int, limit: int) -> None:
        search_string = self.current_search_string.lower()

        cur_line_number = self.get_current_cursor_line_index() + move_delta
        while cur_line_number != limit:
            row = self.report_table[cur_line_number]

            # see if any log line at this row contains the search string
            if any(
                    search_string in getattr(row, fname).lower()
                    for fname in self.log_file_names
            ):
                self.move_cursor_to_line_number(cur_line_number)
                break

            # move on to the next line
            cur_line_number += move_delta
        else:
            self.bell()

    def move_to_next_search_line(self) -> None:
        if not self.current_search_string or not len(self.report_table):
            self.bell()
            return
        self._move_to_relative_search_line(1, len(self.report_table))

    def move_to_prev_search_line(self) -> None:
        if not self.current_search_string or not len(self.report_table):
            self.bell()
            return
        self._move_to_relative_search_line(-1, -1)

    #
    # methods to support go to line function
    #

    def action_goto_line(self) -> None:
        self.app.push_screen(
            GotoLineDialog(len(self.report_table)),
            self.move_cursor_to_line_number_1_based
        )

    def move_cursor_to_line_number(self, line_number: int) -> None:
        if line_number >= len(self.report_table):
            line_number = len(self.report_table) - 1
        if line_number < 0:
            line_number = 0

        dt_widget: DataTable = self.query_one(DataTable)
        dt_widget.move_cursor(row=line_number, animate=False)

    def move_cursor_to_line_number_1_based(self, line_number_str: str) -> None:
        if not line_number_str:
            return
        # convert 1-based line number to 0-based
        line_number = int(line_number_str) - 1
        self.move_cursor_to_line_number(line_number)

    #
    # methods to support go to timestamp function
    #

    def action_goto_timestamp(self) -> None:
        if not len(self.report_table):
            self.bell()
            return

        self.app.push_screen(
            GotoTimestampDialog(
                self.current_goto_timestamp_string,
                first_timestamp=self.report_table[0].timestamp,
                last_timestamp=self.report_table[-1].timestamp,
                validator=self.timestamp_validator,
            ),
            self.move_cursor_to_timestamp
        )

    def move_cursor_to_timestamp(self, timestamp_str: str) -> None:
        if not timestamp_str or not len(self.report_table):
            return
        self.current_goto_timestamp_string = timestamp_str

        # normalize input string to timestamps in report table
        target_timestamp = self.timestamp_validator.convert_time_str(timestamp_str)
        target_timestamp_str = target_timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:23]

        current_row_time = self.get_current_cursor_timestamp()
        cur_line_number = self.get_current_cursor_line_index()

        if current_row_time == target_timestamp:
            return

        if current_row_time < target_timestamp:
            while cur_line_number < len(self.report_table) - 1:
                if self.report_table[cur_line_number].timestamp >= target_timestamp_str:
                    break
                cur_line_number += 1
        else:
            while cur_line_number > 0:
                if self.report_table[cur_line_number].timestamp <= target_timestamp_str:
                    break
                cur_line_number -= 1

        self.move_cursor_to_line_number(cur_line_number)

    #
    # methods to support help/about
    #

    def action_help_about(self) -> None:
        from logaligner.about import text

        self.app.push_screen(
            ModalAboutDialog(
                text,
                source_names=self.log_file_names,
                row_count=len(self.report_table),
            )
        )
