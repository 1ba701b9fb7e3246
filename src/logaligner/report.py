from __future__ import annotations

from collections.abc import Generator, Iterable
from datetime import datetime
from pathlib import Path
from typing import NamedTuple, TextIO

import littletable as lt
from rich.markup import escape

from .source_registry import CapturedLine


def format_timestamp(dt: datetime) -> str:
    """
    format a datetime to microseconds, truncate to just millis
    """
    return dt.strftime("%Y-%m-%d %H:%M:%S.%f")[:23]


class Row(NamedTuple):
    timestamp: datetime
    cells: tuple[CapturedLine, ...]

    @property
    def texts(self) -> list[str]:
        return [cell.text for cell in self.cells]


class Report:
    """
    The aligned view of all sources - headers are the source ids in registration order,
    and each row holds one captured line per source, in the same order.
    """
    def __init__(
            self,
            headers: list[str],
            rows: list[Row],
            window: tuple[datetime, datetime] | None = None,
    ):
        self.headers = list(headers)
        self.rows = rows
        self.window = window

    def as_text_rows(self) -> list[list[str]]:
        return [row.texts for row in self.rows]

    def __len__(self):
        return len(self.rows)

    def __repr__(self):
        return f"{type(self).__name__}(headers={self.headers!r}, {len(self.rows)} rows)"


def leading_fieldnames(*, line_numbers: bool = False, timestamps: bool = False) -> list[str]:
    leading = []
    if line_numbers:
        leading.append("line")
    if timestamps:
        leading.append("timestamp")
    return leading


def check_source_names(
        source_ids: Iterable[str],
        *,
        line_numbers: bool = False,
        timestamps: bool = False,
) -> None:
    """
    Raise ValueError if a source id is the same as the name of one of the added
    leading columns, since they would share a field in the report table.
    """
    source_ids = set(source_ids)
    for name in leading_fieldnames(line_numbers=line_numbers, timestamps=timestamps):
        if name in source_ids:
            raise ValueError(
                f"source {name!r} has the same name as the {name!r} column"
                f" - give its path (such as './{name}'), or omit the {name!r} column"
            )


class ReportFormatter:
    """
    Renders a Report using a littletable Table, with one field per source, optionally
    preceded by line number and row timestamp fields.
    """
    def __init__(self, report: Report, *, line_numbers: bool = False, timestamps: bool = False):
        check_source_names(report.headers, line_numbers=line_numbers, timestamps=timestamps)
        self.report = report
        self.line_numbers = line_numbers
        self.timestamps = timestamps

    @property
    def fieldnames(self) -> list[str]:
        leading = leading_fieldnames(line_numbers=self.line_numbers, timestamps=self.timestamps)
        return [*leading, *self.report.headers]

    def _row_dicts(self) -> Generator[dict[str, str], None, None]:
        for line_number, row in enumerate(self.report.rows, start=1):
            row_dict = {}
            if self.line_numbers:
                row_dict["line"] = str(line_number)
            if self.timestamps:
                row_dict["timestamp"] = format_timestamp(row.timestamp)
            row_dict.update(zip(self.report.headers, row.texts))
            yield row_dict

    def as_table(self) -> lt.Table:
        table = lt.Table()
        table.insert_many(self._row_dicts())
        return table

    def export_csv(self, dest: str | Path | TextIO) -> None:
        self.as_table().csv_export(dest, fieldnames=self.fieldnames)

    def present(self, **kwargs) -> None:
        # log lines are opaque text - escape them so that rich does not interpret
        # anything that looks like console markup
        table = lt.Table()
        table.insert_many(
            {name: escape(value) for name, value in row_dict.items()}
            for row_dict in self._row_dicts()
        )

        # give explicit headers, else littletable title-cases lowercase field names
        fields = [
            (name, {"header": escape(name), "justify": "right" if name == "line" else "left"})
            for name in self.fieldnames
        ]

        # present the table - using a rich Table, the columns will auto-size to content and terminal
        # width
        table.present(fields=fields, **kwargs)
