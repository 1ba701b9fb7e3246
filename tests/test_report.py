import csv
import io

import pytest

from logaligner.report import Report, ReportFormatter, Row, check_source_names, format_timestamp
from logaligner.source_registry import CapturedLine

from .logaligner_testing import at


@pytest.fixture
def report() -> Report:
    a1, a2 = CapturedLine("a1", at(0)), CapturedLine("a2, with a comma", at(1200))
    b1 = CapturedLine('b1 "quoted"', at(300))
    return Report(
        headers=["a.log", "b.log"],
        rows=[
            Row(at(300), (a1, b1)),
            Row(at(1300), (a2, b1)),
        ],
        window=(at(300), at(1200)),
    )


def read_csv(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_format_timestamp():
    assert format_timestamp(at(1234)) == "2023-07-14 08:00:01.234"


def test_as_text_rows(report):
    assert report.as_text_rows() == [
        ["a1", 'b1 "quoted"'],
        ["a2, with a comma", 'b1 "quoted"'],
    ]
    assert len(report) == 2


@pytest.mark.parametrize(
    "line_numbers,timestamps,expected_fields",
    [
        (False, False, ["a.log", "b.log"]),
        (True, False, ["line", "a.log", "b.log"]),
        (False, True, ["timestamp", "a.log", "b.log"]),
        (True, True, ["line", "timestamp", "a.log", "b.log"]),
    ]
)
def test_fieldnames(report, line_numbers, timestamps, expected_fields):
    formatter = ReportFormatter(report, line_numbers=line_numbers, timestamps=timestamps)
    assert formatter.fieldnames == expected_fields


def test_as_table(report):
    table = ReportFormatter(report, line_numbers=True, timestamps=True).as_table()

    assert len(table) == 2
    assert [rec.line for rec in table] == ["1", "2"]
    assert [rec.timestamp for rec in table] == ["2023-07-14 08:00:00.300", "2023-07-14 08:00:01.300"]
    assert [getattr(rec, "a.log") for rec in table] == ["a1", "a2, with a comma"]


def test_export_csv_keeps_header_and_row_order(report, tmp_path):
    csv_path = tmp_path / "report.csv"

    ReportFormatter(report).export_csv(str(csv_path))

    assert read_csv(csv_path.read_text(encoding="utf-8")) == [
        ["a.log", "b.log"],
        ["a1", 'b1 "quoted"'],
        ["a2, with a comma", 'b1 "quoted"'],
    ]


def test_export_csv_with_leading_columns(report):
    out = io.StringIO()

    ReportFormatter(report, line_numbers=True, timestamps=True).export_csv(out)

    assert read_csv(out.getvalue())[:2] == [
        ["line", "timestamp", "a.log", "b.log"],
        ["1", "2023-07-14 08:00:00.300", "a1", 'b1 "quoted"'],
    ]


def test_present_shows_every_cell(report, capsys, monkeypatch):
    # use a wide virtual console to suppress wrapping of columns
    monkeypatch.setenv("COLUMNS", "300")

    ReportFormatter(report).present()

    output = capsys.readouterr().out
    for text in ("a.log", "b.log", "a1", "a2, with a comma", 'b1 "quoted"'):
        assert text in output


def test_present_shows_source_names_unchanged(capsys, monkeypatch):
    monkeypatch.setenv("COLUMNS", "300")
    headers = ["/var/log/app.log", "worker_1.log"]
    line = CapturedLine("started", at(0))
    report = Report(headers=headers, rows=[Row(at(0), (line, line))])

    ReportFormatter(report, line_numbers=True).present()

    output = capsys.readouterr().out
    for header in ("line", *headers):
        assert header in output
    assert "/Var/Log/App.Log" not in output
    assert "Worker 1.Log" not in output


@pytest.mark.parametrize(
    "text",
    [
        "value [bold]x[/bold] closing [/]",
        "[/tag] without an opening tag",
        "[red]not red[/red]",
    ]
)
def test_present_shows_markup_like_text_as_is(text, capsys, monkeypatch):
    monkeypatch.setenv("COLUMNS", "300")
    report = Report(headers=["[app].log"], rows=[Row(at(0), (CapturedLine(text, at(0)),))])

    ReportFormatter(report).present()

    output = capsys.readouterr().out
    assert text in output
    assert "[app].log" in output


def test_export_csv_of_empty_report_writes_header_only(tmp_path):
    csv_path = tmp_path / "empty.csv"
    report = Report(headers=["a.log", "b.log"], rows=[])

    ReportFormatter(report, timestamps=True).export_csv(csv_path)

    assert csv_path.read_text(encoding="utf-8").splitlines() == ["timestamp,a.log,b.log"]


@pytest.mark.parametrize(
    "source_ids,line_numbers,timestamps,clashing_name",
    [
        (["line", "b.log"], True, False, "line"),
        (["a.log", "timestamp"], False, True, "timestamp"),
        (["line", "timestamp"], True, True, "line"),
        (["line", "timestamp"], False, False, None),
        (["./line", "./timestamp"], True, True, None),
    ]
)
def test_check_source_names(source_ids, line_numbers, timestamps, clashing_name):
    if clashing_name is None:
        check_source_names(source_ids, line_numbers=line_numbers, timestamps=timestamps)
        return

    with pytest.raises(ValueError, match=repr(clashing_name)):
        check_source_names(source_ids, line_numbers=line_numbers, timestamps=timestamps)


def test_formatter_rejects_source_named_like_leading_column():
    report = Report(headers=["line", "b.log"], rows=[])

    with pytest.raises(ValueError):
        ReportFormatter(report, line_numbers=True)
