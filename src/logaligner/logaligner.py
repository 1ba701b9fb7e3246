#
# logaligner.py
#
# Utility for tailing multiple log files at once, and producing a time-aligned table
# of what each file was saying at each moment.
#

import argparse
import asyncio
from collections.abc import AsyncIterable, Callable
from datetime import datetime, timedelta
import signal
import sys

from rich.console import Console

from . import __version__
from .alignment import align
from .demo import demo_source_names
from .errors import InvalidPrecision, LogAlignerError
from .file_tailing import TailMultiplexer
from .ingestion import ingest, now
from .report import Report, ReportFormatter, check_source_names, format_timestamp
from .source_registry import SourceRegistry


DEFAULT_PRECISION_MILLIS = 1000

VALID_INPUT_TIME_FORMATS = [
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S,%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S,%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
]


def make_argument_parser():
    epilog_notes = """
    Each given file is tailed (files that do not exist yet may be given, and will be
    tailed once they are created). Lines are timestamped as they are observed. Press
    Ctrl-C to stop listening and generate the report: one row per sampling interval
    of PRECISION milliseconds, one column per file, each cell holding the most recent
    line seen from that file as of that row's time.
    """

    parser = argparse.ArgumentParser(prog="logaligner", epilog=epilog_notes)
    parser.add_argument("files", nargs="*", help="log files to tail (may also be given comma-separated)")
    parser.add_argument(
        "--output", "-o",
        default="-",
        help="save report to CSV file ('-' to display the report as a table on stdout, the default)"
    )
    parser.add_argument(
        "--precision", "-p",
        type=int,
        default=DEFAULT_PRECISION_MILLIS,
        help=f"sampling interval in milliseconds (default: {DEFAULT_PRECISION_MILLIS})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="show each line as it is captured",
    )
    parser.add_argument(
        "--interactive", "-i",
        action="store_true",
        help="show report using interactive TUI browser"
    )
    parser.add_argument("--line_numbers", "-ln", action="store_true", help="add line number column")
    parser.add_argument("--timestamps", "-t", action="store_true", help="add row timestamp column")
    parser.add_argument(
        "--encoding", "-enc",
        type=str,
        default=sys.getfilesystemencoding(),
        help="encoding to use when reading log files (defaults to the system default encoding)")
    parser.add_argument(
        "--poll_interval",
        type=float,
        default=0.1,
        help="seconds between checks of the log files for new lines (default: 0.1)",
    )
    parser.add_argument("--demo", action="store_true", help="capture from simulated log sources instead of files")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def parse_time_using(ts_str: str, formats: str | list[str]) -> datetime:
    if not isinstance(formats, (list, tuple)):
        formats = [formats]
    for fmt in formats:
        try:
            return datetime.strptime(ts_str, fmt)
        except ValueError:
            pass
    raise ValueError(f"no matching format for input string {ts_str!r}")


def split_file_names(file_args: list[str]) -> list[str]:
    """
    expand any comma-separated file arguments, preserving the given order
    """
    return [fname for arg in file_args for fname in arg.split(",") if fname]


class LogAlignerApplication:
    def __init__(
            self,
            config: argparse.Namespace,
            *,
            events: AsyncIterable[tuple[str, str]] | None = None,
            clock: Callable[[], datetime] = now,
    ):
        self.config = config

        if config.demo:
            self.fnames = list(demo_source_names)
        else:
            self.fnames = split_file_names(config.files)
        if not self.fnames:
            raise ValueError("no log files given to tail")

        # the interactive viewer always shows the timestamp column
        check_source_names(
            self.fnames,
            line_numbers=config.line_numbers,
            timestamps=config.timestamps or config.interactive,
        )

        if config.precision <= 0:
            raise InvalidPrecision(timedelta(milliseconds=config.precision))
        self.precision_millis = config.precision
        self.precision = timedelta(milliseconds=config.precision)

        self.verbose = config.verbose > 0
        self.interactive = config.interactive
        self.save_to_csv = None if config.output == "-" else config.output
        self.table_output = not self.interactive and self.save_to_csv is None

        # keep status messages out of the way of a report being written to stdout
        self.console = Console(stderr=self.table_output, highlight=False)

        # register every file before listening, whether it currently exists or not
        self.registry = SourceRegistry(self.fnames)
        if events is None:
            self.multiplexer = TailMultiplexer(
                encoding=config.encoding,
                poll_interval=config.poll_interval,
                demo=config.demo,
            )
            for fname in self.fnames:
                self.multiplexer.register(fname)
            events = self.multiplexer
        else:
            self.multiplexer = None
        self.events = events
        self.clock = clock

    def run(self):
        asyncio.run(self._capture_lines())

        # the report is generated only after listening has stopped - from here on, the
        # registry's buffers belong to the alignment step
        report = self._generate_report()
        self._output_report(report)

    async def _capture_lines(self) -> int:
        stop = asyncio.Event()
        restore_interrupt_handler = self._install_interrupt_handler(stop)

        self.console.print("Beginning Listen... (press Ctrl-C to stop)")
        try:
            captured = await ingest(
                self.events,
                self.registry,
                stop,
                clock=self.clock,
                trace=self._trace_line if self.verbose else None,
            )
        finally:
            restore_interrupt_handler()
            if self.multiplexer is not None:
                await self.multiplexer.aclose()

        self.console.print(f"\nFinished Listen... ({captured} lines captured)")
        return captured

    @staticmethod
    def _install_interrupt_handler(stop: asyncio.Event) -> Callable[[], None]:
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, stop.set)
        except NotImplementedError:
            # event loops on Windows do not support add_signal_handler
            previous = signal.signal(signal.SIGINT, lambda signum, frame: loop.call_soon_threadsafe(stop.set))
            return lambda: signal.signal(signal.SIGINT, previous)
        return lambda: loop.remove_signal_handler(signal.SIGINT)

    def _trace_line(self, source_id: str, text: str) -> None:
        self.console.print(f"source: {source_id}, line: {text}", markup=False)

    def _generate_report(self) -> Report:
        self.console.print(f"Generating Report @ {self.precision_millis}ms...")
        report = align(self.registry, self.precision)

        window_start, window_end = report.window
        if report.rows:
            self.console.print(
                f"{len(report.rows)} rows, {format_timestamp(window_start)} - {format_timestamp(window_end)}"
            )
        else:
            self.console.print("No time window in which every file has lines - report has no rows", style="yellow")
        return report

    def _output_report(self, report: Report) -> None:
        formatter = ReportFormatter(
            report,
            line_numbers=self.config.line_numbers,
            timestamps=self.config.timestamps,
        )

        if self.interactive:
            self._display_report_interactively(report)

        elif self.save_to_csv:
            formatter.export_csv(self.save_to_csv)
            self.console.print(f"CSV exported to file: {self.save_to_csv}", markup=False)

        else:
            formatter.present()

    def _display_report_interactively(self, report: Report) -> None:
        from .interactive_viewing import InteractiveReportViewerApp

        # always show the row timestamps in the TUI, so that go-to-timestamp has something to go to
        formatter = ReportFormatter(report, line_numbers=self.config.line_numbers, timestamps=True)
        app = InteractiveReportViewerApp()
        app.config(
            log_file_names=report.headers,
            show_line_numbers=self.config.line_numbers,
            report_table=formatter.as_table(),
            field_names=formatter.fieldnames,
        )
        app.run()


def main():

    parser = make_argument_parser()
    args_ns = parser.parse_args()

    try:
        app = LogAlignerApplication(args_ns)
        app.run()
    except (LogAlignerError, OSError, ValueError) as exc:
        Console(stderr=True, highlight=False).print(f"Failed to generate report: {exc}", markup=False, style="red")
        sys.exit(1)


if __name__ == '__main__':
    main()
