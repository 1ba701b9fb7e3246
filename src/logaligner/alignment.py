from __future__ import annotations

from datetime import datetime, timedelta

from .errors import InvalidPrecision, NoDataForSource
from .report import Report, Row
from .source_registry import CapturedLine, SourceRegistry


def compute_window(registry: SourceRegistry) -> tuple[datetime, datetime]:
    """
    Return (window_start, window_end) - the latest first capture across all sources,
    and the earliest last capture. Raises NoDataForSource for the first source (in
    registration order) that has no captured lines.
    """
    for buffer in registry:
        if not buffer:
            raise NoDataForSource(buffer.source_id)
    window_start = max(buffer.first_time for buffer in registry)
    window_end = min(buffer.last_time for buffer in registry)
    return window_start, window_end


class Aligner:
    """
    Class that takes a registry of captured source lines and a sampling precision, and
    yields one Row for each step of a virtual clock advancing from the start to the end
    of the window in which all sources have data.

    For each step, every line captured at or before the step time is drained from each
    source's buffer; the last one drained becomes that source's cell, superseding any
    earlier ones. A source with no new line for a step repeats its previous cell.
    """
    def __init__(self, registry: SourceRegistry, precision: timedelta):
        if precision <= timedelta(0):
            raise InvalidPrecision(precision)

        self.registry = registry
        self.precision = precision
        self.window_start, self.window_end = compute_window(registry)

        self._buffers = registry.buffers
        self._clock = self.window_start
        self._last_cells: list[CapturedLine] | None = None

    @property
    def row_count(self) -> int:
        if self.window_start > self.window_end:
            return 0
        return (self.window_end - self.window_start) // self.precision + 1

    def __iter__(self):
        return self

    def __next__(self) -> Row:
        t = self._clock
        if t > self.window_end:
            raise StopIteration

        cells = []
        for i, buffer in enumerate(self._buffers):
            latest = buffer.pop_through(t)
            if latest is None:
                # window_start is at or after every source's first capture, so the
                # first row always pops a line for each source
                latest = self._last_cells[i]
            cells.append(latest)

        self._last_cells = cells
        self._clock = t + self.precision
        return Row(t, tuple(cells))


def align(registry: SourceRegistry, precision: timedelta) -> Report:
    """
    Drain the registry's buffers into a Report with one column per source (in
    registration order) and one row per precision step across the common window.
    Lines captured after the end of the window are never reported.
    """
    aligner = Aligner(registry, precision)
    return Report(
        headers=registry.source_ids,
        rows=list(aligner),
        window=(aligner.window_start, aligner.window_end),
    )
