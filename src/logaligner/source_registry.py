from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import NamedTuple

from .errors import DuplicateSource, UnknownSource


class CapturedLine(NamedTuple):
    text: str
    captured_at: datetime


class SourceBuffer:
    """
    Ordered buffer of the lines captured from a single source. Lines are appended
    in capture order by the ingestion loop, and popped from the front by the
    alignment engine.
    """
    def __init__(self, source_id: str):
        self.source_id = source_id
        self.lines: deque[CapturedLine] = deque()

    def append(self, text: str, captured_at: datetime) -> CapturedLine:
        captured = CapturedLine(text, captured_at)
        self.lines.append(captured)
        return captured

    @property
    def first_time(self) -> datetime:
        return self.lines[0].captured_at

    @property
    def last_time(self) -> datetime:
        return self.lines[-1].captured_at

    def pop_through(self, t: datetime) -> CapturedLine | None:
        """
        Pop every line captured at or before t, returning only the last one popped
        (earlier lines are superseded), or None if no line qualifies.
        """
        latest = None
        lines = self.lines
        while lines and lines[0].captured_at <= t:
            latest = lines.popleft()
        return latest

    def __len__(self):
        return len(self.lines)

    def __bool__(self):
        return bool(self.lines)

    def __repr__(self):
        return f"{type(self).__name__}({self.source_id!r}, {len(self.lines)} lines)"


class SourceRegistry:
    """
    Maps each registered source id to its SourceBuffer, remembering the order in which
    sources were registered (this becomes the column order of the aligned report).
    """
    def __init__(self, source_ids: Iterable[str] = ()):
        self._buffers: dict[str, SourceBuffer] = {}
        for source_id in source_ids:
            self.register(source_id)

    def register(self, source_id: str) -> SourceBuffer:
        if source_id in self._buffers:
            raise DuplicateSource(source_id)
        buffer = self._buffers[source_id] = SourceBuffer(source_id)
        return buffer

    def append(self, source_id: str, text: str, timestamp: datetime) -> CapturedLine:
        try:
            buffer = self._buffers[source_id]
        except KeyError:
            raise UnknownSource(source_id) from None
        return buffer.append(text, timestamp)

    def buffer(self, source_id: str) -> SourceBuffer:
        try:
            return self._buffers[source_id]
        except KeyError:
            raise UnknownSource(source_id) from None

    @property
    def source_ids(self) -> list[str]:
        return list(self._buffers)

    @property
    def buffers(self) -> list[SourceBuffer]:
        return list(self._buffers.values())

    def __contains__(self, source_id) -> bool:
        return source_id in self._buffers

    def __iter__(self) -> Iterator[SourceBuffer]:
        return iter(self._buffers.values())

    def __len__(self):
        return len(self._buffers)
