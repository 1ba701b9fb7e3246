from __future__ import annotations

import abc
import asyncio
import codecs
from pathlib import Path
import random


class FileTailer:
    """
    Base class for tailers - each tailer follows one source, and returns any complete
    lines that have appeared since it was last polled.
    """
    @classmethod
    def get_tailer(cls, name: str, encoding: str, *, demo: bool = False) -> FileTailer:
        for subcls in cls.__subclasses__():
            if subcls is TextFileTailer:
                continue
            if subcls._can_tail(name, demo=demo):
                return subcls(name, encoding)
        return TextFileTailer(name, encoding)

    @classmethod
    @abc.abstractmethod
    def _can_tail(cls, fname: str, *, demo: bool = False) -> bool:
        """Override in subclasses"""

    @abc.abstractmethod
    def poll(self) -> list[str]:
        """Override in subclasses"""

    def __init__(self, file_name: str, encoding: str):
        self.file_name = file_name
        self.encoding = encoding

    @property
    def exhausted(self) -> bool:
        # files being tailed can always grow
        return False


class TextFileTailer(FileTailer):
    """
    Follows a text file by offset, like `tail -f`. Content already in the file when the
    tailer is created is skipped. The file does not need to exist yet - if it is created
    later, all of its content is new.
    """
    @classmethod
    def _can_tail(cls, fname: str, *, demo: bool = False) -> bool:
        return True

    def __init__(self, fname: str, encoding: str):
        super().__init__(fname, encoding)
        self.path = Path(fname)
        try:
            self.offset = self.path.stat().st_size
        except FileNotFoundError:
            self.offset = 0
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._partial = ""

    def _read_new_text(self) -> str:
        try:
            with self.path.open("rb") as f:
                f.seek(self.offset)
                data = f.read()
        except FileNotFoundError:
            return ""
        self.offset += len(data)
        return self._decoder.decode(data)

    def poll(self) -> list[str]:
        text = self._read_new_text()
        if not text:
            return []

        # last item is an incomplete line (or "" if text ended with a newline) - hold it
        # until the rest of the line is written
        lines = (self._partial + text).split("\n")
        self._partial = lines.pop()
        return [line.removesuffix("\r") for line in lines]


class DemoSourceTailer(FileTailer):
    """
    Simulated source for --demo mode, emitting canned lines from logaligner.demo at
    random intervals.
    """
    emit_chance = 0.3

    @classmethod
    def _can_tail(cls, fname: str, *, demo: bool = False) -> bool:
        from logaligner.demo import demo_source_names

        # only in --demo mode - a real file may also be named "*.demo"
        return demo and fname in demo_source_names

    def __init__(self, fname: str, encoding: str):
        import logaligner.demo as demo_sources

        super().__init__(fname, encoding)
        var_name = fname.partition(".")[0]
        body = getattr(demo_sources, var_name)
        self._iter = iter(body.splitlines())
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def poll(self) -> list[str]:
        if self._exhausted or random.random() >= self.emit_chance:
            return []
        line = next(self._iter, None)
        if line is None:
            self._exhausted = True
            return []
        return [line]


_END_OF_SOURCES = object()


class TailMultiplexer:
    """
    Watches all registered sources, and asynchronously yields (source_id, line) tuples
    in the order the lines are observed, regardless of which source produced them.

    Sources are polled every poll_interval seconds by a background task, which is
    started on the first request for a line. Iteration ends only if every source is
    exhausted (which never happens for real files).
    """
    def __init__(self, encoding: str = "utf-8", poll_interval: float = 0.1, *, demo: bool = False):
        self.encoding = encoding
        self.poll_interval = poll_interval
        self.demo = demo
        self.tailers: dict[str, FileTailer] = {}
        self._queue: asyncio.Queue | None = None
        self._poller: asyncio.Task | None = None

    def register(self, path: str) -> None:
        if path in self.tailers:
            return
        self.tailers[path] = FileTailer.get_tailer(path, self.encoding, demo=self.demo)

    def poll_once(self) -> list[tuple[str, str]]:
        return [
            (source_id, line)
            for source_id, tailer in self.tailers.items()
            for line in tailer.poll()
        ]

    @property
    def exhausted(self) -> bool:
        return bool(self.tailers) and all(tailer.exhausted for tailer in self.tailers.values())

    async def _poll_sources(self) -> None:
        try:
            while True:
                for item in self.poll_once():
                    self._queue.put_nowait(item)
                if self.exhausted:
                    self._queue.put_nowait(_END_OF_SOURCES)
                    return
                await asyncio.sleep(self.poll_interval)
        except Exception as exc:
            # re-raised to the consumer by __anext__
            self._queue.put_nowait(exc)

    def __aiter__(self):
        return self

    async def __anext__(self) -> tuple[str, str]:
        if self._poller is None:
            self._queue = asyncio.Queue()
            self._poller = asyncio.create_task(self._poll_sources())

        item = await self._queue.get()
        if item is _END_OF_SOURCES:
            # leave the marker for any later callers
            self._queue.put_nowait(item)
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item

    async def aclose(self) -> None:
        if self._poller is not None:
            self._poller.cancel()
            try:
                await self._poller
            except asyncio.CancelledError:
                pass
            self._poller = None
