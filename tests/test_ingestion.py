import asyncio

import pytest

from logaligner.errors import UnknownSource
from logaligner.ingestion import ingest, now
from logaligner.source_registry import SourceRegistry

from .logaligner_testing import ReplayClock, at


async def events_then_wait(events):
    for source_id, text in events:
        yield source_id, text
    # a live source never ends on its own
    await asyncio.Event().wait()


def run_ingest(events, registry, *, stop_after=None, stop_first=False, **kwargs):
    traced = []

    async def _run():
        stop = asyncio.Event()
        if stop_first:
            stop.set()

        def trace(source_id, text):
            traced.append((source_id, text))
            if stop_after is not None and len(traced) == stop_after:
                stop.set()

        return await ingest(events, registry, stop, trace=trace, **kwargs)

    captured = asyncio.run(asyncio.wait_for(_run(), timeout=5))
    return captured, traced


def texts(registry, source_id):
    return [line.text for line in registry.buffer(source_id).lines]


def test_captures_until_events_exhausted():
    async def events():
        for item in [("A", "a1"), ("B", "b1"), ("A", "a2")]:
            yield item

    registry = SourceRegistry(["A", "B"])
    captured, traced = run_ingest(events(), registry, clock=ReplayClock([at(0), at(10), at(20)]))

    assert captured == 3
    assert traced == [("A", "a1"), ("B", "b1"), ("A", "a2")]
    assert list(registry.buffer("A").lines) == [("a1", at(0)), ("a2", at(20))]
    assert list(registry.buffer("B").lines) == [("b1", at(10))]


def test_stop_ends_waiting_for_events():
    registry = SourceRegistry(["A", "B"])
    events = events_then_wait([("A", "a1"), ("B", "b1")])

    captured, _ = run_ingest(events, registry, stop_after=2)

    assert captured == 2
    assert texts(registry, "A") == ["a1"]
    assert texts(registry, "B") == ["b1"]


def test_stop_before_start_captures_nothing():
    registry = SourceRegistry(["A"])

    captured, _ = run_ingest(events_then_wait([]), registry, stop_first=True)

    assert captured == 0
    assert len(registry.buffer("A")) == 0


def test_event_received_along_with_stop_is_kept():
    registry = SourceRegistry(["A"])

    async def _run():
        stop = asyncio.Event()

        async def events():
            # the stop arrives while this line is on its way
            stop.set()
            yield "A", "last words"
            await asyncio.Event().wait()

        return await ingest(events(), registry, stop)

    captured = asyncio.run(asyncio.wait_for(_run(), timeout=5))

    assert captured == 1
    assert texts(registry, "A") == ["last words"]


def test_event_for_unregistered_source_is_fatal():
    registry = SourceRegistry(["A"])
    events = events_then_wait([("A", "a1"), ("Z", "z1"), ("A", "a2")])

    with pytest.raises(UnknownSource):
        run_ingest(events, registry)

    assert texts(registry, "A") == ["a1"]


def test_capture_times_are_stamped_in_order():
    registry = SourceRegistry(["A"])
    events = events_then_wait([("A", f"line {i}") for i in range(20)])

    run_ingest(events, registry, stop_after=20)

    capture_times = [line.captured_at for line in registry.buffer("A").lines]
    assert capture_times == sorted(capture_times)


def test_default_clock_is_timezone_aware():
    assert now().tzinfo is not None
