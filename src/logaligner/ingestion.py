from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, Callable
from datetime import datetime

from .source_registry import SourceRegistry

Tracer = Callable[[str, str], None]


async def _next_event(event_iter) -> tuple[str, str] | None:
    try:
        return await event_iter.__anext__()
    except StopAsyncIteration:
        return None


def now() -> datetime:
    """
    Capture time for a newly observed line - local time, with timezone info.
    """
    return datetime.now().astimezone()


async def ingest(
        events: AsyncIterable[tuple[str, str]],
        registry: SourceRegistry,
        stop: asyncio.Event,
        *,
        clock: Callable[[], datetime] = now,
        trace: Tracer | None = None,
) -> int:
    """
    Consume (source_id, text) events, and append each to its source's buffer, stamped
    with the time it was received. Runs until stop is set, or until the events are
    exhausted. Returns the number of lines captured.

    Each pass waits for whichever comes first, the next event or the stop signal. An
    event that was received by the time the stop is seen is still captured. An event
    for an unregistered source raises UnknownSource.
    """
    event_iter = events.__aiter__()
    stop_wait = asyncio.create_task(stop.wait())
    next_event = None
    captured = 0

    try:
        while True:
            if next_event is None:
                next_event = asyncio.create_task(_next_event(event_iter))

            done, _ = await asyncio.wait(
                {next_event, stop_wait},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if next_event in done:
                received, next_event = next_event, None
                event = received.result()
                if event is None:
                    break

                source_id, text = event

                registry.append(source_id, text, clock())
                captured += 1
                if trace is not None:
                    trace(source_id, text)

            elif stop_wait in done:
                break

    finally:
        pending = [task for task in (next_event, stop_wait) if task is not None and not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    return captured
