"""Periodic drain handlers.

A handler runs at a set interval, drains the queue, coalesces the result
and passes both views to a callback. This collects metrics across many
call sites and ships them in the background, e.g. to CloudWatch.

```python
queue = AggregateMetricQueue()

def ship(drained, coalesced):
    ...  # push to the monitoring backend

handler = TimedDrainHandler(queue, ship)
handler.start(1000)  # every 1 sec
...
handler.close()  # in the shutdown routine, waits for the last tick
```

Ticks fire at fixed offsets from start() on the monotonic clock. There is
no drift correction and no backpressure. Ticks never overlap: a tick runs
to completion before the next deadline is considered, and deadlines that
passed while a callback was running are skipped rather than queued. Each
handler holds a tick lock around every drain and callback, so an explicit
process() or a worker left over from before a cancel()/start() restart
waits for the tick in progress.
"""

import asyncio
import inspect
import logging
import threading
import time
from enum import Enum

from aggregatemetrics.core.aggregate import AggregatedMetric
from aggregatemetrics.core.coalesce import coalesce
from aggregatemetrics.core.models import MetricSet
from aggregatemetrics.core.ports import DrainCallback, MetricQueuePort

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 1000


class HandlerState(Enum):
    """Lifecycle state of a timed handler."""

    IDLE = "idle"
    RUNNING = "running"


def _next_tick(started: float, now: float, interval: float, ticks: int) -> int:
    """Return the index of the next deadline, skipping any already missed."""
    due = int((now - started) // interval)
    if due > ticks:
        logger.debug("Skipping %d missed ticks", due - ticks)
        return due + 1
    return ticks + 1


class _TimedHandlerBase:
    """Configuration and state shared by the thread and asyncio handlers."""

    def __init__(
        self,
        queue: MetricQueuePort,
        callback: DrainCallback,
        interval_ms: float | None = None,
        reduce_limit: int | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            queue: Buffer to drain on every tick.
            callback: Called with (drained, coalesced) once per tick.
            interval_ms: Default tick interval in milliseconds
                         (default: 1000). start() may override it.
            reduce_limit: Maximum raw metrics drained per tick.
                          None drains everything buffered.
        """
        self._queue = queue
        self._callback = callback
        self._interval_ms: float = DEFAULT_INTERVAL_MS
        self._set_interval(interval_ms)
        self._reduce_limit = reduce_limit
        self._state = HandlerState.IDLE

    def _set_interval(self, interval_ms: float | None) -> None:
        if interval_ms is not None and interval_ms > 0:
            self._interval_ms = interval_ms

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def reduce_limit(self) -> int | None:
        return self._reduce_limit

    @property
    def state(self) -> HandlerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is HandlerState.RUNNING

    def set_reduce_limit(self, limit: int | None) -> None:
        """Set the maximum number of raw metrics drained per tick.

        Args:
            limit: Per-tick drain limit, or None to drain everything
                   buffered at tick time (default).
        """
        self._reduce_limit = limit

    def _drain(self) -> tuple[list[AggregatedMetric], list[MetricSet]]:
        drained = self._queue.drain(self._reduce_limit)
        return drained, coalesce(drained)


# @tra: Adapter.TimedHandler.Thread
class TimedDrainHandler(_TimedHandlerBase):
    """Runs ticks on a dedicated daemon thread.

    Drain and callback exceptions are logged and do not stop the schedule.
    """

    def __init__(
        self,
        queue: MetricQueuePort,
        callback: DrainCallback,
        interval_ms: float | None = None,
        reduce_limit: int | None = None,
    ) -> None:
        super().__init__(queue, callback, interval_ms, reduce_limit)
        self._lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._workers: list[threading.Thread] = []

    def start(self, interval_ms: float | None = None) -> None:
        """Arm the recurring timer. No-op if already running.

        Args:
            interval_ms: Tick interval in milliseconds. Missing or
                         non-positive keeps the configured interval.
        """
        # @tra: Adapter.TimedHandler.Start.Idempotent
        with self._lock:
            if self._stop_event is not None:
                return
            self._set_interval(interval_ms)
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(stop_event, self._interval_ms / 1000),
                name="aggregatemetrics-timed-drain",
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            self._workers = [w for w in self._workers if w.is_alive()]
            self._workers.append(thread)
            self._state = HandlerState.RUNNING
            thread.start()
        logger.debug("Timed drain started with %sms interval", self._interval_ms)

    def cancel(self) -> None:
        """Disarm the timer. No-op if idle.

        Does not wait for or interrupt a tick already in progress; use
        join() or close() for that.
        """
        # @tra: Adapter.TimedHandler.Cancel.Idempotent
        with self._lock:
            if self._stop_event is None:
                return
            self._stop_event.set()
            self._stop_event = None
            self._thread = None
            self._state = HandlerState.IDLE
        logger.debug("Timed drain cancelled")

    def join(self, timeout: float | None = None) -> bool:
        """Wait for cancelled workers to finish their in-flight tick.

        Call after cancel(); a running worker only exits once cancelled.
        Calling from inside the callback returns immediately.

        Args:
            timeout: Seconds to wait in total, or None to wait indefinitely.

        Returns:
            True if every worker has exited.
        """
        with self._lock:
            workers = list(self._workers)
        deadline = None if timeout is None else time.monotonic() + timeout
        current = threading.current_thread()
        for worker in workers:
            if worker is current:
                continue
            if deadline is None:
                worker.join()
            else:
                worker.join(max(deadline - time.monotonic(), 0.0))
        return all(not w.is_alive() for w in workers if w is not current)

    def close(self, timeout: float | None = None) -> bool:
        """Cancel and wait for the in-flight tick, e.g. a final flush."""
        self.cancel()
        return self.join(timeout)

    def process(self) -> None:
        """Run one tick now. Drain and callback exceptions propagate.

        Waits for a tick already in progress. Must not be called from
        within the callback.
        """
        with self._tick_lock:
            drained, coalesced = self._drain()
            self._callback(drained, coalesced)

    def _tick(self) -> None:
        try:
            self.process()
        except Exception:
            logger.exception("Timed drain tick failed")

    def _run(self, stop_event: threading.Event, interval: float) -> None:
        started = time.monotonic()
        ticks = 1
        while True:
            delay = started + ticks * interval - time.monotonic()
            if stop_event.wait(max(delay, 0.0)):
                return
            self._tick()
            ticks = _next_tick(started, time.monotonic(), interval, ticks)

    def __enter__(self) -> "TimedDrainHandler":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


# @tra: Adapter.TimedHandler.Async
class AsyncTimedDrainHandler(_TimedHandlerBase):
    """Runs ticks as an asyncio task on the running event loop.

    The callback may be a plain function or a coroutine function; an
    awaitable result is awaited within the tick, so ticks stay serialised.
    Drain and callback exceptions are logged and do not stop the schedule.
    """

    def __init__(
        self,
        queue: MetricQueuePort,
        callback: DrainCallback,
        interval_ms: float | None = None,
        reduce_limit: int | None = None,
    ) -> None:
        super().__init__(queue, callback, interval_ms, reduce_limit)
        self._tick_lock = asyncio.Lock()
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    def start(self, interval_ms: float | None = None) -> None:
        """Schedule the tick task. No-op if already running.

        Must be called with an event loop running. After a restart the new
        task waits for the previous one, so aclose() covers both.

        Args:
            interval_ms: Tick interval in milliseconds. Missing or
                         non-positive keeps the configured interval.
        """
        if self._stop_event is not None:
            return
        self._set_interval(interval_ms)
        loop = asyncio.get_running_loop()
        previous = self._task
        if previous is not None and previous.done():
            previous = None
        self._stop_event = asyncio.Event()
        self._task = loop.create_task(
            self._run(self._stop_event, self._interval_ms / 1000, previous)
        )
        self._state = HandlerState.RUNNING
        logger.debug("Async timed drain started with %sms interval", self._interval_ms)

    def cancel(self) -> None:
        """Stop future ticks. No-op if idle.

        A tick already in progress is not interrupted.
        """
        if self._stop_event is None:
            return
        self._stop_event.set()
        self._stop_event = None
        self._state = HandlerState.IDLE
        logger.debug("Async timed drain cancelled")

    async def aclose(self) -> None:
        """Cancel and wait for the tick task to finish."""
        task = self._task
        self.cancel()
        self._task = None
        if task is not None:
            await task

    async def process(self) -> None:
        """Run one tick now. Drain and callback exceptions propagate.

        Waits for a tick already in progress. Must not be awaited from
        within the callback.
        """
        async with self._tick_lock:
            drained, coalesced = self._drain()
            result = self._callback(drained, coalesced)
            if inspect.isawaitable(result):
                await result

    async def _tick(self) -> None:
        try:
            await self.process()
        except Exception:
            logger.exception("Async timed drain tick failed")

    async def _run(
        self,
        stop_event: asyncio.Event,
        interval: float,
        previous: asyncio.Task[None] | None = None,
    ) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        if previous is not None:
            await previous
        ticks = 1
        while True:
            delay = started + ticks * interval - loop.time()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=max(delay, 0.0))
                return
            except asyncio.TimeoutError:
                pass
            await self._tick()
            ticks = _next_tick(started, loop.time(), interval, ticks)

    async def __aenter__(self) -> "AsyncTimedDrainHandler":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
