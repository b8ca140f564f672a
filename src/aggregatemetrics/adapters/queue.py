"""Thread-safe buffer of pending metrics.

Producers append raw metrics from any thread; a drain atomically removes
a prefix of the buffer and groups it into aggregates.
"""

import logging
import threading
from collections import deque

from aggregatemetrics.core.aggregate import AggregatedMetric, group_metrics
from aggregatemetrics.core.coalesce import coalesce
from aggregatemetrics.core.exceptions import InvalidMetric
from aggregatemetrics.core.models import Metric, MetricSet

logger = logging.getLogger(__name__)


def _validate(metric: Metric) -> None:
    name = getattr(metric, "name", None)
    if not isinstance(name, str) or not name:
        raise InvalidMetric(metric)


# @tra: Adapter.Queue.ImplementsMetricQueuePort
class AggregateMetricQueue:
    """FIFO buffer implementing MetricQueuePort.

    add() and drain() are serialised by a single lock. An add() racing a
    drain() lands entirely in that drain or entirely in the next one.
    Grouping happens after the lock is released.

    Example:
        ```python
        queue = AggregateMetricQueue()
        queue.add(Metric("requests", 1), Metric("requests", 1))
        queue.drain()  # [AggregatedMetric(name='requests', sum=2, ...)]
        ```
    """

    def __init__(self) -> None:
        self._queue: deque[Metric] = deque()
        self._lock = threading.Lock()

    def add(self, *metrics: Metric) -> "AggregateMetricQueue":
        """Append zero or more metrics in arrival order.

        Every metric is validated before any is appended, so a rejected call
        leaves the buffer unchanged.

        Returns:
            This queue, for chaining.

        Raises:
            InvalidMetric: If any metric lacks a non-empty name.
        """
        # @tra: Adapter.Queue.Add.RejectsEmptyName
        for metric in metrics:
            _validate(metric)
        with self._lock:
            self._queue.extend(metrics)
        return self

    def drain(self, limit: int | None = None) -> list[AggregatedMetric]:
        """Remove up to limit metrics from the head and group them.

        Args:
            limit: Maximum number of raw metrics to remove. None drains
                   everything; a non-positive limit drains nothing.

        Returns:
            Aggregates in first-seen-identity order. Empty if nothing drained.

        Raises:
            TypeError: If a drained value cannot be summed. The batch is put
                back at the head of the queue in its original order.
        """
        # @tra: Adapter.Queue.Drain.Limit
        with self._lock:
            if limit is None or limit >= len(self._queue):
                batch = list(self._queue)
                self._queue.clear()
            else:
                batch = [self._queue.popleft() for _ in range(max(limit, 0))]
            remaining = len(self._queue)

        if not batch:
            return []
        try:
            aggregates = group_metrics(batch)
        except Exception:
            with self._lock:
                self._queue.extendleft(reversed(batch))
            logger.warning("Drain failed, requeued %d metrics", len(batch))
            raise
        logger.debug(
            "Drained %d metrics into %d aggregates, %d remaining",
            len(batch),
            len(aggregates),
            remaining,
        )
        return aggregates

    def drain_and_coalesce(self, limit: int | None = None) -> list[MetricSet]:
        """Wraps drain() with coalesce()."""
        return coalesce(self.drain(limit))

    def count(self) -> int:
        """Return the number of metrics not yet drained."""
        with self._lock:
            return len(self._queue)

    def __len__(self) -> int:
        return self.count()
