"""Port interfaces for buffers and drain callbacks.

These protocols define the contracts the timed handlers depend on.
The handlers accept any buffer satisfying MetricQueuePort, not just
AggregateMetricQueue.
"""

from typing import Protocol, runtime_checkable

from aggregatemetrics.core.aggregate import AggregatedMetric
from aggregatemetrics.core.models import Metric, MetricSet


@runtime_checkable
class MetricQueuePort(Protocol):
    """Port for buffering raw metrics and draining them as aggregates.

    Examples: AggregateMetricQueue.
    """

    def add(self, *metrics: Metric) -> object:
        """Append metrics to the tail of the buffer."""
        ...

    def drain(self, limit: int | None = None) -> list[AggregatedMetric]:
        """Remove up to limit metrics from the head and group them.

        Args:
            limit: Maximum number of raw metrics to remove.
                   None drains everything currently buffered.

        Returns:
            Aggregates in first-seen-identity order.
        """
        ...

    def count(self) -> int:
        """Return the number of metrics not yet drained."""
        ...


@runtime_checkable
class DrainCallback(Protocol):
    """Callback invoked once per tick with both views of a drain.

    The return value is ignored. Shipping the data to a monitoring
    backend is the implementor's responsibility.
    """

    def __call__(
        self, drained: list[AggregatedMetric], coalesced: list[MetricSet]
    ) -> object: ...
