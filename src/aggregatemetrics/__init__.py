"""Buffer metrics and reduce them to aggregated datapoints before shipping.

Example:
    ```python
    from aggregatemetrics import AggregateMetricQueue, TimedDrainHandler, counter

    queue = AggregateMetricQueue()
    handler = TimedDrainHandler(queue, lambda drained, coalesced: ...)
    handler.start(1000)

    queue.add(counter("requests", dimensions={"route": "/orders"}))
    ```
"""

from aggregatemetrics.adapters.queue import AggregateMetricQueue
from aggregatemetrics.adapters.timed import (
    DEFAULT_INTERVAL_MS,
    AsyncTimedDrainHandler,
    HandlerState,
    TimedDrainHandler,
)
from aggregatemetrics.core.aggregate import AggregatedMetric, group_metrics
from aggregatemetrics.core.coalesce import coalesce
from aggregatemetrics.core.encoding.ndjson import encode_ndjson
from aggregatemetrics.core.exceptions import InvalidMetric
from aggregatemetrics.core.keys import IdentityKey, canonical_dimensions, identity_key
from aggregatemetrics.core.metrics import counter, gauge, metric
from aggregatemetrics.core.models import (
    Dimension,
    Metric,
    MetricSet,
    SingleValueMetric,
)
from aggregatemetrics.core.ports import DrainCallback, MetricQueuePort

__all__ = [
    # Models
    "Dimension",
    "Metric",
    "MetricSet",
    "SingleValueMetric",
    "AggregatedMetric",
    "IdentityKey",
    # Errors
    "InvalidMetric",
    # Ports
    "DrainCallback",
    "MetricQueuePort",
    # Aggregation
    "canonical_dimensions",
    "identity_key",
    "group_metrics",
    "coalesce",
    "encode_ndjson",
    # Helpers
    "counter",
    "gauge",
    "metric",
    # Adapters
    "AggregateMetricQueue",
    "AsyncTimedDrainHandler",
    "DEFAULT_INTERVAL_MS",
    "HandlerState",
    "TimedDrainHandler",
]
