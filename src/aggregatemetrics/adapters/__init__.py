"""Adapters implementing core ports."""

from aggregatemetrics.adapters.queue import AggregateMetricQueue
from aggregatemetrics.adapters.timed import (
    DEFAULT_INTERVAL_MS,
    AsyncTimedDrainHandler,
    HandlerState,
    TimedDrainHandler,
)

__all__ = [
    "DEFAULT_INTERVAL_MS",
    "AggregateMetricQueue",
    "AsyncTimedDrainHandler",
    "HandlerState",
    "TimedDrainHandler",
]
