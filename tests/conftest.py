"""Shared test fixtures for all test modules."""

import threading
from dataclasses import dataclass, field

import pytest

from aggregatemetrics.adapters.queue import AggregateMetricQueue
from aggregatemetrics.core.aggregate import AggregatedMetric
from aggregatemetrics.core.models import Dimension, Metric, MetricSet


@pytest.fixture
def queue() -> AggregateMetricQueue:
    """Provide an empty metric queue."""
    return AggregateMetricQueue()


@pytest.fixture
def metric1() -> Metric:
    """Dimension-less sample of metric m1."""
    return Metric(name="m1", value=1)


@pytest.fixture
def metric1_dim() -> Metric:
    """Sample of metric m1 with a single height dimension."""
    return Metric(name="m1", value=1, dimensions=(Dimension("height", "5 ft"),))


@dataclass
class CallbackRecorder:
    """Drain callback that records every tick it receives.

    `ticked` is set once `expected_ticks` calls have been recorded.
    """

    expected_ticks: int = 1
    calls: list[tuple[list[AggregatedMetric], list[MetricSet]]] = field(
        default_factory=list
    )
    ticked: threading.Event = field(default_factory=threading.Event)

    def __call__(
        self, drained: list[AggregatedMetric], coalesced: list[MetricSet]
    ) -> None:
        self.calls.append((drained, coalesced))
        if len(self.calls) >= self.expected_ticks:
            self.ticked.set()


@pytest.fixture
def recorder() -> CallbackRecorder:
    """Callback recorder that signals after the first tick."""
    return CallbackRecorder()


@pytest.fixture
def recorder_factory():
    """Factory fixture for recorders waiting on a given number of ticks."""

    def _recorder(expected_ticks: int = 1) -> CallbackRecorder:
        return CallbackRecorder(expected_ticks=expected_ticks)

    return _recorder
