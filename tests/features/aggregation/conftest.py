"""BDD step definitions for metric aggregation features."""

import threading
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from aggregatemetrics.adapters.queue import AggregateMetricQueue
from aggregatemetrics.adapters.timed import TimedDrainHandler
from aggregatemetrics.core.aggregate import AggregatedMetric
from aggregatemetrics.core.models import Dimension, Metric, MetricSet


@dataclass
class AggregationScenarioContext:
    """Mutable state shared between the steps of one scenario."""

    queue: AggregateMetricQueue = field(default_factory=AggregateMetricQueue)
    drained: list[AggregatedMetric] = field(default_factory=list)
    coalesced: list[MetricSet] = field(default_factory=list)
    ticks: list[list[AggregatedMetric]] = field(default_factory=list)
    ticked: threading.Event = field(default_factory=threading.Event)
    handler: TimedDrainHandler | None = None


@pytest.fixture
def ctx():
    """Fresh scenario context; cancels any handler left running."""
    context = AggregationScenarioContext()
    yield context
    if context.handler is not None:
        context.handler.cancel()


# === Given ===
@given("an empty metric queue")
def step_empty_queue(ctx: AggregationScenarioContext) -> None:
    ctx.queue = AggregateMetricQueue()


# === When ===
@when(parsers.parse('metric "{name}" with value {value:g} is added'))
def step_add_metric(ctx: AggregationScenarioContext, name: str, value: float) -> None:
    ctx.queue.add(Metric(name=name, value=value))


@when(
    parsers.parse(
        'metric "{name}" with value {value:g} '
        'and dimension "{dim}" = "{dim_value}" is added'
    )
)
def step_add_metric_with_dimension(
    ctx: AggregationScenarioContext, name: str, value: float, dim: str, dim_value: str
) -> None:
    dimensions = (Dimension(dim, dim_value),)
    ctx.queue.add(Metric(name=name, value=value, dimensions=dimensions))


@when("the queue is drained")
def step_drain(ctx: AggregationScenarioContext) -> None:
    ctx.drained = ctx.queue.drain()


@when(parsers.parse("the queue is drained with limit {limit:d}"))
def step_drain_with_limit(ctx: AggregationScenarioContext, limit: int) -> None:
    ctx.drained = ctx.queue.drain(limit)


@when("the queue is drained and coalesced")
def step_drain_and_coalesce(ctx: AggregationScenarioContext) -> None:
    ctx.coalesced = ctx.queue.drain_and_coalesce()


@when(parsers.parse("the timed handler is started with a {interval:d} ms interval"))
def step_start_handler(ctx: AggregationScenarioContext, interval: int) -> None:
    def callback(drained: list[AggregatedMetric], coalesced: list[MetricSet]) -> None:
        ctx.ticks.append(drained)
        ctx.ticked.set()

    ctx.handler = TimedDrainHandler(ctx.queue, callback)
    ctx.handler.start(interval)


@when("the first tick completes")
def step_wait_first_tick(ctx: AggregationScenarioContext) -> None:
    assert ctx.ticked.wait(timeout=2), "no tick within 2 seconds"
    assert ctx.handler is not None
    ctx.handler.cancel()


# === Then ===
@then(parsers.parse("{count:d} aggregates are returned"))
def step_aggregate_count(ctx: AggregationScenarioContext, count: int) -> None:
    assert len(ctx.drained) == count


@then(
    parsers.parse(
        'aggregate {index:d} is "{name}" with sum {total:g} and no dimensions'
    )
)
def step_aggregate_without_dimensions(
    ctx: AggregationScenarioContext, index: int, name: str, total: float
) -> None:
    aggregate = ctx.drained[index - 1]
    assert aggregate.name == name
    assert aggregate.sum == total
    assert aggregate.dimensions == ()


@then(
    parsers.parse(
        'aggregate {index:d} is "{name}" with sum {total:g} '
        'and dimension "{dim}" = "{dim_value}"'
    )
)
def step_aggregate_with_dimension(
    ctx: AggregationScenarioContext,
    index: int,
    name: str,
    total: float,
    dim: str,
    dim_value: str,
) -> None:
    aggregate = ctx.drained[index - 1]
    assert aggregate.name == name
    assert aggregate.sum == total
    assert aggregate.dimensions == (Dimension(dim, dim_value),)


@then(parsers.parse("the queue count is {count:d}"))
def step_queue_count(ctx: AggregationScenarioContext, count: int) -> None:
    assert ctx.queue.count() == count


@then(parsers.parse("{count:d} coalesced entries are returned"))
def step_coalesced_count(ctx: AggregationScenarioContext, count: int) -> None:
    assert len(ctx.coalesced) == count


def _values(raw: str) -> tuple[float, ...]:
    return tuple(float(v) for v in raw.split(","))


@then(
    parsers.parse('coalesced entry {index:d} has values "{values}" and no dimensions')
)
def step_coalesced_without_dimensions(
    ctx: AggregationScenarioContext, index: int, values: str
) -> None:
    entry = ctx.coalesced[index - 1]
    assert entry.values == _values(values)
    assert entry.dimensions == ()


@then(
    parsers.parse(
        'coalesced entry {index:d} has values "{values}" '
        'and dimension "{dim}" = "{dim_value}"'
    )
)
def step_coalesced_with_dimension(
    ctx: AggregationScenarioContext, index: int, values: str, dim: str, dim_value: str
) -> None:
    entry = ctx.coalesced[index - 1]
    assert entry.values == _values(values)
    assert entry.dimensions == (Dimension(dim, dim_value),)


@then(parsers.parse("the first tick received {count:d} aggregates"))
def step_first_tick_count(ctx: AggregationScenarioContext, count: int) -> None:
    assert len(ctx.ticks[0]) == count
