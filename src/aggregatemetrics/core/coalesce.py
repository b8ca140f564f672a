"""Cross-dimension rollup of grouped aggregates."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from aggregatemetrics.core.aggregate import AggregatedMetric
from aggregatemetrics.core.keys import IdentityKey, rollup_key
from aggregatemetrics.core.models import Dimension, MetricSet


@dataclass
class _Entry:
    """Mutable staging entry used during a single coalesce scan."""

    name: str
    dimensions: tuple[Dimension, ...]
    unit: str | None
    timestamp: float | None
    values: list[float] = field(default_factory=list)

    def freeze(self) -> MetricSet:
        return MetricSet(
            name=self.name,
            dimensions=self.dimensions,
            unit=self.unit,
            timestamp=self.timestamp,
            values=tuple(self.values),
        )


# @tra: Core.Coalesce.Rollup
# @tra: Core.Coalesce.InsertionOrder
def coalesce(aggregates: Iterable[AggregatedMetric]) -> list[MetricSet]:
    """Combine values across every dimension variant of a metric name.

    Each metric name gets one dimension-less rollup holding the values of
    all its aggregates, even when no dimension-less sample was observed.
    Aggregates with dimensions are passed through as their own value sets.
    Example:

    ```
    # input
    [ {name: m1, dimensions: [a], values: [1]},
      {name: m1, dimensions: [b], values: [2]} ]

    # output
    [ {name: m1, dimensions: [], values: [1, 2]},
      {name: m1, dimensions: [a], values: [1]},
      {name: m1, dimensions: [b], values: [2]} ]
    ```

    The rollup takes unit and timestamp from the first contributing
    aggregate. Output order is the order in which keys were first seen.

    Args:
        aggregates: Aggregates as returned by a drain.

    Returns:
        Independent MetricSet snapshots.
    """
    entries: dict[IdentityKey, _Entry] = {}
    for aggregate in aggregates:
        key_rollup = rollup_key(aggregate.name)
        key_unique = aggregate.key
        values = aggregate.values

        rollup = entries.get(key_rollup)
        if rollup is None:
            entries[key_rollup] = _Entry(
                name=aggregate.name,
                dimensions=(),
                unit=aggregate.unit,
                timestamp=aggregate.timestamp,
                values=list(values),
            )
        else:
            rollup.values.extend(values)

        if key_unique != key_rollup and key_unique not in entries:
            entries[key_unique] = _Entry(
                name=aggregate.name,
                dimensions=aggregate.dimensions,
                unit=aggregate.unit,
                timestamp=aggregate.timestamp,
                values=list(values),
            )

    return [entry.freeze() for entry in entries.values()]
