"""Accumulator merging same-identity metrics, and the grouping pass."""

from collections.abc import Iterable

from aggregatemetrics.core.keys import IdentityKey, identity_key
from aggregatemetrics.core.models import Dimension, Metric, MetricSet, SingleValueMetric


# @tra: Core.AggregatedMetric.Accumulate
class AggregatedMetric:
    """Aggregate view of several samples sharing one identity.

    The unit and timestamp are captured from the seed metric. Every merged
    value is kept so the set can be exported either as a single summed
    datapoint or as a statistical set.

    Example:
        ```python
        agg = AggregatedMetric(Metric("latency", 12.0))
        agg.push(Metric("latency", 8.0))
        agg.sum  # 20.0
        ```
    """

    def __init__(self, seed: Metric) -> None:
        self._name = seed.name
        self._dimensions = seed.dimensions
        self._unit = seed.unit
        self._timestamp = seed.timestamp
        self._key = identity_key(seed.name, seed.dimensions)
        self._values: list[float] = [seed.value]
        self._sum = seed.value

    @property
    def name(self) -> str:
        return self._name

    @property
    def dimensions(self) -> tuple[Dimension, ...]:
        return self._dimensions

    @property
    def unit(self) -> str | None:
        return self._unit

    @property
    def timestamp(self) -> float | None:
        return self._timestamp

    @property
    def key(self) -> IdentityKey:
        """Identity key shared by every merged sample."""
        return self._key

    @property
    def sum(self) -> float:
        return self._sum

    @property
    def values(self) -> tuple[float, ...]:
        """Snapshot of merged sample values in merge order."""
        return tuple(self._values)

    @property
    def sample_count(self) -> int:
        return len(self._values)

    def push(self, metric: Metric) -> "AggregatedMetric":
        """Merge a sample into this aggregate.

        The sum is re-derived from the full value list so there is a single
        summation order for the whole aggregate.

        Args:
            metric: Sample with the same identity as this aggregate.

        Returns:
            This aggregate, for chaining.

        Raises:
            ValueError: If the metric belongs to a different identity.
        """
        key = identity_key(metric.name, metric.dimensions)
        if key != self._key:
            raise ValueError(f"cannot merge {key!r} into aggregate {self._key!r}")
        self._values.append(metric.value)
        self._sum = sum(self._values)
        return self

    def as_single_value(self) -> SingleValueMetric:
        """Compact view for backends expecting one value per datapoint."""
        return SingleValueMetric(
            name=self._name,
            dimensions=self._dimensions,
            unit=self._unit,
            timestamp=self._timestamp,
            value=self._sum,
        )

    def as_value_set(self) -> MetricSet:
        """Expanded view listing every raw sample value."""
        return MetricSet(
            name=self._name,
            dimensions=self._dimensions,
            unit=self._unit,
            timestamp=self._timestamp,
            values=tuple(self._values),
        )

    def __repr__(self) -> str:
        return (
            f"AggregatedMetric(name={self._name!r}, dimensions={self._dimensions!r}, "
            f"sum={self._sum!r}, sample_count={self.sample_count})"
        )


# @tra: Core.Grouping.FirstSeenOrder
def group_metrics(metrics: Iterable[Metric]) -> list[AggregatedMetric]:
    """Group metrics by identity key.

    Args:
        metrics: Samples in arrival order.

    Returns:
        One AggregatedMetric per identity, in first-seen-identity order.
    """
    groups: dict[IdentityKey, AggregatedMetric] = {}
    for metric in metrics:
        key = identity_key(metric.name, metric.dimensions)
        aggregate = groups.get(key)
        if aggregate is None:
            groups[key] = AggregatedMetric(metric)
        else:
            aggregate.push(metric)
    return list(groups.values())
