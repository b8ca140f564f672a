"""Core domain models for buffered metrics."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Dimension:
    """A name/value pair qualifying a metric's identity.

    Attributes:
        name: Dimension name (e.g., "host").
        value: Dimension value (e.g., "server1").
    """

    name: str
    value: str


DimensionLike = Dimension | tuple[str, str]


def _to_dimensions(
    dimensions: Iterable[DimensionLike] | None,
) -> tuple[Dimension, ...]:
    """Normalise dimension input to a tuple of Dimension, keeping order."""
    if not dimensions:
        return ()
    return tuple(
        d if isinstance(d, Dimension) else Dimension(name=d[0], value=d[1])
        for d in dimensions
    )


@dataclass(frozen=True)
class Metric:
    """A single observed sample.

    Attributes:
        name: Metric name (e.g., "requests").
        value: The sample value.
        timestamp: Optional Unix timestamp in seconds.
        unit: Optional unit (e.g., "Count", "Milliseconds").
        dimensions: Ordered dimensions. Pairs are accepted and converted
                    to Dimension; None and empty are the same identity.
    """

    name: str
    value: float
    timestamp: float | None = None
    unit: str | None = None
    dimensions: tuple[Dimension, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimensions", _to_dimensions(self.dimensions))


@dataclass(frozen=True)
class SingleValueMetric:
    """One datapoint carrying the summed value of an aggregate."""

    name: str
    dimensions: tuple[Dimension, ...]
    unit: str | None
    timestamp: float | None
    value: float


@dataclass(frozen=True)
class MetricSet:
    """A statistical set: every raw sample value of an aggregate.

    Attributes:
        name: Metric name.
        dimensions: Dimensions of the set; empty for a rollup.
        unit: Unit captured from the first contributing sample.
        timestamp: Timestamp captured from the first contributing sample.
        values: Sample values in merge order.
        counts: Optional occurrence count per entry in values.
    """

    name: str
    dimensions: tuple[Dimension, ...]
    unit: str | None
    timestamp: float | None
    values: tuple[float, ...]
    counts: tuple[int, ...] | None = None

    @property
    def sample_count(self) -> int:
        """Number of raw samples represented by this set."""
        if self.counts is None:
            return len(self.values)
        return sum(self.counts)

    def compacted(self) -> "MetricSet":
        """Collapse repeated values into unique values with parallel counts.

        Unique values keep their first-occurrence order. A set that already
        carries counts is returned unchanged.
        """
        if self.counts is not None:
            return self
        tally = Counter(self.values)
        return MetricSet(
            name=self.name,
            dimensions=self.dimensions,
            unit=self.unit,
            timestamp=self.timestamp,
            values=tuple(tally),
            counts=tuple(tally.values()),
        )
