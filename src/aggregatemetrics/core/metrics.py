"""Metric helper functions for creating Metric objects."""

import time

from aggregatemetrics.core.models import Dimension, Metric


def _dimensions(dimensions: dict[str, str] | None) -> tuple[Dimension, ...]:
    return tuple(Dimension(name=k, value=v) for k, v in (dimensions or {}).items())


def metric(
    name: str,
    value: float,
    dimensions: dict[str, str] | None = None,
    unit: str | None = None,
) -> Metric:
    """Create a metric sample stamped with the current time.

    Args:
        name: Metric name (e.g., "queue_depth")
        value: Observed value
        dimensions: Optional dimensions, kept in dict order
        unit: Optional unit (e.g., "Milliseconds")

    Returns:
        Metric with current timestamp
    """
    return Metric(
        name=name,
        value=value,
        timestamp=time.time(),
        unit=unit,
        dimensions=_dimensions(dimensions),
    )


def counter(
    name: str,
    value: float = 1.0,
    dimensions: dict[str, str] | None = None,
) -> Metric:
    """Create a counter metric sample.

    Args:
        name: Metric name (e.g., "requests")
        value: Increment value (default: 1.0)
        dimensions: Optional dimensions

    Returns:
        Metric with unit "Count" and current timestamp
    """
    return metric(name, value, dimensions=dimensions, unit="Count")


def gauge(
    name: str,
    value: float,
    dimensions: dict[str, str] | None = None,
    unit: str | None = None,
) -> Metric:
    """Create a gauge metric sample.

    Args:
        name: Metric name (e.g., "cpu_percent")
        value: Current gauge value
        dimensions: Optional dimensions
        unit: Optional unit (e.g., "Percent")

    Returns:
        Metric with current timestamp
    """
    return metric(name, value, dimensions=dimensions, unit=unit)
