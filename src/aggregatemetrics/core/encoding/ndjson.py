"""NDJSON encoder for aggregated metric views."""

import json
from collections.abc import Iterable
from typing import Any

from aggregatemetrics.core.aggregate import AggregatedMetric
from aggregatemetrics.core.models import Dimension, MetricSet, SingleValueMetric


def _dimensions_to_list(dimensions: tuple[Dimension, ...]) -> list[dict[str, str]]:
    return [{"name": d.name, "value": d.value} for d in dimensions]


def _base_fields(
    view: MetricSet | SingleValueMetric,
) -> dict[str, Any]:
    obj: dict[str, Any] = {"name": view.name}
    if view.dimensions:
        obj["dimensions"] = _dimensions_to_list(view.dimensions)
    if view.unit is not None:
        obj["unit"] = view.unit
    if view.timestamp is not None:
        obj["timestamp"] = view.timestamp
    return obj


def single_value_to_dict(view: SingleValueMetric) -> dict[str, Any]:
    """Convert a single-value view to a JSON-ready dict.

    Empty dimensions and None unit/timestamp are omitted.
    """
    obj = _base_fields(view)
    obj["value"] = view.value
    return obj


def metric_set_to_dict(view: MetricSet) -> dict[str, Any]:
    """Convert a value-set view to a JSON-ready dict.

    Empty dimensions, None unit/timestamp and absent counts are omitted.
    """
    obj = _base_fields(view)
    obj["values"] = list(view.values)
    if view.counts is not None:
        obj["counts"] = list(view.counts)
    return obj


def encode_ndjson(
    entries: Iterable[MetricSet | SingleValueMetric | AggregatedMetric],
) -> str:
    """Encode metric views to newline-delimited JSON.

    Aggregates are encoded in their value-set shape.

    Args:
        entries: An iterable of MetricSet, SingleValueMetric or AggregatedMetric.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no entries.
    """
    lines = []
    for entry in entries:
        if isinstance(entry, AggregatedMetric):
            entry = entry.as_value_set()
        if isinstance(entry, SingleValueMetric):
            obj = single_value_to_dict(entry)
        else:
            obj = metric_set_to_dict(entry)
        lines.append(json.dumps(obj))

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
