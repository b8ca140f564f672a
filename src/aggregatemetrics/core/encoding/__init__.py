"""Encoders for aggregated metric views."""

from aggregatemetrics.core.encoding.ndjson import (
    encode_ndjson,
    metric_set_to_dict,
    single_value_to_dict,
)

__all__ = ["encode_ndjson", "metric_set_to_dict", "single_value_to_dict"]
