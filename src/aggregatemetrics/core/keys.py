"""Identity keys for grouping metrics.

Two metrics share an identity when they have the same name and the same
set of dimensions, regardless of the order the dimensions were listed in.
The key is a plain tuple so it can be used directly as a dict key.
"""

from collections.abc import Iterable

from aggregatemetrics.core.models import Dimension

CanonicalDimensions = tuple[tuple[str, str], ...]
IdentityKey = tuple[str, CanonicalDimensions]


def canonical_dimensions(
    dimensions: Iterable[Dimension] | None,
) -> CanonicalDimensions:
    """Return dimensions as (name, value) pairs sorted by name.

    Args:
        dimensions: Dimensions in caller order. None means no dimensions.

    Returns:
        Tuple of (name, value) pairs. Value breaks ties between equal names.
    """
    if not dimensions:
        return ()
    return tuple(sorted((d.name, d.value) for d in dimensions))


def identity_key(
    name: str, dimensions: Iterable[Dimension] | None = None
) -> IdentityKey:
    """Build the grouping key for a metric name and its dimensions."""
    return (name, canonical_dimensions(dimensions))


def rollup_key(name: str) -> IdentityKey:
    """Key of the dimension-less rollup for a metric name."""
    return (name, ())
