"""Field weight derivation for score aggregation."""

from typing import Dict, Iterable

from record_search.config.models import SearchKey
from record_search.core.errors import InvalidWeightError

# Multiplier that marks a field as unweighted
UNWEIGHTED = 1.0

WeightMap = Dict[str, float]


def derive_weight(weight: float) -> float:
    """
    Turn a configured key weight into a score multiplier.

    A heavier key gets a smaller multiplier, so its scores rank better. A
    configured weight of 1 maps to the unweighted marker.

    Args:
        weight: Configured weight, within (0, 1]

    Returns:
        float: Multiplier applied to the field's score
    """
    return (1 - weight) or UNWEIGHTED


def build_weight_map(keys: Iterable[SearchKey]) -> WeightMap:
    """
    Build the per-key multipliers used by the aggregator.

    Args:
        keys: Searched keys

    Returns:
        WeightMap: Multiplier per key name

    Raises:
        InvalidWeightError: If any weight is outside (0, 1]
    """
    weights: WeightMap = {}
    for key in keys:
        if not 0 < key.weight <= 1:
            raise InvalidWeightError(key.name, key.weight)
        weights[key.name] = derive_weight(key.weight)
    return weights
