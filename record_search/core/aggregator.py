"""Combination of per-field scores into one score per record."""

from typing import Iterable, Optional
import numpy as np

from record_search.config.weights import UNWEIGHTED, WeightMap
from record_search.core.results import RecordResult
from record_search.core.tracing import NULL_TRACER, Tracer


def aggregate(weights: Optional[WeightMap], result: RecordResult) -> float:
    """
    Compute a record's ranking score from its field results.

    Weighted fields gate the score: when any field has a multiplier other
    than 1, the score is the lowest weighted field score and unweighted
    fields are ignored. Otherwise it is the mean of all field scores.

    Args:
        weights: Multiplier per key, or None for flat string collections
        result: Record with at least one field result or child result

    Returns:
        float: Aggregate score, lower is better
    """
    if not result.output:
        # Only reachable through matching children
        return min((child.score for child in result.children), default=1.0)

    weighted = [
        field_result.score * weights[field_result.key]
        for field_result in result.output
        if weights and weights.get(field_result.key, UNWEIGHTED) != UNWEIGHTED
    ]
    if weighted:
        return min(weighted)
    return float(np.mean([field_result.score for field_result in result.output]))


def aggregate_results(
    weights: Optional[WeightMap],
    results: Iterable[RecordResult],
    tracer: Tracer = NULL_TRACER
) -> None:
    """Set the aggregate score on every result."""
    for result in results:
        result.score = aggregate(weights, result)
        if tracer.enabled:
            tracer.emit(
                'score_computed',
                index=result.index,
                fields=[(f.key, f.score) for f in result.output],
                score=result.score
            )
