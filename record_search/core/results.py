"""Per-field and per-record search results."""

from dataclasses import dataclass, field
from typing import Any, List, Tuple


@dataclass
class FieldResult:
    """Match of one searched field (or one element of a list field)."""
    key: str
    score: float
    matched_indices: List[Tuple[int, int]]
    value: str


@dataclass
class RecordResult:
    """Accumulated matches of one record, keyed by its position."""
    item: Any
    index: int
    output: List[FieldResult] = field(default_factory=list)
    score: float = 1.0
    children: List['RecordResult'] = field(default_factory=list)
