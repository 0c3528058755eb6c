"""Field value access and preprocessing for record search."""

from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union
from functools import lru_cache
import numbers
import numpy as np
import pandas as pd
import regex as re

_SEGMENT_PATTERN = re.compile(r'\[(\d+)\]|([^.\[\]]+)')

PathSegment = Union[str, int]


def is_null(value: Any) -> bool:
    """Check if value is null/empty (None, NaN, NaT, NA)."""
    return value is None or (pd.api.types.is_scalar(value) and bool(pd.isna(value)))


def is_sequence(value: Any) -> bool:
    """Lists, tuples and arrays count as sequences; strings do not."""
    return isinstance(value, (list, tuple, np.ndarray, pd.Series))


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, numbers.Number)
        and not isinstance(value, (bool, np.bool_))
    )


def to_text(value: Any) -> Optional[str]:
    """
    Convert a field value to searchable text.

    Args:
        value: Raw value resolved from a record

    Returns:
        Optional[str]: The text, or None when the value can't be searched
    """
    if is_null(value):
        return None
    if isinstance(value, str):
        return value
    if _is_number(value):
        return str(value)
    return None


@lru_cache(maxsize=1024)
def parse_path(path: str) -> Tuple[PathSegment, ...]:
    """
    Split a dotted/bracket path into segments.

    >>> parse_path('authors[0].name')
    ('authors', 0, 'name')
    """
    segments: List[PathSegment] = []
    for match in _SEGMENT_PATTERN.finditer(path):
        index, name = match.groups()
        segments.append(int(index) if index is not None else name)
    return tuple(segments)


def _child(obj: Any, segment: PathSegment) -> Any:
    if isinstance(segment, int):
        if is_sequence(obj) and -len(obj) <= segment < len(obj):
            return obj[segment]
        if isinstance(obj, Mapping):
            return obj.get(segment)
        return None
    if isinstance(obj, Mapping):
        return obj.get(segment)
    return getattr(obj, segment, None)


def _collect(obj: Any, segments: Sequence[PathSegment], out: List[Any]) -> None:
    if not segments:
        out.append(obj)
        return

    value = _child(obj, segments[0])
    if is_null(value):
        return

    remaining = segments[1:]
    if not remaining and isinstance(value, str):
        out.append(value)
    elif not remaining and _is_number(value):
        out.append(str(value))
    elif is_sequence(value) and not (remaining and isinstance(remaining[0], int)):
        for element in value:
            _collect(element, remaining, out)
    elif remaining:
        _collect(value, remaining, out)


def get_value(record: Any, path: str) -> List[Any]:
    """
    Resolve a nested path on a record.

    Sequences met along the path fan out over every element, so the result
    is always a list. Missing segments give an empty list.

    Args:
        record: Mapping or object to read from
        path: Dotted path with optional bracket indices, e.g. 'author.name'

    Returns:
        List[Any]: Every value found at the path
    """
    out: List[Any] = []
    if not path:
        out.append(record)
        return out
    _collect(record, parse_path(path), out)
    return out
