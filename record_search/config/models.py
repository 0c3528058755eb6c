"""Configuration models for the record search system."""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple, Union
import regex as re

from record_search.core.errors import InvalidWeightError
from record_search.core.preprocessor import get_value

# Width of a single mask block, in bits
WORD_SIZE = 32


def _score_of(result: Any) -> float:
    return result.score


@dataclass(frozen=True)
class SearchKey:
    """A searched field and its weight."""
    name: str
    weight: float = 1.0

    def __post_init__(self):
        """Reject weights outside (0, 1]."""
        if not isinstance(self.weight, (int, float)) or not 0 < self.weight <= 1:
            raise InvalidWeightError(self.name, self.weight)


@dataclass(frozen=True)
class RecursiveConfig:
    """Configuration for searching child collections."""
    enabled: bool = False
    key: Optional[str] = None


@dataclass(frozen=True)
class HighlightConfig:
    """Markers inserted around matched ranges."""
    enabled: bool = False
    prefix: str = '<b>'
    suffix: str = '</b>'


KeySpec = Union[str, SearchKey, Mapping[str, Any]]


def _to_search_key(key: KeySpec) -> SearchKey:
    if isinstance(key, SearchKey):
        return key
    if isinstance(key, str):
        return SearchKey(key)
    return SearchKey(key['name'], key.get('weight', 1.0))


@dataclass(frozen=True)
class SearchConfig:
    """Options for a search session. Never mutated during a search."""
    # Where in the text the pattern is expected to be found
    location: int = 0
    # How far from location an exact match may drift before it scores as a
    # complete mismatch; 0 requires the exact location
    distance: int = 100
    # 0.0 requires a perfect match, 1.0 matches anything
    threshold: float = 0.6
    max_pattern_length: int = WORD_SIZE
    case_sensitive: bool = False
    token_separator: Any = r' +'
    find_all_matches: bool = False
    min_match_char_length: int = 1
    tokenize: bool = False
    match_all_tokens: bool = False
    keys: Tuple[KeySpec, ...] = ()
    id: Optional[str] = None
    should_sort: bool = True
    sort_key: Callable[[Any], Any] = _score_of
    get_fn: Callable[[Any, str], list] = get_value
    include_matches: bool = False
    include_score: bool = False
    recursive: RecursiveConfig = field(default_factory=RecursiveConfig)
    highlight: HighlightConfig = field(default_factory=HighlightConfig)
    verbose: bool = False
    trace_sink: Optional[Callable[[str, dict], None]] = None
    workers: int = 1
    max_depth: int = 32

    def __post_init__(self):
        """Normalize keys and separator, and validate numeric options."""
        if self.location < 0:
            raise ValueError(f"location must be >= 0, got {self.location}")
        if self.distance < 0:
            raise ValueError(f"distance must be >= 0, got {self.distance}")
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {self.threshold}")
        if self.max_pattern_length < 1:
            raise ValueError("max_pattern_length must be >= 1")
        if self.min_match_char_length < 1:
            raise ValueError("min_match_char_length must be >= 1")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.recursive.enabled and not self.recursive.key:
            raise ValueError("recursive search needs a key")

        object.__setattr__(
            self,
            'keys',
            tuple(_to_search_key(key) for key in self.keys)
        )
        if isinstance(self.token_separator, str):
            object.__setattr__(
                self,
                'token_separator',
                re.compile(self.token_separator)
            )

    @property
    def key_names(self) -> Tuple[str, ...]:
        return tuple(key.name for key in self.keys)
