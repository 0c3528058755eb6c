"""
Record Search
=============

Approximate ("fuzzy") string search over in-memory collections of strings
or records, built on a bit-parallel Bitap matcher.

Key Features:
- Error- and location-aware scoring of every match
- Nested field access with per-field weights
- Optional tokenized search with an all-tokens mode
- Recursive search into child collections
- Match indices and highlighting for display
- Parallel processing support
"""

from record_search.core.searcher import Searcher
from record_search.core.orchestrator import CancellationToken, FieldSearcher
from record_search.core.bitap import BitapMatcher, MatchOutcome, bitap_score
from record_search.core.pattern import CompiledPattern, compile_pattern, fold_case
from record_search.core.aggregator import aggregate
from record_search.core.preprocessor import get_value

from record_search.config.models import (
    SearchConfig,
    SearchKey,
    RecursiveConfig,
    HighlightConfig,
    WORD_SIZE
)
from record_search.config.weights import build_weight_map
from record_search.core.errors import (
    RecordSearchError,
    InvalidWeightError,
    EmptyPatternError,
    SearchCancelledError,
    PatternTooLongWarning
)

__version__ = "1.0.0"
