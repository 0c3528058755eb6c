"""Field and token search over record collections."""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, FrozenSet, List, Mapping, Optional, Sequence
import copy
import logging
import threading
import numpy as np

from record_search.config.models import SearchConfig
from record_search.config.weights import WeightMap
from record_search.core.aggregator import aggregate_results
from record_search.core.bitap import BitapMatcher
from record_search.core.errors import EmptyPatternError, SearchCancelledError
from record_search.core.formatter import format_results, rank_results
from record_search.core.pattern import compile_pattern
from record_search.core.preprocessor import is_sequence, to_text
from record_search.core.results import FieldResult, RecordResult
from record_search.core.tracing import NULL_TRACER, Tracer

logger = logging.getLogger(__name__)

Arena = List[Optional[RecordResult]]


class CancellationToken:
    """Cooperative cancellation flag, checked between records."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SearchCancelledError("Search was cancelled")


def _with_children(item: Any, key: str, children: List[Any]) -> Any:
    """Shallow copy of item with key replaced; item itself is untouched."""
    if isinstance(item, Mapping):
        updated = dict(item)
        updated[key] = children
        return updated
    updated = copy.copy(item)
    setattr(updated, key, children)
    return updated


def _child_collection(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


class FieldSearcher:
    """
    Runs the matchers of one query over the fields of every record.

    Holds the full-text matcher and the per-token matchers; both are built
    once per query and reused for every record, field and child collection.
    """

    def __init__(
        self,
        full_matcher: BitapMatcher,
        token_matchers: Sequence[BitapMatcher],
        config: SearchConfig,
        weights: Optional[WeightMap] = None,
        tracer: Tracer = NULL_TRACER
    ):
        self.full_matcher = full_matcher
        self.token_matchers = list(token_matchers)
        self.config = config
        self.weights = weights
        self.tracer = tracer

    @classmethod
    def for_pattern(
        cls,
        pattern: str,
        config: SearchConfig,
        weights: Optional[WeightMap] = None,
        tracer: Tracer = NULL_TRACER
    ) -> 'FieldSearcher':
        """
        Compile the matchers for a query.

        Raises:
            EmptyPatternError: If the query is empty
        """
        full_matcher = BitapMatcher(
            compile_pattern(pattern, config.case_sensitive, config.max_pattern_length),
            config
        )

        token_matchers = []
        if config.tokenize:
            for token in config.token_separator.split(pattern):
                try:
                    compiled = compile_pattern(
                        token,
                        config.case_sensitive,
                        config.max_pattern_length
                    )
                except EmptyPatternError:
                    continue
                token_matchers.append(BitapMatcher(compiled, config))

        if tracer.enabled:
            tracer.emit(
                'pattern_compiled',
                pattern=full_matcher.pattern.text,
                blocks=full_matcher.pattern.n_blocks,
                tokens=[matcher.pattern.text for matcher in token_matchers]
            )

        return cls(full_matcher, token_matchers, config, weights, tracer)

    def search(
        self,
        records: Sequence[Any],
        cancel_token: Optional[CancellationToken] = None,
        depth: int = 0,
        ancestors: FrozenSet[int] = frozenset()
    ) -> List[RecordResult]:
        """
        Search a collection and return its scored, ranked results.

        Args:
            records: Strings, mappings or objects
            cancel_token: Optional token checked before every record
            depth: Current recursion depth
            ancestors: Identities of the collections above this one

        Returns:
            List[RecordResult]: Matching records, ranked
        """
        arena: Arena = [None] * len(records)
        if not records:
            return []

        flat = isinstance(records[0], str)

        def run(indices) -> None:
            for index in indices:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                self._search_record(
                    records, int(index), flat, arena,
                    cancel_token, depth, ancestors
                )

        workers = min(self.config.workers, len(records))
        if workers > 1 and depth == 0:
            # Each chunk owns a disjoint range of arena slots
            chunks = np.array_split(np.arange(len(records)), workers)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(run, chunk) for chunk in chunks]
                for future in futures:
                    future.result()
        else:
            run(range(len(records)))

        results = [result for result in arena if result is not None]
        aggregate_results(None if flat else self.weights, results, self.tracer)
        return rank_results(results, self.config)

    def _search_record(
        self,
        records: Sequence[Any],
        index: int,
        flat: bool,
        arena: Arena,
        cancel_token: Optional[CancellationToken],
        depth: int,
        ancestors: FrozenSet[int]
    ) -> None:
        item = records[index]
        if flat:
            try:
                self._analyze('', item, item, index, arena)
            except Exception as e:
                logger.warning(f"Error searching record {index}: {e}")
            return

        for key in self.config.keys:
            try:
                self._analyze(
                    key.name,
                    self.config.get_fn(item, key.name),
                    item,
                    index,
                    arena
                )
            except Exception as e:
                logger.warning(f"Error searching key '{key.name}' of record {index}: {e}")

        if self.config.recursive.enabled:
            try:
                self._search_children(item, index, arena, cancel_token, depth, ancestors)
            except SearchCancelledError:
                raise
            except Exception as e:
                logger.warning(f"Error searching children of record {index}: {e}")

    def _search_children(
        self,
        item: Any,
        index: int,
        arena: Arena,
        cancel_token: Optional[CancellationToken],
        depth: int,
        ancestors: FrozenSet[int]
    ) -> None:
        key = self.config.recursive.key
        children = _child_collection(item, key)
        if not is_sequence(children) or len(children) == 0:
            return

        if id(children) in ancestors:
            logger.warning(f"Cycle detected under key '{key}' in record {index}; not descending")
            return
        if depth >= self.config.max_depth:
            logger.warning(
                f"Recursion depth {self.config.max_depth} reached in record {index}; "
                "not descending"
            )
            return

        child_results = self.search(
            list(children), cancel_token, depth + 1, ancestors | {id(children)}
        )
        existing = arena[index]
        if existing is not None:
            existing.item = _with_children(
                existing.item, key, format_results(child_results, self.config)
            )
            existing.children = child_results
        elif child_results:
            arena[index] = RecordResult(
                item=_with_children(item, key, format_results(child_results, self.config)),
                index=index,
                children=child_results
            )

    def _analyze(self, key: str, value: Any, record: Any, index: int, arena: Arena) -> None:
        """Search one value, fanning out over sequences, and record a match."""
        if is_sequence(value):
            for element in value:
                self._analyze(key, element, record, index, arena)
            return

        text = to_text(value)
        if text is None:
            return

        field_result = self._score_text(key, text)
        if field_result is None:
            return

        existing = arena[index]
        if existing is None:
            arena[index] = RecordResult(item=record, index=index, output=[field_result])
        else:
            existing.output.append(field_result)

    def _score_text(self, key: str, text: str) -> Optional[FieldResult]:
        """
        Score a field's text against the full query and its tokens.

        Returns:
            Optional[FieldResult]: The field's result, or None if excluded
        """
        config = self.config
        main = self.full_matcher.search(text)

        token_scores: List[float] = []
        matched_tokens = 0
        token_hit = False
        if config.tokenize:
            words = [word for word in config.token_separator.split(text) if word]
            for matcher in self.token_matchers:
                has_match_in_text = False
                for word in words:
                    outcome = matcher.search(word)
                    if outcome.is_match:
                        token_hit = has_match_in_text = True
                        token_scores.append(outcome.score)
                    elif not config.match_all_tokens:
                        token_scores.append(1.0)
                if has_match_in_text:
                    matched_tokens += 1

        token_average = float(np.mean(token_scores)) if token_scores else None
        score = main.score
        if token_average is not None:
            score = (score + token_average) / 2

        all_tokens_matched = (
            not (config.tokenize and config.match_all_tokens)
            or matched_tokens >= len(self.token_matchers)
        )

        if self.tracer.enabled:
            self.tracer.emit(
                'field_scored',
                key=key,
                text=text,
                full_score=main.score,
                token_average=token_average,
                score=score,
                all_tokens_matched=all_tokens_matched
            )

        if not ((token_hit or main.is_match) and all_tokens_matched):
            return None

        return FieldResult(
            key=key,
            score=score,
            matched_indices=main.matched_indices,
            value=text
        )
