"""Main record search entry point."""

from dataclasses import replace
from typing import Any, Iterable, List, Optional
import logging
import time
import pandas as pd

from record_search.config.models import SearchConfig
from record_search.config.weights import build_weight_map
from record_search.core.errors import EmptyPatternError
from record_search.core.formatter import format_results, rank_results
from record_search.core.orchestrator import CancellationToken, FieldSearcher
from record_search.core.results import RecordResult
from record_search.core.tracing import Tracer


class Searcher:
    """
    Fuzzy search over an in-memory collection of strings or records.
    """

    def __init__(
        self,
        collection: Iterable[Any],
        config: Optional[SearchConfig] = None,
        **options: Any
    ):
        """
        Initialize the searcher.

        Args:
            collection: Strings, mappings, objects or a DataFrame
            config: Search configuration; defaults are used when omitted
            **options: SearchConfig fields overriding config

        Raises:
            InvalidWeightError: If a key weight is outside (0, 1]
        """
        if config is None:
            config = SearchConfig(**options)
        elif options:
            config = replace(config, **options)

        self.config = config
        self.weights = build_weight_map(config.keys)
        self.tracer = Tracer(config.trace_sink, config.verbose)

        self._initialize_logging()
        self.set(collection)

    def _initialize_logging(self) -> None:
        """Setup logging configuration."""
        self.logger = logging.getLogger('record_search')
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s - %(levelname)s - %(message)s'
                )
            )
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)
        if self.config.verbose:
            self.logger.setLevel(logging.DEBUG)
        elif self.logger.level == logging.DEBUG:
            # Left over from an earlier verbose searcher
            self.logger.setLevel(logging.INFO)

    def set(self, collection: Iterable[Any]) -> List[Any]:
        """
        Replace the searched collection.

        DataFrames are searched row by row as records.
        """
        if isinstance(collection, pd.DataFrame):
            collection = collection.to_dict('records')
        self.collection = list(collection)
        return self.collection

    def search(
        self,
        pattern: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> List[Any]:
        """
        Search the collection.

        An empty pattern matches every record with a perfect score.

        Args:
            pattern: Query string
            cancel_token: Optional token; a cancelled search raises
                SearchCancelledError

        Returns:
            List[Any]: Ranked results, shaped by the formatting options
        """
        start_time = time.time()
        if self.config.verbose:
            self.logger.debug(f'Search pattern: "{pattern}"')

        try:
            field_searcher = FieldSearcher.for_pattern(
                pattern, self.config, self.weights, self.tracer
            )
        except EmptyPatternError:
            results = self._match_everything()
        else:
            results = field_searcher.search(
                self.collection,
                cancel_token=cancel_token,
                ancestors=frozenset({id(self.collection)})
            )

        output = format_results(results, self.config)

        if self.tracer.enabled:
            self.tracer.emit(
                'search_completed',
                pattern=pattern,
                matches=len(output),
                records=len(self.collection)
            )
        self.logger.info(
            f"Search for '{pattern}' matched {len(output)} of {len(self.collection)} "
            f"records in {time.time() - start_time:.3f} seconds"
        )
        return output

    def _match_everything(self) -> List[RecordResult]:
        results = [
            RecordResult(item=item, index=index, score=0.0)
            for index, item in enumerate(self.collection)
        ]
        return rank_results(results, self.config)
