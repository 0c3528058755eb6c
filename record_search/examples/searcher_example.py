"""Example usage of the record search system with CSV or Excel files."""

import pandas as pd
import logging
from pathlib import Path
from typing import Optional

from record_search.config.models import (
    SearchConfig,
    SearchKey,
    HighlightConfig
)
from record_search.core import searcher


def create_book_searcher(
    books: pd.DataFrame,
    workers: int = 1,
    include_matches: bool = False
) -> searcher.Searcher:
    """
    Create a searcher configured for a book catalogue.

    Args:
        books: Catalogue with 'title', 'author' and 'isbn' columns
        workers: Number of worker threads
        include_matches: Whether to include matched ranges and highlights

    Returns:
        Searcher: Configured searcher instance
    """
    config = SearchConfig(
        keys=(
            SearchKey('title', weight=0.7),
            SearchKey('author', weight=0.3),
        ),
        threshold=0.4,
        distance=100,
        tokenize=True,
        id='isbn',
        include_score=True,
        include_matches=include_matches,
        highlight=HighlightConfig(enabled=include_matches),
        workers=workers
    )
    return searcher.Searcher(books, config)


def _read_table(path: Path) -> pd.DataFrame:
    if path.suffix in ('.xlsx', '.xls'):
        return pd.read_excel(path, dtype=str).fillna('')
    return pd.read_csv(path, dtype=str).fillna('')


def _write_table(results: pd.DataFrame, path: Path) -> None:
    if path.suffix == '.xlsx':
        with pd.ExcelWriter(
            path,
            engine='xlsxwriter',
            engine_kwargs={'options': {'strings_to_urls': False}}
        ) as writer:
            results.to_excel(writer, index=False)
    else:
        results.to_csv(path, index=False)


def search_catalogue_file(
    catalogue_file: Path,
    query: str,
    output_file: Optional[Path] = None,
    workers: int = 1
) -> pd.DataFrame:
    """
    Search a book catalogue stored in a CSV or Excel file.

    Args:
        catalogue_file: Path to the catalogue
        query: Search query
        output_file: Optional CSV or .xlsx path for the ranked results
        workers: Number of worker threads

    Returns:
        pd.DataFrame: Ranked ISBNs with their scores
    """
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )

        logging.info(f"Reading catalogue: {catalogue_file}")
        books = _read_table(catalogue_file)

        book_searcher = create_book_searcher(books, workers=workers)

        logging.info(f"Searching for '{query}'...")
        results = pd.DataFrame(
            [{'isbn': r['item'], 'score': r['score']} for r in book_searcher.search(query)],
            columns=['isbn', 'score']
        )

        logging.info(f"Matched {len(results)} of {len(books)} books")
        for row in results.head(5).itertuples():
            logging.info(f"{row.isbn}: score {row.score:.3f}")

        if output_file:
            logging.info(f"Saving results to: {output_file}")
            _write_table(results, output_file)

        return results

    except Exception as e:
        logging.error(f"An error occurred: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    results_df = search_catalogue_file(
        catalogue_file=Path('data/books.csv'),
        query='old man sea',
        output_file=Path('data/search_results.csv'),
        workers=4
    )
