"""Ranking and formatting of search results."""

from typing import Any, Callable, Dict, List, Sequence, Tuple

from record_search.config.models import SearchConfig
from record_search.core.results import RecordResult

Transformer = Callable[[RecordResult, Dict[str, Any], SearchConfig], None]


def rank_results(results: List[RecordResult], config: SearchConfig) -> List[RecordResult]:
    """Sort results by config.sort_key when sorting is enabled; the sort is stable."""
    if config.should_sort:
        return sorted(results, key=config.sort_key)
    return results


def highlight(
    text: str,
    indices: Sequence[Tuple[int, int]],
    prefix: str = '<b>',
    suffix: str = '</b>'
) -> str:
    """
    Wrap every closed (start, end) range of text in prefix and suffix.

    >>> highlight('hello world', [(0, 4)])
    '<b>hello</b> world'
    """
    parts = []
    cursor = 0
    for start, end in sorted(indices):
        parts.append(text[cursor:start])
        parts.append(f"{prefix}{text[start:end + 1]}{suffix}")
        cursor = end + 1
    parts.append(text[cursor:])
    return ''.join(parts)


def _add_matches(result: RecordResult, data: Dict[str, Any], config: SearchConfig) -> None:
    matches = []
    for field_result in result.output:
        match = {
            'indices': list(field_result.matched_indices),
            'value': field_result.value
        }
        if field_result.key:
            match['key'] = field_result.key
        if config.highlight.enabled:
            match['highlighted'] = highlight(
                field_result.value,
                field_result.matched_indices,
                config.highlight.prefix,
                config.highlight.suffix
            )
        matches.append(match)
    data['matches'] = matches


def _add_score(result: RecordResult, data: Dict[str, Any], config: SearchConfig) -> None:
    data['score'] = result.score


def format_results(results: List[RecordResult], config: SearchConfig) -> List[Any]:
    """
    Turn ranked results into the shapes returned to callers.

    Args:
        results: Ranked record results
        config: Search configuration

    Returns:
        List[Any]: Plain items, identifiers, or dicts with 'item' plus
            'matches' and/or 'score'
    """
    transformers: List[Transformer] = []
    if config.include_matches:
        transformers.append(_add_matches)
    if config.include_score:
        transformers.append(_add_score)

    final_output = []
    for result in results:
        item = result.item
        if config.id:
            identifiers = config.get_fn(item, config.id)
            item = identifiers[0] if identifiers else None

        if not transformers:
            final_output.append(item)
            continue

        data = {'item': item}
        for transformer in transformers:
            transformer(result, data, config)
        final_output.append(data)

    return final_output
