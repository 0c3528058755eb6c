"""Unit tests for ranking and formatting."""

from functools import cmp_to_key

import pytest

from record_search.config.models import HighlightConfig, SearchConfig
from record_search.core.formatter import format_results, highlight, rank_results
from record_search.core.results import FieldResult, RecordResult


def make_results():
    return [
        RecordResult(
            item={'id': 'b', 'title': 'second'},
            index=0,
            output=[FieldResult('title', 0.5, [(0, 2)], 'second')],
            score=0.5
        ),
        RecordResult(
            item={'id': 'a', 'title': 'first'},
            index=1,
            output=[FieldResult('title', 0.1, [(0, 4)], 'first')],
            score=0.1
        ),
    ]


@pytest.mark.unit
class TestHighlight:
    """Tests for highlight."""

    def test_wraps_ranges(self):
        assert highlight("hello world", [(0, 4)]) == "<b>hello</b> world"

    def test_several_ranges_and_custom_markers(self):
        text = highlight("abcdef", [(4, 5), (0, 1)], '[', ']')

        assert text == "[ab]cd[ef]"

    def test_no_ranges(self):
        assert highlight("abc", []) == "abc"


@pytest.mark.unit
class TestRankResults:
    """Tests for rank_results."""

    def test_sorts_by_score(self):
        ranked = rank_results(make_results(), SearchConfig())

        assert [r.item['id'] for r in ranked] == ['a', 'b']

    def test_no_sort_keeps_order(self):
        ranked = rank_results(make_results(), SearchConfig(should_sort=False))

        assert [r.item['id'] for r in ranked] == ['b', 'a']

    def test_custom_sort_key(self):
        config = SearchConfig(sort_key=lambda r: r.item['title'])

        assert [r.item['id'] for r in rank_results(make_results(), config)] == ['a', 'b']

    def test_comparator_through_cmp_to_key(self):
        def by_title_descending(a, b):
            return (a.item['title'] < b.item['title']) - (a.item['title'] > b.item['title'])

        config = SearchConfig(sort_key=cmp_to_key(by_title_descending))

        assert [r.item['id'] for r in rank_results(make_results(), config)] == ['b', 'a']


@pytest.mark.unit
class TestFormatResults:
    """Tests for format_results."""

    def test_plain_items(self):
        results = make_results()

        assert format_results(results, SearchConfig()) == [r.item for r in results]

    def test_id_projection(self):
        assert format_results(make_results(), SearchConfig(id='id')) == ['b', 'a']

    def test_score_and_matches(self):
        config = SearchConfig(include_score=True, include_matches=True)
        data = format_results(make_results(), config)[0]

        assert data['item']['id'] == 'b'
        assert data['score'] == 0.5
        assert data['matches'] == [{'indices': [(0, 2)], 'value': 'second', 'key': 'title'}]

    def test_highlighting(self):
        config = SearchConfig(
            include_matches=True,
            highlight=HighlightConfig(enabled=True, prefix='<em>', suffix='</em>')
        )
        data = format_results(make_results(), config)[1]

        assert data['matches'][0]['highlighted'] == '<em>first</em>'

    def test_empty_key_is_omitted(self):
        result = RecordResult('abc', 0, [FieldResult('', 0.0, [(0, 2)], 'abc')], 0.0)
        data = format_results([result], SearchConfig(include_matches=True))[0]

        assert 'key' not in data['matches'][0]
