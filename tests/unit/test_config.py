"""Unit tests for configuration models and weights."""

import pytest

from record_search.config.models import RecursiveConfig, SearchConfig, SearchKey
from record_search.config.weights import build_weight_map, derive_weight
from record_search.core.errors import InvalidWeightError


@pytest.mark.unit
class TestSearchConfig:
    """Tests for SearchConfig defaults and validation."""

    def test_defaults(self):
        config = SearchConfig()

        assert config.location == 0
        assert config.distance == 100
        assert config.threshold == 0.6
        assert config.max_pattern_length == 32
        assert config.case_sensitive is False
        assert config.should_sort is True
        assert config.keys == ()

    def test_keys_are_normalized(self):
        config = SearchConfig(keys=['title', {'name': 'author', 'weight': 0.3}])

        assert config.keys == (SearchKey('title'), SearchKey('author', 0.3))
        assert config.key_names == ('title', 'author')

    def test_token_separator_is_compiled(self):
        config = SearchConfig(token_separator=r'[ ,]+')

        assert config.token_separator.split("a, b c") == ['a', 'b', 'c']

    @pytest.mark.parametrize('options', [
        {'threshold': 1.5},
        {'threshold': -0.1},
        {'location': -1},
        {'distance': -5},
        {'max_pattern_length': 0},
        {'min_match_char_length': 0},
        {'workers': 0},
    ])
    def test_invalid_values_raise(self, options):
        with pytest.raises(ValueError):
            SearchConfig(**options)

    def test_recursive_needs_key(self):
        with pytest.raises(ValueError):
            SearchConfig(recursive=RecursiveConfig(enabled=True))

    @pytest.mark.parametrize('weight', [0, -0.5, 1.5])
    def test_invalid_weight_raises(self, weight):
        with pytest.raises(InvalidWeightError):
            SearchConfig(keys=[{'name': 'title', 'weight': weight}])


@pytest.mark.unit
class TestWeights:
    """Tests for weight map derivation."""

    def test_unit_weight_is_unweighted(self):
        assert derive_weight(1) == 1.0

    def test_heavier_keys_get_smaller_multipliers(self):
        assert derive_weight(0.7) == pytest.approx(0.3)
        assert derive_weight(0.9) < derive_weight(0.1)

    def test_build_weight_map(self):
        weights = build_weight_map([SearchKey('title'), SearchKey('author', 0.5)])

        assert weights == {'title': 1.0, 'author': 0.5}

    def test_build_weight_map_rejects_bad_weights(self):
        bad_key = SearchKey('title')
        object.__setattr__(bad_key, 'weight', 2.0)

        with pytest.raises(InvalidWeightError):
            build_weight_map([bad_key])
