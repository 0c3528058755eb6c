"""Unit tests for pattern compilation."""

import pytest

from record_search.core.errors import EmptyPatternError, PatternTooLongWarning
from record_search.core.pattern import build_alphabet, compile_pattern, fold_case


@pytest.mark.unit
class TestFoldCase:
    """Tests for fold_case."""

    def test_lowercases(self):
        assert fold_case("HeLLo World") == "hello world"

    def test_keeps_length_for_expanding_characters(self):
        # 'İ'.lower() is two characters long
        text = "İSTANBUL"
        folded = fold_case(text)

        assert len(folded) == len(text)
        assert folded == "İstanbul"


@pytest.mark.unit
class TestBuildAlphabet:
    """Tests for per-character masks."""

    def test_last_character_is_lowest_bit(self):
        assert build_alphabet("abc") == {'a': (0b100,), 'b': (0b010,), 'c': (0b001,)}

    def test_repeated_characters_share_a_mask(self):
        assert build_alphabet("aba") == {'a': (0b101,), 'b': (0b010,)}

    def test_long_patterns_use_several_blocks(self):
        pattern = "abcdefghijklmnopqrstuvwxyz0123456789!@#$"
        alphabet = build_alphabet(pattern)

        assert len(pattern) == 40
        # Position 0 is bit 39: block 1, bit 7
        assert alphabet['a'] == (0, 1 << 7)
        # Position 39 is bit 0
        assert alphabet['$'] == (1, 0)
        # Position 8 is bit 31: top of block 0
        assert alphabet['i'] == (1 << 31, 0)


@pytest.mark.unit
class TestCompilePattern:
    """Tests for compile_pattern."""

    def test_folds_case_by_default(self):
        compiled = compile_pattern("Hello")

        assert compiled.text == "hello"
        assert compiled.length == 5
        assert compiled.n_blocks == 1

    def test_case_sensitive_keeps_case(self):
        compiled = compile_pattern("Hello", case_sensitive=True)

        assert compiled.text == "Hello"
        assert 'H' in compiled.alphabet

    def test_empty_pattern_raises(self):
        with pytest.raises(EmptyPatternError):
            compile_pattern("")

    def test_long_pattern_is_truncated_with_warning(self):
        with pytest.warns(PatternTooLongWarning):
            compiled = compile_pattern("x" * 40, max_pattern_length=32)

        assert compiled.length == 32

    def test_longer_cap_keeps_pattern_in_blocks(self):
        compiled = compile_pattern("y" * 40, max_pattern_length=64)

        assert compiled.length == 40
        assert compiled.n_blocks == 2

    def test_mask_for_unknown_character_is_zero(self):
        compiled = compile_pattern("y" * 40, max_pattern_length=64)

        assert compiled.mask_for('z') == (0, 0)
