"""Bit-parallel approximate matching (Bitap, Wu-Manber variant) with scoring."""

from dataclasses import dataclass, field
from functools import reduce
from typing import List, Optional, Tuple
import operator
import numpy as np

from record_search.config.models import SearchConfig, WORD_SIZE
from record_search.core.pattern import Blocks, CompiledPattern, WORD_MASK, fold_case

Range = Tuple[int, int]
Rows = List[Optional[Blocks]]


@dataclass
class MatchOutcome:
    """Result of matching one pattern against one text."""
    is_match: bool
    score: float
    matched_indices: List[Range] = field(default_factory=list)

    @classmethod
    def no_match(cls) -> 'MatchOutcome':
        return cls(is_match=False, score=1.0)


def bitap_score(
    errors: int,
    current_location: int,
    expected_location: int,
    distance: int,
    pattern_length: int
) -> float:
    """
    Score a candidate from its error count and location.

    Args:
        errors: Number of edits in the candidate alignment
        current_location: Where the candidate starts in the text
        expected_location: Where the pattern is expected
        distance: Drift allowed before a location scores as a full mismatch
        pattern_length: Length of the compiled pattern

    Returns:
        float: Score in [0, 1]; 0 is a perfect match
    """
    accuracy = errors / pattern_length
    proximity = abs(expected_location - current_location)
    if not distance:
        return 1.0 if proximity else accuracy
    return min(1.0, accuracy + proximity / distance)


def _shift(blocks: Blocks) -> Blocks:
    """(blocks << 1) | 1 across fixed-width blocks."""
    carry = 1
    shifted = []
    for block in blocks:
        shifted.append(((block << 1) & WORD_MASK) | carry)
        carry = block >> (WORD_SIZE - 1)
    return tuple(shifted)


def _and(a: Blocks, b: Blocks) -> Blocks:
    return tuple(x & y for x, y in zip(a, b))


def _or(*vectors: Blocks) -> Blocks:
    return tuple(reduce(operator.or_, bits) for bits in zip(*vectors))


def _test(blocks: Blocks, bit: int) -> bool:
    return bool((blocks[bit // WORD_SIZE] >> (bit % WORD_SIZE)) & 1)


def _low_bits(count: int, n_blocks: int) -> Blocks:
    return tuple(
        (1 << max(0, min(WORD_SIZE, count - k * WORD_SIZE))) - 1
        for k in range(n_blocks)
    )


def mask_to_ranges(mask: np.ndarray, min_length: int = 1) -> List[Range]:
    """Turn a boolean mask into closed (start, end) ranges of set positions."""
    padded = np.concatenate(([False], mask, [False]))
    edges = np.flatnonzero(padded[1:] != padded[:-1])
    return [
        (int(start), int(end))
        for start, end in zip(edges[0::2], edges[1::2] - 1)
        if end - start + 1 >= min_length
    ]


class BitapMatcher:
    """
    Approximate matcher for one compiled pattern.

    Instances hold no per-text state and are reused across every candidate
    text of a search.
    """

    def __init__(self, pattern: CompiledPattern, config: SearchConfig):
        self.pattern = pattern
        self.config = config
        self._zero = (0,) * pattern.n_blocks
        self._top = pattern.length - 1

    def _score(self, errors: int, location: int) -> float:
        return bitap_score(
            errors,
            location,
            self.config.location,
            self.config.distance,
            self.pattern.length
        )

    def _row(self, rows: Optional[Rows], j: int) -> Blocks:
        if rows is None or not 0 <= j < len(rows) or rows[j] is None:
            return self._zero
        return rows[j]

    def _char_mask(self, text: str, location: int) -> Blocks:
        if location < len(text):
            return self.pattern.mask_for(text[location])
        return self._zero

    def search(self, text: str) -> MatchOutcome:
        """
        Find the best approximate occurrence of the pattern in text.

        Args:
            text: Candidate text, in its original case

        Returns:
            MatchOutcome: Verdict, score and matched ranges over text
        """
        if not isinstance(text, str) or not text:
            return MatchOutcome.no_match()

        folded = text if self.config.case_sensitive else fold_case(text)
        if folded == self.pattern.text:
            mask = np.ones(len(text), dtype=bool)
            return self._outcome(0.0, mask)

        return self._search(folded)

    def _outcome(self, score: float, mask: np.ndarray) -> MatchOutcome:
        ranges = mask_to_ranges(mask, self.config.min_match_char_length)
        return MatchOutcome(
            is_match=score <= self.config.threshold and bool(ranges),
            score=score,
            matched_indices=ranges
        )

    def _search(self, text: str) -> MatchOutcome:
        config = self.config
        pattern = self.pattern.text
        pattern_len = self.pattern.length
        text_len = len(text)
        expected = config.location
        threshold = config.threshold

        # Exact occurrences near the expected location bound the scan
        exact = text.find(pattern, expected)
        if exact != -1:
            threshold = min(self._score(0, exact), threshold)
            exact = text.rfind(pattern, 0, expected + 2 * pattern_len)
            if exact != -1:
                threshold = min(self._score(0, exact), threshold)

        levels: List[Rows] = []
        best: Optional[Tuple[float, int, int]] = None
        accepted: List[Tuple[int, int]] = []
        bin_max = pattern_len + text_len

        for errors in range(pattern_len):
            # Furthest drift from the expected location still within threshold
            bin_min, bin_mid = 0, bin_max
            while bin_min < bin_mid:
                if self._score(errors, expected + bin_mid) <= threshold:
                    bin_min = bin_mid
                else:
                    bin_max = bin_mid
                bin_mid = (bin_max - bin_min) // 2 + bin_min
            bin_max = bin_mid

            if config.find_all_matches:
                start, finish = 1, text_len
            else:
                start = max(1, expected - bin_mid + 1)
                finish = min(expected + bin_mid, text_len) + pattern_len

            below = levels[-1] if levels else None
            rows: Rows = [None] * (finish + 2)
            rows[finish + 1] = _low_bits(errors, self.pattern.n_blocks)
            levels.append(rows)

            j = finish
            while j >= start:
                location = j - 1
                state = _and(_shift(rows[j + 1]), self._char_mask(text, location))
                if errors:
                    after = self._row(below, j + 1)
                    state = _or(state, _shift(_or(after, self._row(below, j))), after)
                rows[j] = state

                if _test(state, self._top):
                    score = self._score(errors, location)
                    if config.find_all_matches and score <= config.threshold:
                        accepted.append((errors, j))
                    if score <= threshold:
                        threshold = score
                        best = (score, errors, j)
                        if not config.find_all_matches:
                            if location <= expected:
                                break
                            start = max(1, 2 * expected - location)
                j -= 1

            # One more error at the expected location can't beat the best
            if self._score(errors + 1, expected) > threshold:
                break

        if best is None:
            return MatchOutcome.no_match()

        score, errors, j = best
        mask = np.zeros(text_len, dtype=bool)
        # With find_all_matches every accepted candidate is highlighted
        for level, position in accepted or [(errors, j)]:
            positions = self._trace(levels, text, level, position)
            mask[np.asarray(positions, dtype=np.intp)] = True

        return self._outcome(score, mask)

    def _trace(self, levels: List[Rows], text: str, errors: int, j: int) -> List[int]:
        """
        Recover the text positions aligned to pattern characters.

        Walks back from a top-bit hit through the stored rows, preferring an
        exact character match, then a substitution, a deleted pattern
        character and an inserted text character.
        """
        positions: List[int] = []
        bit = self._top
        while bit >= 0:
            rows = levels[errors]
            if j >= len(rows) - 1:
                # Seed row past the window: remaining pattern bits are deletions
                break
            location = j - 1
            if (
                _test(self._char_mask(text, location), bit)
                and (bit == 0 or _test(self._row(rows, j + 1), bit - 1))
            ):
                positions.append(location)
                j += 1
                bit -= 1
                continue
            if errors == 0:
                break

            below = levels[errors - 1]
            errors -= 1
            if bit == 0 or _test(self._row(below, j + 1), bit - 1):
                j += 1
                bit -= 1
            elif _test(self._row(below, j), bit - 1):
                bit -= 1
            else:
                j += 1
        return positions
