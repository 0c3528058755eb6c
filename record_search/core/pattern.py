"""Compilation of query strings into per-character bit masks."""

from dataclasses import dataclass
from typing import Dict, Tuple
import warnings

from record_search.config.models import WORD_SIZE
from record_search.core.errors import EmptyPatternError, PatternTooLongWarning

WORD_MASK = (1 << WORD_SIZE) - 1

Blocks = Tuple[int, ...]


def fold_case(text: str) -> str:
    """
    Lowercase text without changing its length.

    Characters whose lowercase form has a different length are kept as they
    are, so offsets into the folded text are valid in the original.
    """
    folded = text.lower()
    if len(folded) == len(text):
        return folded
    return ''.join(
        lowered if len(lowered) == 1 else char
        for char, lowered in ((char, char.lower()) for char in text)
    )


@dataclass(frozen=True)
class CompiledPattern:
    """A normalized pattern and the bit masks of its characters."""
    text: str
    alphabet: Dict[str, Blocks]

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def n_blocks(self) -> int:
        return (len(self.text) + WORD_SIZE - 1) // WORD_SIZE

    def mask_for(self, char: str) -> Blocks:
        """Mask of the positions char occupies; all zero when absent."""
        return self.alphabet.get(char) or (0,) * self.n_blocks


def build_alphabet(text: str) -> Dict[str, Blocks]:
    """
    Build the per-character masks of a pattern.

    Position i of the pattern sets bit (length - 1 - i), counting from bit 0
    of block 0, so the last character of the pattern is the lowest bit.
    """
    length = len(text)
    n_blocks = (length + WORD_SIZE - 1) // WORD_SIZE
    masks: Dict[str, list] = {}
    for i in range(length - 1, -1, -1):
        bit = length - 1 - i
        blocks = masks.setdefault(text[i], [0] * n_blocks)
        blocks[bit // WORD_SIZE] |= 1 << (bit % WORD_SIZE)
    return {char: tuple(blocks) for char, blocks in masks.items()}


def compile_pattern(
    pattern: str,
    case_sensitive: bool = False,
    max_pattern_length: int = WORD_SIZE
) -> CompiledPattern:
    """
    Compile a query string for the bitap matcher.

    Args:
        pattern: Query string
        case_sensitive: Keep case instead of folding it
        max_pattern_length: Longest pattern kept; longer ones are truncated

    Returns:
        CompiledPattern: Reusable compiled pattern

    Raises:
        EmptyPatternError: If the normalized pattern is empty
    """
    text = pattern if case_sensitive else fold_case(pattern)
    if not text:
        raise EmptyPatternError("Cannot compile an empty pattern")

    if len(text) > max_pattern_length:
        warnings.warn(
            f"Pattern of length {len(text)} truncated to {max_pattern_length} "
            f"characters: {pattern!r}",
            PatternTooLongWarning,
            stacklevel=2
        )
        text = text[:max_pattern_length]

    return CompiledPattern(text=text, alphabet=build_alphabet(text))
