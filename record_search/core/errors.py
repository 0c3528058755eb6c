"""Exceptions and warnings raised by the search engine."""


class RecordSearchError(Exception):
    """Base class for record search errors."""


class InvalidWeightError(RecordSearchError, ValueError):
    """A search key carries a weight outside (0, 1]."""

    def __init__(self, key: str, weight: float):
        self.key = key
        self.weight = weight
        super().__init__(
            f"Key weight has to be > 0 and <= 1 (key={key!r}, weight={weight})"
        )


class EmptyPatternError(RecordSearchError, ValueError):
    """The pattern is empty once normalized."""


class SearchCancelledError(RecordSearchError):
    """A search was cancelled through its cancellation token."""


class PatternTooLongWarning(UserWarning):
    """A pattern was truncated to the configured maximum length."""
