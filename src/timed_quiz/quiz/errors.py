"""Error taxonomy for quiz loading and session setup."""

from __future__ import annotations

__all__ = [
    "QuizError",
    "SourceUnavailableError",
    "EmptyBankError",
    "InsufficientDataError",
]


class QuizError(RuntimeError):
    """Base class for quiz failures surfaced to the caller."""


class SourceUnavailableError(QuizError):
    """Raised when the question source cannot supply records."""


class EmptyBankError(QuizError):
    """Raised when a session is started without any questions."""


class InsufficientDataError(QuizError):
    """Raised in strict mode when fewer records than requested are available."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"Requested {requested} question(s) but only {available} "
            "record(s) are available."
        )
        self.requested = requested
        self.available = available
