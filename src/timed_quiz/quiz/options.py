"""Derive four answer options from a raw source record."""

from __future__ import annotations

import random
from typing import Optional

from .models import Option, SourceRecord

__all__ = ["candidate_texts", "generate_options"]


def _words(text: str, start: int, stop: int) -> str:
    return " ".join(text.split(" ")[start:stop])


def candidate_texts(record: SourceRecord) -> tuple[str, ...]:
    """Return the unshuffled candidates; the first one is the correct answer.

    Decoys are the first five words of the secondary text, words 2-6 of the
    primary text and words 6-10 of the secondary text. Short inputs yield
    short or empty decoys rather than errors.
    """

    primary = record.primary_text
    secondary = record.secondary_text
    return (
        primary,
        _words(secondary, 0, 5),
        _words(primary, 1, 6),
        _words(secondary, 5, 10),
    )


def generate_options(
    record: SourceRecord, rng: Optional[random.Random] = None
) -> tuple[Option, ...]:
    """Build the four options for ``record`` in uniformly random order.

    Correctness follows the candidate's position, not its text, so a decoy
    that happens to equal the primary text is still marked incorrect.
    """

    options = [
        Option(text=text, is_correct=index == 0)
        for index, text in enumerate(candidate_texts(record))
    ]
    (rng or random).shuffle(options)
    return tuple(options)
