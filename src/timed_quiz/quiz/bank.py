"""Build the ordered question bank from raw source records."""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from .errors import InsufficientDataError
from .models import Question, SourceRecord
from .options import generate_options

__all__ = ["DEFAULT_LIMIT", "build_question_bank", "format_prompt"]

DEFAULT_LIMIT = 10

logger = logging.getLogger(__name__)


def format_prompt(position: int, record: SourceRecord) -> str:
    return f"Question {position + 1}: {record.primary_text}"


def build_question_bank(
    records: Sequence[SourceRecord],
    limit: int = DEFAULT_LIMIT,
    *,
    strict: bool = False,
    rng: Optional[random.Random] = None,
) -> tuple[Question, ...]:
    """Return up to ``limit`` questions built from ``records`` in source order.

    With ``strict`` enabled a short source raises
    :class:`InsufficientDataError`; otherwise the bank simply holds fewer
    questions and the session decides whether that is usable. Repeated
    record ids raise :class:`ValueError` because answers are keyed by id.
    """

    if limit <= 0:
        raise ValueError("limit must be a positive integer")

    selected = list(records[:limit])
    ids = [record.id for record in selected]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Question ids must be unique, got {ids}")
    if len(selected) < limit:
        if strict:
            raise InsufficientDataError(limit, len(selected))
        logger.warning(
            "Question source returned fewer records than requested",
            extra={"requested": limit, "available": len(selected)},
        )

    questions = tuple(
        Question(
            id=record.id,
            prompt=format_prompt(position, record),
            options=generate_options(record, rng),
        )
        for position, record in enumerate(selected)
    )
    logger.debug("Built question bank", extra={"questions": len(questions)})
    return questions
