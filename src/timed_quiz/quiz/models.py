"""Immutable data structures shared by the quiz core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Phase(Enum):
    """Coarse state of a quiz session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SourceRecord:
    """Normalized raw record used to derive one question.

    ``primary_text`` is the correct answer; ``secondary_text`` is the longer
    body the decoy options are cut from.
    """

    id: int
    primary_text: str
    secondary_text: str


@dataclass(frozen=True)
class Option:
    """One answer choice."""

    text: str
    is_correct: bool


@dataclass(frozen=True)
class Question:
    """A prompt with its four shuffled options."""

    id: int
    prompt: str
    options: tuple[Option, ...]

    @property
    def correct_option(self) -> Option | None:
        for option in self.options:
            if option.is_correct:
                return option
        return None


@dataclass(frozen=True)
class AnswerRecord:
    """The user's recorded choice for a question."""

    question_id: int
    question_prompt: str
    selected_text: str
    is_correct: bool
