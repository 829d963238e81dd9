"""Timer-driven quiz session state machine.

A :class:`QuizSession` walks an immutable question bank one question at a
time. Each question gets a countdown of ``question_duration_seconds``; for
the first ``answer_lock_seconds`` of it answers are ignored. Answering
records an :class:`AnswerRecord` and moves on, running out of time moves on
without one. Once the last question is left behind the session is
``COMPLETED`` and every further command is a no-op.

The session never sleeps or spawns threads. Elapsed time arrives through
:meth:`QuizSession.tick`, either called directly (tests, scripted drivers) or
from a periodic timer obtained from an injected ``scheduler``. The timer only
runs while the session is ``IN_PROGRESS`` and is stopped on every exit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Union

from .errors import EmptyBankError
from .models import AnswerRecord, Option, Phase, Question

__all__ = [
    "QuizSession",
    "Scheduler",
    "SessionListener",
    "SessionSettings",
    "TimerHandle",
]

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def stop(self) -> object: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]
SessionListener = Callable[["QuizSession"], None]
Selection = Union[Option, int]


@dataclass(frozen=True)
class SessionSettings:
    """Countdown configuration shared by every question in a session."""

    question_duration_seconds: int = 30
    answer_lock_seconds: int = 10
    tick_interval_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.question_duration_seconds <= 0:
            raise ValueError("question_duration_seconds must be positive")
        if not 0 <= self.answer_lock_seconds < self.question_duration_seconds:
            raise ValueError(
                "answer_lock_seconds must be between 0 and "
                "question_duration_seconds (exclusive)"
            )
        if self.tick_interval_seconds <= 0:
            raise ValueError("tick_interval_seconds must be positive")

    @property
    def unlock_at_seconds(self) -> int:
        """Remaining seconds at which answering becomes available."""

        return self.question_duration_seconds - self.answer_lock_seconds


class QuizSession:
    """Own the state of one pass through a question bank."""

    def __init__(
        self,
        questions: Sequence[Question],
        settings: Optional[SessionSettings] = None,
        *,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._questions: tuple[Question, ...] = tuple(questions)
        self._settings = settings or SessionSettings()
        self._scheduler = scheduler
        self._timer: Optional[TimerHandle] = None
        self._listeners: list[SessionListener] = []
        self._closed = False

        self._phase = Phase.NOT_STARTED
        self._index = 0
        self._seconds_remaining = self._settings.question_duration_seconds
        self._answering_enabled = False
        self._answers: list[AnswerRecord] = []

    # Read-only projections -------------------------------------------------

    @property
    def settings(self) -> SessionSettings:
        return self._settings

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._questions

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_question(self) -> Optional[Question]:
        if self._phase is not Phase.IN_PROGRESS:
            return None
        return self._questions[self._index]

    @property
    def seconds_remaining(self) -> int:
        return self._seconds_remaining

    @property
    def is_answering_enabled(self) -> bool:
        return self._answering_enabled

    @property
    def answers(self) -> tuple[AnswerRecord, ...]:
        return tuple(self._answers)

    @property
    def is_completed(self) -> bool:
        return self._phase is Phase.COMPLETED

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def timer_running(self) -> bool:
        return self._timer is not None

    # Observers -------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` after every state change; returns an unsubscribe."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # Commands --------------------------------------------------------------

    def start(self) -> None:
        if not self._accepts("start", Phase.NOT_STARTED):
            return
        if not self._questions:
            raise EmptyBankError("Cannot start a quiz without questions.")
        self._phase = Phase.IN_PROGRESS
        self._index = 0
        self._answers = []
        self._reset_countdown()
        logger.info(
            "Quiz session started",
            extra={
                "questions": len(self._questions),
                "duration": self._settings.question_duration_seconds,
                "lock": self._settings.answer_lock_seconds,
            },
        )
        self._start_timer()
        self._notify()

    def tick(self) -> None:
        """Account for one elapsed second on the current question."""

        if not self._accepts("tick", Phase.IN_PROGRESS):
            return
        self._seconds_remaining -= 1
        if self._seconds_remaining <= 0:
            logger.info(
                "Question timed out",
                extra={"question_id": self._questions[self._index].id},
            )
            self.advance()
            return
        if (
            not self._answering_enabled
            and self._seconds_remaining <= self._settings.unlock_at_seconds
        ):
            self._answering_enabled = True
            logger.debug(
                "Answering unlocked",
                extra={"seconds_remaining": self._seconds_remaining},
            )
        self._notify()

    def answer(self, selection: Selection) -> Optional[AnswerRecord]:
        """Record ``selection`` for the current question and move on.

        ``selection`` is one of the current question's options or its index.
        Returns the new record, or ``None`` when the command was ignored
        because of the phase, the answer lock, or an unknown option.
        """

        if not self._accepts("answer", Phase.IN_PROGRESS):
            return None
        if not self._answering_enabled:
            logger.debug(
                "Ignored answer while locked",
                extra={"seconds_remaining": self._seconds_remaining},
            )
            return None
        question = self._questions[self._index]
        option = _resolve_option(question, selection)
        if option is None:
            logger.debug(
                "Ignored answer for unknown option",
                extra={"question_id": question.id, "selection": selection},
            )
            return None
        record = AnswerRecord(
            question_id=question.id,
            question_prompt=question.prompt,
            selected_text=option.text,
            is_correct=option.is_correct,
        )
        self._answers.append(record)
        logger.info(
            "Answer recorded",
            extra={"question_id": question.id, "correct": option.is_correct},
        )
        self.advance()
        return record

    def advance(self) -> None:
        """Move to the next question, or complete after the last one."""

        if not self._accepts("advance", Phase.IN_PROGRESS):
            return
        if self._index < len(self._questions) - 1:
            self._index += 1
            self._reset_countdown()
        else:
            self._phase = Phase.COMPLETED
            self._answering_enabled = False
            self._stop_timer()
            logger.info(
                "Quiz session completed",
                extra={
                    "answered": len(self._answers),
                    "questions": len(self._questions),
                },
            )
        self._notify()

    def close(self) -> None:
        """Tear the session down; later commands are ignored."""

        if self._closed:
            return
        self._closed = True
        self._stop_timer()
        logger.debug("Quiz session closed", extra={"phase": self._phase.value})

    # Internals -------------------------------------------------------------

    def _accepts(self, command: str, required: Phase) -> bool:
        if self._closed or self._phase is not required:
            logger.debug(
                "Ignored %s command",
                command,
                extra={"phase": self._phase.value, "closed": self._closed},
            )
            return False
        return True

    def _reset_countdown(self) -> None:
        self._seconds_remaining = self._settings.question_duration_seconds
        self._answering_enabled = self._settings.answer_lock_seconds == 0

    def _start_timer(self) -> None:
        if self._scheduler is None or self._timer is not None:
            return
        self._timer = self._scheduler(
            self._settings.tick_interval_seconds, self.tick
        )

    def _stop_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()


def _resolve_option(question: Question, selection: Selection) -> Optional[Option]:
    if isinstance(selection, Option):
        # Identity first so duplicated texts keep their own correctness flag.
        for option in question.options:
            if option is selection:
                return option
        return selection if selection in question.options else None
    if isinstance(selection, int) and not isinstance(selection, bool):
        if 0 <= selection < len(question.options):
            return question.options[selection]
    return None
