from __future__ import annotations

import pytest

from timed_quiz.quiz.errors import EmptyBankError
from timed_quiz.quiz.models import Option, Phase
from timed_quiz.quiz.report import summarize
from timed_quiz.quiz.session import QuizSession, SessionSettings


def _correct_index(question) -> int:
    return next(
        index
        for index, option in enumerate(question.options)
        if option.is_correct
    )


def _wrong_index(question) -> int:
    return next(
        index
        for index, option in enumerate(question.options)
        if not option.is_correct
    )


def _unlock(session: QuizSession) -> None:
    for _ in range(session.settings.answer_lock_seconds):
        session.tick()
    assert session.is_answering_enabled


def test_new_session_is_not_started(bank):
    session = QuizSession(bank)

    assert session.phase is Phase.NOT_STARTED
    assert session.current_question is None
    assert session.answers == ()
    assert session.is_answering_enabled is False


def test_start_initializes_first_question(bank):
    session = QuizSession(bank)
    session.start()

    assert session.phase is Phase.IN_PROGRESS
    assert session.current_index == 0
    assert session.seconds_remaining == 30
    assert session.is_answering_enabled is False
    assert session.current_question == bank[0]


def test_start_with_empty_bank_raises():
    session = QuizSession([])
    with pytest.raises(EmptyBankError):
        session.start()
    assert session.phase is Phase.NOT_STARTED


def test_start_twice_is_ignored(bank):
    session = QuizSession(bank)
    session.start()
    _unlock(session)
    session.answer(0)

    session.start()

    assert session.current_index == 1
    assert len(session.answers) == 1


def test_answering_unlocks_exactly_after_tenth_tick(bank):
    session = QuizSession(bank)
    session.start()
    transitions = []
    previous = session.is_answering_enabled

    for tick in range(1, 11):
        session.tick()
        if session.is_answering_enabled != previous:
            transitions.append(tick)
            previous = session.is_answering_enabled

    assert transitions == [10]
    assert session.seconds_remaining == 20


def test_answer_while_locked_is_ignored(bank):
    session = QuizSession(bank)
    session.start()
    for _ in range(9):
        session.tick()

    result = session.answer(bank[0].options[0])

    assert result is None
    assert session.answers == ()
    assert session.current_index == 0


def test_timeout_advances_without_recording(bank):
    session = QuizSession(bank)
    session.start()

    for _ in range(30):
        session.tick()

    assert session.current_index == 1
    assert session.answers == ()
    assert session.seconds_remaining == 30
    assert session.is_answering_enabled is False


def test_countdown_reaches_one_before_timeout(bank):
    session = QuizSession(bank)
    session.start()
    for _ in range(29):
        session.tick()

    assert session.current_index == 0
    assert session.seconds_remaining == 1


def test_answer_records_and_advances(bank):
    session = QuizSession(bank)
    session.start()
    _unlock(session)
    question = bank[0]
    option = question.options[_correct_index(question)]

    record = session.answer(option)

    assert record is not None
    assert record.question_id == question.id
    assert record.question_prompt == question.prompt
    assert record.selected_text == option.text
    assert record.is_correct is True
    assert session.answers == (record,)
    assert session.current_index == 1
    assert session.seconds_remaining == 30
    assert session.is_answering_enabled is False


def test_answer_by_index_and_unknown_option(bank):
    session = QuizSession(bank)
    session.start()
    _unlock(session)

    assert session.answer(Option(text="not offered", is_correct=True)) is None
    assert session.answer(4) is None
    assert session.answer(-1) is None
    assert session.answers == ()

    record = session.answer(_wrong_index(bank[0]))
    assert record is not None
    assert record.is_correct is False


def test_answering_all_correctly_scores_full_marks(bank):
    session = QuizSession(bank)
    session.start()

    for question in bank:
        _unlock(session)
        session.answer(_correct_index(question))

    assert session.phase is Phase.COMPLETED
    report = summarize(session.answers)
    assert (report.total, report.correct) == (10, 10)


def test_mixed_run_skips_timed_out_questions(bank):
    session = QuizSession(bank)
    session.start()

    for position, question in enumerate(bank):
        if position % 3 == 0:
            for _ in range(30):
                session.tick()
            continue
        _unlock(session)
        session.answer(_correct_index(question))

    assert session.is_completed
    answered_ids = [answer.question_id for answer in session.answers]
    assert answered_ids == [
        question.id
        for position, question in enumerate(bank)
        if position % 3 != 0
    ]
    report = summarize(session.answers, question_count=len(bank))
    assert report.total == 6
    assert report.skipped == 4


def test_completed_session_ignores_commands(bank):
    session = QuizSession(bank[:1])
    session.start()
    _unlock(session)
    session.answer(0)
    assert session.phase is Phase.COMPLETED
    snapshot = (session.answers, session.seconds_remaining)

    session.tick()
    session.answer(0)
    session.advance()
    session.start()

    assert session.phase is Phase.COMPLETED
    assert (session.answers, session.seconds_remaining) == snapshot
    assert session.current_question is None
    assert session.is_answering_enabled is False


def test_commands_before_start_are_noops(bank):
    session = QuizSession(bank)

    session.tick()
    assert session.answer(0) is None
    session.advance()

    assert session.phase is Phase.NOT_STARTED
    assert session.seconds_remaining == 30
    assert session.answers == ()


def test_timeout_on_last_question_completes(bank):
    session = QuizSession(bank[:2])
    session.start()
    for _ in range(60):
        session.tick()

    assert session.is_completed
    assert session.answers == ()


def test_scheduler_timer_runs_only_while_in_progress(bank, scheduler):
    session = QuizSession(bank[:2], scheduler=scheduler)
    assert scheduler.timers == []

    session.start()
    timer = scheduler.last
    assert timer.interval == 1.0
    assert session.timer_running

    timer.fire(30)
    assert session.current_index == 1
    assert not timer.stopped

    timer.fire(30)
    assert session.is_completed
    assert timer.stopped
    assert not session.timer_running
    assert len(scheduler.timers) == 1


def test_close_stops_timer_and_freezes_state(bank, scheduler):
    session = QuizSession(bank, scheduler=scheduler)
    session.start()
    session.tick()

    session.close()
    session.close()

    assert scheduler.last.stopped
    assert session.is_closed
    session.tick()
    assert session.seconds_remaining == 29
    assert session.phase is Phase.IN_PROGRESS


def test_listeners_receive_changes_and_can_unsubscribe(bank):
    session = QuizSession(bank)
    seen = []
    unsubscribe = session.subscribe(lambda s: seen.append(s.seconds_remaining))

    session.start()
    session.tick()
    unsubscribe()
    session.tick()

    assert seen == [30, 29]


def test_custom_settings_shift_unlock_threshold(bank):
    settings = SessionSettings(question_duration_seconds=5, answer_lock_seconds=2)
    session = QuizSession(bank, settings)
    session.start()

    assert session.seconds_remaining == 5
    session.tick()
    assert not session.is_answering_enabled
    session.tick()
    assert session.is_answering_enabled
    for _ in range(3):
        session.tick()
    assert session.current_index == 1
    assert session.seconds_remaining == 5


def test_zero_lock_allows_immediate_answers(bank):
    settings = SessionSettings(question_duration_seconds=5, answer_lock_seconds=0)
    session = QuizSession(bank, settings)
    session.start()

    assert session.is_answering_enabled
    assert session.answer(0) is not None
    assert session.is_answering_enabled


@pytest.mark.parametrize(
    "kwargs",
    [
        {"question_duration_seconds": 0},
        {"question_duration_seconds": 10, "answer_lock_seconds": 10},
        {"answer_lock_seconds": -1},
        {"tick_interval_seconds": 0},
    ],
)
def test_session_settings_validation(kwargs):
    with pytest.raises(ValueError):
        SessionSettings(**kwargs)


def test_answers_projection_is_a_copy(bank):
    session = QuizSession(bank)
    session.start()
    _unlock(session)
    session.answer(0)

    answers = session.answers
    assert isinstance(answers, tuple)
    assert len(session.answers) == 1
