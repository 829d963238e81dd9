"""Textual front end that observes a :class:`QuizSession`."""

from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional

from textual.app import App, ComposeResult
from textual.containers import Container, Vertical
from textual.widget import Widget
from textual.widgets import Button, DataTable, Footer, ProgressBar, Static

from .bank import DEFAULT_LIMIT, build_question_bank
from .errors import QuizError
from .models import Phase, Question
from .report import QuizReport, outcome_label, summarize
from .session import QuizSession, Scheduler, SessionSettings
from .source import QuestionSource

__all__ = ["OPTION_KEYS", "TimedQuizApp", "WARNING_SECONDS", "option_label"]

OPTION_KEYS = ("A", "B", "C", "D")
WARNING_SECONDS = 10

logger = logging.getLogger(__name__)


def option_label(position: int, text: str) -> str:
    return f"{OPTION_KEYS[position]}-) {text}"


class TimedQuizApp(App):
    """Start screen, timed question screen and results table."""

    CSS = """
#stage { padding: 1 2; }
#stage .title { text-style: bold; color: $accent; }
#stage .prompt { text-style: bold; margin: 1 0; }
#stage .options Button { width: 100%; margin-bottom: 1; }
#stage .countdown.warning { color: $error; text-style: bold; }
#stage .error { color: $error; }
"""
    BINDINGS = [
        ("s", "start", "Start"),
        ("a", "choose(0)", "A"),
        ("b", "choose(1)", "B"),
        ("c", "choose(2)", "C"),
        ("d", "choose(3)", "D"),
        ("r", "retry", "Retry"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        source: QuestionSource,
        *,
        limit: int = DEFAULT_LIMIT,
        strict: bool = False,
        settings: Optional[SessionSettings] = None,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        super().__init__()
        self._question_source = source
        self._limit = limit
        self._strict = strict
        self._session_settings = settings or SessionSettings()
        self._rng = rng
        self._scheduler = scheduler
        self._session: Optional[QuizSession] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._error: Optional[str] = None
        self._stage_ready = False
        self._rendered_key: Optional[tuple[object, ...]] = None
        self._timer_bar: Optional[ProgressBar] = None
        self._countdown: Optional[Static] = None
        self._option_buttons: List[Button] = []

    # Pure helpers (usable without running the app) -------------------------

    @property
    def session(self) -> Optional[QuizSession]:
        return self._session

    @property
    def error(self) -> Optional[str]:
        return self._error

    def load_bank(self) -> bool:
        """Fetch records and prepare a fresh session; False on failure."""

        self._discard_session()
        try:
            records = self._question_source.fetch()
            questions = build_question_bank(
                records, self._limit, strict=self._strict, rng=self._rng
            )
        except QuizError as exc:
            logger.error("Unable to prepare quiz", extra={"error": str(exc)})
            self._error = str(exc)
            self._render_stage()
            return False
        self._error = None
        self._session = QuizSession(
            questions,
            self._session_settings,
            scheduler=self._scheduler or self._interval_scheduler,
        )
        self._unsubscribe = self._session.subscribe(self._on_session_change)
        self._render_stage()
        return True

    def start_quiz(self) -> bool:
        if self._session is None or self._session.phase is not Phase.NOT_STARTED:
            return False
        try:
            self._session.start()
        except QuizError as exc:
            self._error = str(exc)
            self._render_stage()
            return False
        return True

    def choose(self, position: int) -> bool:
        if self._session is None:
            return False
        return self._session.answer(position) is not None

    def report(self) -> Optional[QuizReport]:
        if self._session is None:
            return None
        return summarize(
            self._session.answers,
            question_count=self._session.total_questions,
        )

    def status_text(self) -> str:
        if self._error:
            return f"Could not load questions: {self._error}"
        session = self._session
        if session is None:
            return "Loading questions..."
        if session.phase is Phase.NOT_STARTED:
            return (
                f"{session.total_questions} question quiz. "
                "Press Start (s) to begin."
            )
        if session.phase is Phase.IN_PROGRESS:
            suffix = "" if session.is_answering_enabled else " (answers locked)"
            return f"Time left: {session.seconds_remaining}s{suffix}"
        report = self.report()
        assert report is not None
        return (
            f"Finished: {report.correct}/{report.total} correct, "
            f"{report.skipped} timed out."
        )

    def option_labels(self) -> List[str]:
        question = self._current_question()
        if question is None:
            return []
        return [
            option_label(position, option.text)
            for position, option in enumerate(question.options)
        ]

    def countdown_is_warning(self) -> bool:
        session = self._session
        return (
            session is not None
            and session.phase is Phase.IN_PROGRESS
            and session.seconds_remaining <= WARNING_SECONDS
        )

    # Textual wiring ---------------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Container(id="stage")
        yield Footer()

    def on_mount(self) -> None:
        self._stage_ready = True
        self.load_bank()

    def on_unmount(self) -> None:
        self._stage_ready = False
        self._discard_session(keep=True)

    def action_start(self) -> None:
        self.start_quiz()

    def action_choose(self, position: int) -> None:
        self.choose(position)

    def action_retry(self) -> None:
        if self._error is not None:
            self.load_bank()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        name = event.button.name or ""
        if name.startswith("option-"):
            self.choose(int(name.rsplit("-", 1)[-1]))
        elif name == "start":
            self.start_quiz()
        elif name == "retry":
            self.load_bank()
        elif name == "quit":
            self.exit()

    def _interval_scheduler(
        self, interval: float, callback: Callable[[], None]
    ):
        return self.set_interval(interval, callback)

    def _current_question(self) -> Optional[Question]:
        if self._session is None:
            return None
        return self._session.current_question

    def _discard_session(self, keep: bool = False) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._session is not None:
            self._session.close()
            if not keep:
                self._session = None

    def _on_session_change(self, session: QuizSession) -> None:
        self._render_stage()

    def _stage_key(self) -> tuple[object, ...]:
        session = self._session
        if self._error or session is None:
            return ("error", self._error)
        return (session.phase, session.current_index)

    def _render_stage(self) -> None:
        # Stage children are swapped without awaiting removal, so they carry
        # classes and names rather than ids.
        if not self._stage_ready:
            return
        key = self._stage_key()
        if key != self._rendered_key:
            self._rendered_key = key
            stage = self.query_one("#stage", Container)
            stage.remove_children()
            stage.mount(*self._build_widgets())
        self._refresh_countdown()

    def _build_widgets(self) -> List[Widget]:
        self._timer_bar = None
        self._countdown = None
        self._option_buttons = []
        session = self._session
        if self._error or session is None:
            widgets: List[Widget] = [
                Static(self.status_text(), classes="error")
            ]
            if self._error:
                widgets.append(
                    Button("Retry", name="retry", variant="primary")
                )
            return widgets
        if session.phase is Phase.NOT_STARTED:
            return [
                Static("Quiz", classes="title"),
                Static(self.status_text()),
                Button("Start", name="start", variant="primary"),
            ]
        if session.phase is Phase.IN_PROGRESS:
            question = session.current_question
            assert question is not None
            self._option_buttons = [
                Button(label, name=f"option-{position}")
                for position, label in enumerate(self.option_labels())
            ]
            self._timer_bar = ProgressBar(
                total=session.settings.question_duration_seconds,
                show_eta=False,
            )
            self._countdown = Static("", classes="countdown")
            return [
                Static(
                    f"Question {session.current_index + 1}"
                    f" / {session.total_questions}",
                    classes="title",
                ),
                self._timer_bar,
                Static(question.prompt, classes="prompt"),
                Vertical(*self._option_buttons, classes="options"),
                self._countdown,
            ]
        return [
            Static("Quiz Results", classes="title"),
            self._results_table(),
            Static(self.status_text()),
            Button("Quit", name="quit"),
        ]

    def _results_table(self) -> DataTable:
        table: DataTable = DataTable()
        table.add_columns("Question", "Your answer", "Result")
        report = self.report()
        for row in report.rows if report else ():
            table.add_row(
                row.prompt, row.selected_text, outcome_label(row.is_correct)
            )
        return table

    def _refresh_countdown(self) -> None:
        session = self._session
        if session is None or session.phase is not Phase.IN_PROGRESS:
            return
        if self._timer_bar is not None:
            self._timer_bar.update(progress=session.seconds_remaining)
        if self._countdown is not None:
            self._countdown.update(self.status_text())
            self._countdown.set_class(self.countdown_is_warning(), "warning")
        for button in self._option_buttons:
            button.disabled = not session.is_answering_enabled
