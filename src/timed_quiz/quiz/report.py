"""Scoring summary derived from recorded answers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import AnswerRecord

__all__ = ["QuizReport", "ReportRow", "render_report", "summarize"]


@dataclass(frozen=True)
class ReportRow:
    """One reviewed answer."""

    prompt: str
    selected_text: str
    is_correct: bool


@dataclass(frozen=True)
class QuizReport:
    """Tally and review rows for a finished session.

    ``total`` counts recorded answers only; questions that timed out are
    reported through ``skipped`` when the question count is known.
    """

    total: int
    correct: int
    rows: tuple[ReportRow, ...]
    skipped: int = 0

    @property
    def incorrect(self) -> int:
        return self.total - self.correct

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total


def summarize(
    answers: Sequence[AnswerRecord], *, question_count: Optional[int] = None
) -> QuizReport:
    rows = tuple(
        ReportRow(
            prompt=answer.question_prompt,
            selected_text=answer.selected_text,
            is_correct=answer.is_correct,
        )
        for answer in answers
    )
    total = len(rows)
    skipped = max(question_count - total, 0) if question_count else 0
    return QuizReport(
        total=total,
        correct=sum(1 for row in rows if row.is_correct),
        rows=rows,
        skipped=skipped,
    )


def outcome_label(is_correct: bool) -> str:
    return "✅ Correct" if is_correct else "❌ Wrong"


def render_report(console: Console, report: QuizReport) -> None:
    """Print the overview and the per-answer review table."""

    console.print()
    console.rule(Text("Quiz Results", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Answered", str(report.total))
    overview.add_row("Correct", str(report.correct))
    overview.add_row("Timed out", str(report.skipped))
    overview.add_row("Accuracy", f"{report.accuracy * 100:.1f}%")
    console.print(overview)

    if not report.rows:
        console.print("[yellow]No answers were recorded.[/]")
        return

    review = Table(title="Answers", box=box.SIMPLE, expand=True)
    review.add_column("Question", overflow="fold")
    review.add_column("Your answer", overflow="fold")
    review.add_column("Result", justify="center")
    for row in report.rows:
        review.add_row(
            row.prompt,
            row.selected_text or "—",
            outcome_label(row.is_correct),
        )
    console.print(review)
