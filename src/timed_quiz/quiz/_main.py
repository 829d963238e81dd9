"""CLI handlers for playing, previewing and configuring quizzes."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from timed_quiz.core import config_templates
from timed_quiz.core import workspace as workspace_mod
from timed_quiz.core.config_templates import ConfigTemplateError
from timed_quiz.core.logging import configure_logger
from timed_quiz.core.workspace import WorkspaceError

from .bank import build_question_bank
from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    load_config,
)
from .errors import QuizError
from .models import Phase, Question
from .report import render_report
from .source import HttpQuestionSource
from .view import TimedQuizApp, option_label

LOGGER_NAME = "timed_quiz"


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            f"directory's {CONFIG_FILENAME})."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config and logs.",
    )
    parser.add_argument(
        "--source-url", help="JSON endpoint that supplies question records."
    )
    parser.add_argument(
        "--limit", type=int, help="Number of questions to build."
    )
    parser.add_argument(
        "--strict",
        dest="strict",
        action="store_true",
        default=None,
        help="Fail when the source has fewer records than --limit.",
    )
    parser.add_argument(
        "--no-strict",
        dest="strict",
        action="store_false",
        help="Play with however many questions the source provides.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed the option shuffle for a reproducible question bank.",
    )
    parser.add_argument(
        "--log-level", help="Logging level for the log file (default INFO)."
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG and mirror log records to stderr.",
    )


def _build_play_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz play",
        description=(
            "Fetch questions and run the timed quiz in the terminal, then "
            "print the results."
        ),
    )
    _add_source_arguments(parser)
    parser.add_argument(
        "--duration",
        type=int,
        help="Seconds available for each question (default 30).",
    )
    parser.add_argument(
        "--lock",
        type=int,
        help="Seconds answering stays locked at the start of each question.",
    )
    return parser


def _build_preview_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz preview",
        description="Fetch questions and print the bank without playing.",
    )
    _add_source_arguments(parser)
    return parser


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz config",
        description="Manage the quiz configuration file.",
    )
    sub = parser.add_subparsers(dest="action", required=True)
    sp_init = sub.add_parser(
        "init", help=f"Write the default {CONFIG_FILENAME} template."
    )
    sp_init.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root that receives the template.",
    )
    sp_init.add_argument(
        "--path", type=Path, help="Write the template to this file instead."
    )
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing file."
    )
    return parser


def _load(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> tuple[LoadResult, logging.Logger, Path]:
    overrides = ConfigOverrides(
        source_url=args.source_url,
        limit=args.limit,
        strict=args.strict,
        duration=getattr(args, "duration", None),
        lock=getattr(args, "lock", None),
        log_level=args.log_level,
    )
    try:
        result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=result.layout.path_for("logs"),
        level=result.config.log_level,
        verbose=args.verbose,
        filename="quiz.log",
    )
    logger.debug(
        "quiz CLI invoked",
        extra={"config_path": result.config_path, "argv": sys.argv[1:]},
    )
    return result, logger, log_path


def _make_source(result: LoadResult) -> HttpQuestionSource:
    config = result.config
    return HttpQuestionSource(
        url=config.source_url,
        timeout=config.timeout,
        fields=config.fields,
    )


def _make_rng(seed: Optional[int]) -> Optional[random.Random]:
    return random.Random(seed) if seed is not None else None


def play_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_play_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    result, logger, log_path = _load(parser, args)
    config = result.config

    app = TimedQuizApp(
        _make_source(result),
        limit=config.limit,
        strict=config.strict,
        settings=config.session,
        rng=_make_rng(args.seed),
    )
    try:
        app.run()
    finally:
        if app.session is not None:
            app.session.close()

    console = Console()
    if app.error:
        console.print(f"[red]Error:[/] {app.error}")
        console.print(f"Details logged to {log_path}")
        return 1
    session = app.session
    if session is not None and session.phase is Phase.NOT_STARTED:
        console.print("[yellow]Quiz not started.[/]")
        logger.info("Quiz closed before starting")
        return 0
    report = app.report()
    if report is None:
        return 1
    if session is not None and not session.is_completed:
        console.print("[yellow]Quiz ended before the last question.[/]")
    logger.info(
        "Quiz finished",
        extra={
            "answered": report.total,
            "correct": report.correct,
            "skipped": report.skipped,
        },
    )
    render_report(console, report)
    return 0


def preview_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_preview_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    result, logger, _ = _load(parser, args)
    config = result.config

    console = Console()
    try:
        records = _make_source(result).fetch()
        questions = build_question_bank(
            records, config.limit, strict=config.strict, rng=_make_rng(args.seed)
        )
    except QuizError as exc:
        logger.error("Preview failed", extra={"error": str(exc)})
        console.print(f"[red]Error:[/] {exc}")
        return 1
    _render_bank(console, questions)
    return 0


def _render_bank(console: Console, questions: Sequence[Question]) -> None:
    if not questions:
        console.print("[yellow]Question bank is empty.[/]")
        return
    for question in questions:
        table = Table(
            title=question.prompt,
            title_justify="left",
            show_header=False,
            box=box.SIMPLE,
            expand=True,
        )
        table.add_column("Option", overflow="fold")
        table.add_column("Correct", justify="center", width=3)
        for position, option in enumerate(question.options):
            table.add_row(
                option_label(position, option.text),
                "✓" if option.is_correct else "",
            )
        console.print(table)
    console.print(f"{len(questions)} question(s) ready.")


def config_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    target = args.path
    if target is None:
        try:
            layout = workspace_mod.ensure_workspace(path=args.workspace)
        except WorkspaceError as exc:
            parser.error(str(exc))
        target = layout.path_for("config") / CONFIG_FILENAME
    try:
        written = config_templates.get_template("quiz").write(
            target.expanduser(), overwrite=args.force
        )
    except ConfigTemplateError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    sys.stdout.write(f"Wrote config template to {written}\n")
    return 0
