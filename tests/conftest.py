from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import FakeScheduler, make_records  # noqa: E402
from timed_quiz.quiz import build_question_bank  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_quiz_logger() -> Iterator[None]:
    """Undo handler changes made by CLI runs so tests stay isolated."""

    yield
    logger = logging.getLogger("timed_quiz")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _isolated_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    home = tmp_path / "workspace-home"
    monkeypatch.setenv("TIMED_QUIZ_DATA_HOME", str(home))
    for key in (
        "TIMED_QUIZ_CONFIG",
        "TIMED_QUIZ_SOURCE_URL",
        "TIMED_QUIZ_LIMIT",
        "TIMED_QUIZ_STRICT",
        "TIMED_QUIZ_DURATION",
        "TIMED_QUIZ_LOCK",
        "TIMED_QUIZ_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def records():
    return make_records(10)


@pytest.fixture
def bank(records):
    return build_question_bank(records)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
