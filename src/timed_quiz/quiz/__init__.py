from .bank import DEFAULT_LIMIT, build_question_bank
from .errors import (
    EmptyBankError,
    InsufficientDataError,
    QuizError,
    SourceUnavailableError,
)
from .models import AnswerRecord, Option, Phase, Question, SourceRecord
from .options import generate_options
from .report import QuizReport, ReportRow, render_report, summarize
from .session import QuizSession, SessionSettings
from .source import (
    FieldMap,
    HttpQuestionSource,
    QuestionSource,
    StaticQuestionSource,
    parse_records,
)

__all__ = [
    "DEFAULT_LIMIT",
    "build_question_bank",
    "QuizError",
    "SourceUnavailableError",
    "EmptyBankError",
    "InsufficientDataError",
    "AnswerRecord",
    "Option",
    "Phase",
    "Question",
    "SourceRecord",
    "generate_options",
    "QuizReport",
    "ReportRow",
    "render_report",
    "summarize",
    "QuizSession",
    "SessionSettings",
    "FieldMap",
    "HttpQuestionSource",
    "QuestionSource",
    "StaticQuestionSource",
    "parse_records",
]
