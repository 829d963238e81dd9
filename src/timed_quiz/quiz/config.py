"""Configuration loader for quiz sessions."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

from timed_quiz.core import config as core_config
from timed_quiz.core import workspace as workspace_mod

from .bank import DEFAULT_LIMIT
from .session import SessionSettings
from .source import DEFAULT_SOURCE_URL, DEFAULT_TIMEOUT, FieldMap

CONFIG_FILENAME = "quiz.toml"
CONFIG_ENV = "TIMED_QUIZ_CONFIG"
ENV_PREFIX = "TIMED_QUIZ_"

_DEFAULT_LOG_LEVEL = "INFO"
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved configuration for a quiz run."""

    source_url: str
    timeout: float
    fields: FieldMap
    limit: int
    strict: bool
    session: SessionSettings
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    source_url: Optional[str] = None
    limit: Optional[int] = None
    strict: Optional[bool] = None
    duration: Optional[int] = None
    lock: Optional[int] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Resolved configuration plus the workspace it was loaded from."""

    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        try:
            table = core_config.layered_table(table, requested_path)
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
    elif config_path is not None or (env_map.get(CONFIG_ENV) or "").strip():
        raise QuizConfigError(f"Config file not found: {requested_path}")

    source = table["source"]
    bank = table["bank"]
    session = table["session"]

    source_url = _require_str(
        _pick_first(
            overrides.source_url,
            _env_string(env_map, "SOURCE_URL"),
            source["url"],
        ),
        "source.url",
    )
    timeout = _require_number(source["timeout"], "source.timeout")
    fields = FieldMap(
        id=_require_str(source["id_field"], "source.id_field"),
        primary=_require_str(source["primary_field"], "source.primary_field"),
        secondary=_require_str(
            source["secondary_field"], "source.secondary_field"
        ),
    )
    limit = _require_int(
        _pick_first(overrides.limit, _env_int(env_map, "LIMIT"), bank["limit"]),
        "bank.limit",
    )
    if limit <= 0:
        raise QuizConfigError("bank.limit must be a positive integer.")
    strict = _require_bool(
        _pick_first(
            overrides.strict, _env_bool(env_map, "STRICT"), bank["strict"]
        ),
        "bank.strict",
    )
    duration = _require_int(
        _pick_first(
            overrides.duration,
            _env_int(env_map, "DURATION"),
            session["question_duration_seconds"],
        ),
        "session.question_duration_seconds",
    )
    lock = _require_int(
        _pick_first(
            overrides.lock,
            _env_int(env_map, "LOCK"),
            session["answer_lock_seconds"],
        ),
        "session.answer_lock_seconds",
    )
    try:
        settings = SessionSettings(
            question_duration_seconds=duration, answer_lock_seconds=lock
        )
    except ValueError as exc:
        raise QuizConfigError(str(exc)) from exc
    log_level = _require_str(
        _pick_first(
            overrides.log_level,
            _env_string(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        ),
        "logging.level",
    ).upper()

    config = QuizConfig(
        source_url=source_url,
        timeout=timeout,
        fields=fields,
        limit=limit,
        strict=strict,
        session=settings,
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, object]]:
    defaults = FieldMap()
    settings = SessionSettings()
    return {
        "source": {
            "url": DEFAULT_SOURCE_URL,
            "timeout": DEFAULT_TIMEOUT,
            "id_field": defaults.id,
            "primary_field": defaults.primary,
            "secondary_field": defaults.secondary,
        },
        "bank": {"limit": DEFAULT_LIMIT, "strict": False},
        "session": {
            "question_duration_seconds": settings.question_duration_seconds,
            "answer_lock_seconds": settings.answer_lock_seconds,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _require_str(value: object, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError(f"{key} must be a non-empty string.")
    return value.strip()


def _require_int(value: object, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise QuizConfigError(f"{key} must be an integer.")
    return value


def _require_number(value: object, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QuizConfigError(f"{key} must be a number.")
    if value <= 0:
        raise QuizConfigError(f"{key} must be positive.")
    return float(value)


def _require_bool(value: object, key: str) -> bool:
    if not isinstance(value, bool):
        raise QuizConfigError(f"{key} must be true or false.")
    return value


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    raw = _env_string(env_map, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise QuizConfigError(
            f"{ENV_PREFIX}{key} must be an integer, got '{raw}'."
        ) from exc


def _env_bool(env_map: Mapping[str, str], key: str) -> Optional[bool]:
    raw = _env_string(env_map, key)
    if raw is None:
        return None
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise QuizConfigError(f"{ENV_PREFIX}{key} must be a boolean, got '{raw}'.")


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
