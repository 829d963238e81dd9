"""Read, layer and write the TOML files behind ``quiz.toml``."""

from __future__ import annotations

import copy
import tomllib
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "TomlConfigError",
    "layered_table",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """A TOML file could not be read, parsed, layered or written."""


def load_toml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(
            f"Failed to parse config TOML {path}: {exc}"
        ) from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Overlay ``override`` onto ``base`` in place.

    Every key must already exist in ``base`` and a table may only be
    replaced by another table. ``path`` prefixes the dotted key in errors.
    """

    unknown = [key for key in override if key not in base]
    if unknown:
        raise TomlConfigError(
            f"Unknown configuration key '{path}{unknown[0]}'."
        )
    for key, value in override.items():
        current = base[key]
        if not isinstance(current, MutableMapping):
            base[key] = value
        elif isinstance(value, Mapping):
            merge_defaults(current, value, path=f"{path}{key}.")
        else:
            raise TomlConfigError(
                f"Expected table for '{path}{key}', "
                f"found {type(value).__name__}."
            )


def layered_table(
    defaults: Mapping[str, Any], path: Path
) -> dict[str, Any]:
    """Return a copy of ``defaults`` with the file at ``path`` laid over it."""

    table = copy.deepcopy(dict(defaults))
    merge_defaults(table, load_toml(path))
    return table


def write_toml_template(
    path: Path, *, template: str, overwrite: bool = False
) -> Path:
    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(template, encoding="utf-8")
    path.chmod(0o600)
    return path
