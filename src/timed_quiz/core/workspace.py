"""Workspace bootstrap helpers for timed-quiz commands."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, MutableMapping


WORKSPACE_ENV = "TIMED_QUIZ_DATA_HOME"
DEFAULT_WORKSPACE = Path.home() / ".timed-quiz-data"

_SUBDIRS = {
    "config": "config",
    "logs": "logs",
}


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace paths and creation metadata."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise KeyError(f"Unknown workspace directory '{key}'.") from exc

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Ensure the workspace exists and return its layout.

    ``path`` wins over the ``TIMED_QUIZ_DATA_HOME`` environment variable,
    which wins over ``~/.timed-quiz-data``. With ``create=False`` nothing is
    written to disk; the layout only describes where things would live.
    """

    base = _resolve_base(os.environ if env is None else env, override=path)
    if base.exists() and not base.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {base}"
        )

    created: MutableMapping[str, bool] = {"home": False}
    directories: MutableMapping[str, Path] = {}
    try:
        if create:
            created["home"] = _ensure_dir(base)
        for key, relative in _SUBDIRS.items():
            candidate = base / relative
            created[key] = _ensure_dir(candidate) if create else False
            directories[key] = candidate
    except PermissionError as exc:
        raise WorkspaceError(f"Unable to prepare workspace at {base}") from exc

    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(dict(directories)),
        created=MappingProxyType(dict(created)),
    )


def _resolve_base(env: Mapping[str, str], *, override: Path | None) -> Path:
    if override is not None:
        target = override
    else:
        custom = (env.get(WORKSPACE_ENV) or "").strip()
        target = Path(custom) if custom else DEFAULT_WORKSPACE
    return target.expanduser().resolve()


def _ensure_dir(path: Path) -> bool:
    if path.exists() and not path.is_dir():
        raise WorkspaceError(
            f"Expected directory but found a non-directory entry: {path}"
        )
    existed = path.exists()
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
    return not existed
