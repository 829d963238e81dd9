"""The ``quiz.toml`` template shipped inside the package."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from .config import TomlConfigError, write_toml_template

__all__ = ["ConfigTemplate", "ConfigTemplateError", "TEMPLATES", "get_template"]


class ConfigTemplateError(RuntimeError):
    """The template is unknown or could not be written."""


@dataclass(frozen=True)
class ConfigTemplate:
    name: str
    package: str
    filename: str = "template.toml"

    def read_text(self) -> str:
        return (
            resources.files(self.package)
            .joinpath(self.filename)
            .read_text(encoding="utf-8")
        )

    def write(self, path: Path, *, overwrite: bool = False) -> Path:
        try:
            return write_toml_template(
                path, template=self.read_text(), overwrite=overwrite
            )
        except TomlConfigError as exc:
            raise ConfigTemplateError(str(exc)) from exc


TEMPLATES = {"quiz": ConfigTemplate(name="quiz", package="timed_quiz.quiz")}


def get_template(name: str) -> ConfigTemplate:
    try:
        return TEMPLATES[name]
    except KeyError as exc:
        raise ConfigTemplateError(f"Unknown config template '{name}'.") from exc
