"""Configuration loading for diffparser.

Settings come from the first of: an explicit ``--config`` file,
``.diffparser.toml`` / ``diffparser.toml`` in the repository, or the
``[tool.diffparser]`` table of its ``pyproject.toml``. Files are never merged.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".diffparser.toml", "diffparser.toml")
PYPROJECT_FILENAME = "pyproject.toml"
OUTPUT_FORMATS = ("human", "json")
CONFIG_KEYS = frozenset({"format", "include", "exclude", "legacy_compat"})


@dataclass(slots=True)
class AppConfig:
    """Parser and output settings resolved for one repository."""

    format: str = "human"
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    legacy_compat: bool = False
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "include": list(self.include),
            "exclude": list(self.exclude),
            "legacy_compat": self.legacy_compat,
            "source": self.source,
        }


def load_app_config(repo: Path, config_path: Path | None = None) -> AppConfig:
    """Resolve the config for ``repo``; invalid files raise ``ValueError``."""
    repo = repo.resolve()
    if config_path is not None:
        path = config_path if config_path.is_absolute() else repo / config_path
        if not path.is_file():
            raise ValueError(f"Config file does not exist: {path}")
        return _load_file(path)

    for name in CONFIG_FILENAMES:
        path = repo / name
        if path.is_file():
            return _load_file(path)

    pyproject = repo / PYPROJECT_FILENAME
    if pyproject.is_file() and _pyproject_table(_read_toml(pyproject)) is not None:
        return _load_file(pyproject)

    logger.debug("No diffparser config under %s, using defaults", repo)
    return AppConfig()


def default_config_template() -> str:
    """Return a starter ``.diffparser.toml``."""
    return "\n".join(
        [
            "# Output format for `diffparser parse` and `diffparser changed`.",
            'format = "human"',
            "",
            "# Glob patterns applied to file paths before output.",
            'include = ["src/**"]',
            'exclude = ["docs/**"]',
            "",
            "# Drop one extra character after +/- markers and default omitted",
            "# hunk lengths to the start line, matching older tooling.",
            "legacy_compat = false",
            "",
        ]
    )


def _load_file(path: Path) -> AppConfig:
    document = _read_toml(path)
    if path.name == PYPROJECT_FILENAME:
        table = _pyproject_table(document) or {}
    else:
        table = document
    logger.debug("Using diffparser config from %s", path)
    return _config_from_table(table, source=path)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            return tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc


def _pyproject_table(document: dict[str, Any]) -> dict[str, Any] | None:
    tool = document.get("tool")
    table = tool.get("diffparser") if isinstance(tool, dict) else None
    if table is not None and not isinstance(table, dict):
        raise ValueError("[tool.diffparser] must be a table")
    return table


def _config_from_table(table: dict[str, Any], *, source: Path) -> AppConfig:
    unknown = sorted(set(table) - CONFIG_KEYS)
    if unknown:
        raise ValueError(f"Unknown config keys in {source}: {', '.join(unknown)}")

    output_format = table.get("format", "human")
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"format must be one of: {', '.join(OUTPUT_FORMATS)}")

    legacy_compat = table.get("legacy_compat", False)
    if not isinstance(legacy_compat, bool):
        raise ValueError("legacy_compat must be a boolean")

    return AppConfig(
        format=output_format,
        include=_glob_list(table, "include"),
        exclude=_glob_list(table, "exclude"),
        legacy_compat=legacy_compat,
        source=str(source),
    )


def _glob_list(table: dict[str, Any], key: str) -> list[str]:
    patterns = table.get(key, [])
    if not isinstance(patterns, list) or not all(isinstance(item, str) for item in patterns):
        raise ValueError(f"{key} must be a list of strings")
    return list(patterns)
