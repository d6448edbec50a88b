"""Tests for config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from diffparser.config import default_config_template, load_app_config


def test_load_app_config_defaults_without_files(tmp_path: Path) -> None:
    config = load_app_config(tmp_path)
    assert config.format == "human"
    assert config.include == []
    assert config.exclude == []
    assert config.legacy_compat is False
    assert config.source is None


def test_load_app_config_prefers_dot_file_over_pyproject(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "pyproject.toml").write_text(
        "\n".join(["[tool.diffparser]", 'format = "human"', "legacy_compat = false"]),
        encoding="utf-8",
    )
    (repo / ".diffparser.toml").write_text(
        "\n".join(['format = "json"', 'include = ["src/**"]', "legacy_compat = true"]),
        encoding="utf-8",
    )

    config = load_app_config(repo)
    assert config.format == "json"
    assert config.include == ["src/**"]
    assert config.legacy_compat is True
    assert config.source == str(repo.resolve() / ".diffparser.toml")


def test_load_app_config_reads_pyproject_tool_section(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "\n".join(
            [
                "[project]",
                'name = "demo"',
                "",
                "[tool.diffparser]",
                'exclude = ["docs/**"]',
            ]
        ),
        encoding="utf-8",
    )

    config = load_app_config(tmp_path)
    assert config.exclude == ["docs/**"]
    assert config.source == str(tmp_path.resolve() / "pyproject.toml")


def test_load_app_config_ignores_pyproject_without_section(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")
    assert load_app_config(tmp_path).source is None


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Config file does not exist"):
        load_app_config(tmp_path, config_path=Path("missing.toml"))


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ('format = "xml"', "format must be one of"),
        ('include = "src/**"', "include must be a list of strings"),
        ('legacy_compat = "yes"', "legacy_compat must be a boolean"),
        ("format = [", "Invalid TOML"),
    ],
)
def test_invalid_config_values_raise(tmp_path: Path, body: str, message: str) -> None:
    (tmp_path / ".diffparser.toml").write_text(body, encoding="utf-8")
    with pytest.raises(ValueError, match=message):
        load_app_config(tmp_path)


def test_default_config_template_round_trips(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.toml"
    config_path.write_text(default_config_template(), encoding="utf-8")

    config = load_app_config(tmp_path, config_path=config_path)
    assert config.format == "human"
    assert config.include == ["src/**"]
    assert config.exclude == ["docs/**"]
    assert config.legacy_compat is False


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    (tmp_path / ".diffparser.toml").write_text(
        'format = "json"\nfail_above = 40\n', encoding="utf-8"
    )
    with pytest.raises(ValueError, match="Unknown config keys .*fail_above"):
        load_app_config(tmp_path)


def test_standalone_file_does_not_read_tool_table(tmp_path: Path) -> None:
    (tmp_path / "diffparser.toml").write_text(
        '[tool.diffparser]\nformat = "json"\n', encoding="utf-8"
    )
    with pytest.raises(ValueError, match="Unknown config keys .*tool"):
        load_app_config(tmp_path)


def test_pyproject_alias_table_is_not_read(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.diff-parser]\nformat = "json"\n', encoding="utf-8"
    )
    config = load_app_config(tmp_path)
    assert config.format == "human"
    assert config.source is None


def test_explicit_pyproject_uses_tool_table(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "demo"\n\n[tool.diffparser]\nlegacy_compat = true\n',
        encoding="utf-8",
    )
    config = load_app_config(tmp_path, config_path=Path("pyproject.toml"))
    assert config.legacy_compat is True
