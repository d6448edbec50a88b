"""CLI entrypoint for diffparser."""

from __future__ import annotations

import fnmatch
import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from diffparser import __version__
from diffparser.config import AppConfig, default_config_template, load_app_config
from diffparser.diff_parser import Diff, ParseError, parse_unified_diff
from diffparser.output import (
    build_changed_payload,
    file_path,
    render_changed_human,
    render_human,
    render_json,
)
from diffparser.queries import changed_lines, removed_lines

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="diffparser",
    no_args_is_help=True,
    help="Parse unified diffs and report which lines changed in which files.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Root command callback."""
    _ = version
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command("parse")
def parse_command(
    diff_file: Annotated[Path | None, typer.Option(help="Path to unified diff file.")] = None,
    stdin: Annotated[bool, typer.Option(help="Read unified diff from stdin.")] = False,
    repo: Annotated[Path, typer.Option(help="Directory holding the project config.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    include: Annotated[list[str] | None, typer.Option(help="Include glob pattern.")] = None,
    exclude: Annotated[list[str] | None, typer.Option(help="Exclude glob pattern.")] = None,
    legacy_compat: Annotated[
        bool | None,
        typer.Option(
            "--legacy-compat/--no-legacy-compat",
            help="Reproduce older tooling's content stripping and hunk length defaults.",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Parse a diff and print its files, chunks and line counts."""
    app_config = _load_config_or_raise(repo, config_file)
    output_format = _resolve_format(format, app_config)
    parse_ctx = _prepare_parse_context(
        diff_file=diff_file,
        stdin=stdin,
        include=include,
        exclude=exclude,
        legacy_compat=legacy_compat,
        app_config=app_config,
    )

    if output_format == "json":
        typer.echo(render_json(parse_ctx.diff, input_source=parse_ctx.input_source))
    else:
        typer.echo(render_human(parse_ctx.diff))


@app.command("changed")
def changed_command(
    diff_file: Annotated[Path | None, typer.Option(help="Path to unified diff file.")] = None,
    stdin: Annotated[bool, typer.Option(help="Read unified diff from stdin.")] = False,
    repo: Annotated[Path, typer.Option(help="Directory holding the project config.")] = Path("."),
    removed: Annotated[
        bool,
        typer.Option("--removed", help="Report removed original-side lines instead."),
    ] = False,
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    include: Annotated[list[str] | None, typer.Option(help="Include glob pattern.")] = None,
    exclude: Annotated[list[str] | None, typer.Option(help="Exclude glob pattern.")] = None,
    legacy_compat: Annotated[
        bool | None,
        typer.Option(
            "--legacy-compat/--no-legacy-compat",
            help="Reproduce older tooling's content stripping and hunk length defaults.",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Print added line numbers per file (deleted files are skipped)."""
    app_config = _load_config_or_raise(repo, config_file)
    output_format = _resolve_format(format, app_config)
    parse_ctx = _prepare_parse_context(
        diff_file=diff_file,
        stdin=stdin,
        include=include,
        exclude=exclude,
        legacy_compat=legacy_compat,
        app_config=app_config,
    )
    lines = removed_lines(parse_ctx.diff) if removed else changed_lines(parse_ctx.diff)

    if output_format == "json":
        payload = build_changed_payload(lines, input_source=parse_ctx.input_source)
        payload["side"] = "orig" if removed else "new"
        typer.echo(json.dumps(payload, sort_keys=True))
    else:
        typer.echo(render_changed_human(lines))


@app.command("config")
def config_command(
    repo: Annotated[Path, typer.Option(help="Directory holding the project config.")] = Path("."),
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the config as JSON.")] = False,
) -> None:
    """Show the resolved configuration; exits 2 if it is invalid."""
    app_config = _load_config_or_raise(repo, config_file)
    if as_json:
        typer.echo(json.dumps(app_config.to_dict(), sort_keys=True))
        return

    typer.echo(f"source: {app_config.source or 'defaults'}")
    for key, value in app_config.to_dict().items():
        if key != "source":
            typer.echo(f"{key} = {json.dumps(value)}")


@app.command("config-init")
def config_init_command(
    path: Annotated[
        Path, typer.Argument(help="Where to write the starter config.")
    ] = Path(".diffparser.toml"),
    force: Annotated[bool, typer.Option("--force", help="Replace an existing file.")] = False,
) -> None:
    """Write a starter .diffparser.toml."""
    if path.exists() and not force:
        raise typer.BadParameter(f"{path} already exists (use --force)", param_hint="PATH")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote {path}")


def main() -> None:
    """Console script entrypoint."""
    app()


class _ParseContext:
    """Resolved diff input and its parsed, filtered model."""

    def __init__(self, *, diff: Diff, input_source: str) -> None:
        self.diff = diff
        self.input_source = input_source


def _prepare_parse_context(
    *,
    diff_file: Path | None,
    stdin: bool,
    include: list[str] | None,
    exclude: list[str] | None,
    legacy_compat: bool | None,
    app_config: AppConfig,
) -> _ParseContext:
    diff_text, input_source = _resolve_diff_input(diff_file=diff_file, stdin=stdin)
    use_legacy = legacy_compat if legacy_compat is not None else app_config.legacy_compat

    try:
        diff = parse_unified_diff(diff_text, legacy_compat=use_legacy)
    except ParseError as exc:
        logger.debug("Parse failed on line %r", exc.line)
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    logger.debug("Parsed %d files from %s", len(diff.files), input_source)

    include_patterns = include if include is not None else app_config.include
    exclude_patterns = exclude if exclude is not None else app_config.exclude
    return _ParseContext(
        diff=_filter_files(diff, includes=include_patterns, excludes=exclude_patterns),
        input_source=input_source,
    )


def _resolve_diff_input(*, diff_file: Path | None, stdin: bool) -> tuple[str, str]:
    if diff_file and stdin:
        raise typer.BadParameter("Use either --diff-file or --stdin, not both.")
    if diff_file is not None:
        try:
            return (diff_file.read_text(encoding="utf-8"), f"diff_file:{diff_file}")
        except UnicodeDecodeError as exc:
            raise typer.BadParameter(
                f"{diff_file} is not valid UTF-8 ({exc.reason} at byte {exc.start})",
                param_hint="--diff-file",
            ) from exc
        except OSError as exc:
            raise typer.BadParameter(str(exc), param_hint="--diff-file") from exc
    if stdin:
        try:
            return (sys.stdin.read(), "stdin")
        except UnicodeDecodeError as exc:
            raise typer.BadParameter(
                f"stdin is not valid UTF-8 ({exc.reason} at byte {exc.start})",
                param_hint="--stdin",
            ) from exc
    raise typer.BadParameter("Provide --diff-file or --stdin.")


def _filter_files(diff: Diff, *, includes: list[str], excludes: list[str]) -> Diff:
    if not includes and not excludes:
        return diff
    filtered = Diff(raw=diff.raw)
    for file_diff in diff.files:
        path = file_path(file_diff)
        if includes and not any(fnmatch.fnmatch(path, pattern) for pattern in includes):
            continue
        if excludes and any(fnmatch.fnmatch(path, pattern) for pattern in excludes):
            continue
        filtered.files.append(file_diff)
    return filtered


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _resolve_format(value: str | None, app_config: AppConfig) -> str:
    resolved = (value or app_config.format).lower()
    if resolved not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    return resolved
