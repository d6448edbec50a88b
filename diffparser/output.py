"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from diffparser import __version__
from diffparser.diff_parser import Diff, DiffChunk, DiffFile, DiffLine, DiffRange
from diffparser.queries import chunk_length

_MODE_STYLES = {
    "new": ("A", "green"),
    "deleted": ("D", "red"),
    "modified": ("M", "yellow"),
}


def file_path(file_diff: DiffFile) -> str:
    """Best-effort canonical path for reporting."""
    if file_diff.mode == "deleted":
        return file_diff.orig_name or "<unknown>"
    return file_diff.new_name or file_diff.orig_name or "<unknown>"


def render_human(diff: Diff) -> str:
    """Render a compact colorized per-file summary."""
    if not diff.files:
        return "No files changed."

    lines: list[str] = [click.style(f"Files changed: {len(diff.files)}", bold=True)]
    for file_diff in diff.files:
        letter, color = _MODE_STYLES[file_diff.mode]
        added, removed = _count_changes(file_diff)
        lines.append(
            f"{click.style(letter, fg=color, bold=True)} {file_path(file_diff)}: "
            f"{len(file_diff.chunks)} chunks, "
            f"{click.style(f'+{added}', fg='green')} {click.style(f'-{removed}', fg='red')}"
        )
    return "\n".join(lines)


def render_changed_human(changed: dict[str, list[int]]) -> str:
    """Render ``path: n1, n2`` lines for a changed/removed line map."""
    if not changed:
        return "No lines changed."
    return "\n".join(
        f"{click.style(path, bold=True)}: {', '.join(str(number) for number in numbers)}"
        for path, numbers in changed.items()
    )


def render_json(diff: Diff, *, input_source: str) -> str:
    """Render stable JSON output for automation."""
    return json.dumps(build_json_payload(diff, input_source=input_source), sort_keys=True)


def build_json_payload(diff: Diff, *, input_source: str) -> dict[str, Any]:
    """Build the JSON payload for a parsed diff."""
    return {
        "files": [_serialize_file(item) for item in diff.files],
        "meta": _build_meta(input_source),
    }


def build_changed_payload(changed: dict[str, list[int]], *, input_source: str) -> dict[str, Any]:
    return {
        "lines": {path: list(numbers) for path, numbers in changed.items()},
        "meta": _build_meta(input_source),
    }


def _build_meta(input_source: str) -> dict[str, Any]:
    return {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "input_source": input_source,
        "version": __version__,
    }


def _serialize_file(file_diff: DiffFile) -> dict[str, Any]:
    return {
        "header": file_diff.header,
        "mode": file_diff.mode,
        "orig_name": file_diff.orig_name,
        "new_name": file_diff.new_name,
        "chunks": [_serialize_chunk(chunk) for chunk in file_diff.chunks],
    }


def _serialize_chunk(chunk: DiffChunk) -> dict[str, Any]:
    return {
        "header": chunk.header,
        "length": chunk_length(chunk),
        "orig_range": _serialize_range(chunk.orig_range),
        "new_range": _serialize_range(chunk.new_range),
    }


def _serialize_range(diff_range: DiffRange) -> dict[str, Any]:
    return {
        "start": diff_range.start,
        "length": diff_range.length,
        "lines": [_serialize_line(line) for line in diff_range.lines],
    }


def _serialize_line(line: DiffLine) -> dict[str, Any]:
    return {
        "mode": line.mode,
        "number": line.number,
        "content": line.content,
        "position": line.position,
    }


def _count_changes(file_diff: DiffFile) -> tuple[int, int]:
    added = 0
    removed = 0
    for chunk in file_diff.chunks:
        for line in chunk.whole_range.lines:
            if line.mode == "added":
                added += 1
            elif line.mode == "removed":
                removed += 1
    return (added, removed)
