"""Unified diff parser primitives."""

from __future__ import annotations

from dataclasses import dataclass, field
from re import Match, compile
from typing import Literal

FileMode = Literal["deleted", "modified", "new"]
LineMode = Literal["added", "removed", "unchanged"]

HUNK_HEADER_RE = compile(
    r"^@@ -(?P<orig_start>\d+)(?:,(?P<orig_len>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_len>\d+))? @@ ?(?P<header>.*)$"
)
INDEX_LINE_RE = compile(r"^index .+$")
FILE_MARKER_RE = compile(r"^(-|\+){3} .+$")

FILE_MARKER = "diff "
HUNK_MARKER = "@@ "
OLD_FILE_PREFIX = "--- a/"
NEW_FILE_PREFIX = "+++ b/"
NULL_SOURCE = "--- /dev/null"
NULL_DESTINATION = "+++ /dev/null"
NO_NEWLINE_MARKER = "\\ No newline at end of file"

_LINE_MODES: dict[str, LineMode] = {" ": "unchanged", "+": "added", "-": "removed"}


class ParseError(ValueError):
    """Raised when diff text cannot be parsed."""

    def __init__(self, message: str, line: str) -> None:
        super().__init__(message)
        self.line = line


class MalformedHunkHeading(ParseError):
    """A ``@@`` line does not match the hunk heading grammar."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Invalid hunk header: {line}", line)


class UnrecognizedLineMode(ParseError):
    """A hunk body line starts with something other than space, ``+`` or ``-``."""

    def __init__(self, line: str) -> None:
        super().__init__(f'Could not parse line mode for line: "{line}"', line)


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single physical line of a hunk, seen from one side."""

    mode: LineMode
    number: int
    content: str
    position: int


@dataclass(slots=True)
class DiffRange:
    """One side's line window within a hunk."""

    start: int = 0
    length: int = 0
    lines: list[DiffLine] = field(default_factory=list)


@dataclass(slots=True)
class DiffChunk:
    """A diff hunk."""

    header: str = ""
    orig_range: DiffRange = field(default_factory=DiffRange)
    new_range: DiffRange = field(default_factory=DiffRange)
    whole_range: DiffRange = field(default_factory=DiffRange)


@dataclass(slots=True)
class DiffFile:
    """A parsed file-level diff."""

    header: str
    mode: FileMode = "modified"
    orig_name: str = ""
    new_name: str = ""
    chunks: list[DiffChunk] = field(default_factory=list)


@dataclass(slots=True)
class Diff:
    """Parse result: every file touched by the diff, in input order."""

    files: list[DiffFile] = field(default_factory=list)
    raw: str = ""


@dataclass(slots=True)
class HunkHeading:
    """Parsed hunk heading values."""

    orig_start: int
    orig_len: int
    new_start: int
    new_len: int
    header: str


@dataclass(slots=True)
class _ParseState:
    diff: Diff
    legacy_compat: bool = False
    file: DiffFile | None = None
    chunk: DiffChunk | None = None
    added_count: int = 0
    removed_count: int = 0
    in_hunk: bool = False
    position: int = 0
    first_hunk_in_file: bool = False


def parse_unified_diff(diff_text: str, *, legacy_compat: bool = False) -> Diff:
    """Parse unified diff text into file/chunk/line models.

    ``legacy_compat`` reproduces older tooling byte for byte: one
    extra character after the ``+``/``-`` marker is dropped from line content
    and an omitted hunk length defaults to the start line instead of 1.

    Raises ``MalformedHunkHeading`` or ``UnrecognizedLineMode``; no partial
    result is returned.
    """
    state = _ParseState(diff=Diff(raw=diff_text), legacy_compat=legacy_compat)
    lines = diff_text.split("\n")
    for index in range(len(lines)):
        _consume_line(state, lines, index)
    return state.diff


def parse_hunk_heading(line: str, *, legacy_compat: bool = False) -> HunkHeading:
    """Parse a ``@@ -a,b +c,d @@ text`` line."""
    match: Match[str] | None = HUNK_HEADER_RE.match(line)
    if match is None:
        raise MalformedHunkHeading(line)

    orig_start = int(match.group("orig_start"))
    new_start = int(match.group("new_start"))
    return HunkHeading(
        orig_start=orig_start,
        orig_len=_range_length(match.group("orig_len"), orig_start, legacy_compat),
        new_start=new_start,
        new_len=_range_length(match.group("new_len"), new_start, legacy_compat),
        header=match.group("header"),
    )


def is_source_line(line: str) -> bool:
    """Return whether a line inside a hunk carries file content."""
    if line == NO_NEWLINE_MARKER or not line:
        return False
    return not (line.startswith("---") or line.startswith("+++"))


def _consume_line(state: _ParseState, lines: list[str], index: int) -> None:
    line = lines[index]
    state.position += 1

    if line.startswith(FILE_MARKER):
        _start_file(state, lines, index)
        return

    # Anything ahead of the first file header is preamble.
    file = state.file
    if file is None:
        return

    if line == NULL_DESTINATION:
        file.mode = "deleted"
    elif line == NULL_SOURCE:
        file.mode = "new"
    elif line.startswith(OLD_FILE_PREFIX):
        file.orig_name = line[len(OLD_FILE_PREFIX) :]
    elif line.startswith(NEW_FILE_PREFIX):
        file.new_name = line[len(NEW_FILE_PREFIX) :]
    elif line.startswith(HUNK_MARKER):
        _start_chunk(state, file, line)
    elif state.in_hunk and state.chunk is not None and is_source_line(line):
        _append_body_line(state, state.chunk, line)


def _start_file(state: _ParseState, lines: list[str], index: int) -> None:
    header = lines[index]
    if len(lines) > index + 3:
        if INDEX_LINE_RE.match(lines[index + 1]):
            header = f"{header}\n{lines[index + 1]}"
        marker_old, marker_new = lines[index + 2], lines[index + 3]
        if FILE_MARKER_RE.match(marker_old) and FILE_MARKER_RE.match(marker_new):
            header = f"{header}\n{marker_old}\n{marker_new}"

    state.file = DiffFile(header=header)
    state.diff.files.append(state.file)
    state.chunk = None
    state.in_hunk = False
    state.first_hunk_in_file = True


def _start_chunk(state: _ParseState, file: DiffFile, line: str) -> None:
    if state.first_hunk_in_file:
        state.position = 0
        state.first_hunk_in_file = False

    heading = parse_hunk_heading(line, legacy_compat=state.legacy_compat)
    chunk = DiffChunk(
        header=heading.header,
        orig_range=DiffRange(start=heading.orig_start, length=heading.orig_len),
        new_range=DiffRange(start=heading.new_start, length=heading.new_len),
    )
    file.chunks.append(chunk)
    state.chunk = chunk
    state.in_hunk = True
    state.added_count = heading.new_start
    state.removed_count = heading.orig_start


def _append_body_line(state: _ParseState, chunk: DiffChunk, line: str) -> None:
    mode = _LINE_MODES.get(line[0])
    if mode is None:
        raise UnrecognizedLineMode(line)

    content = line[1:]
    if mode == "unchanged":
        new_line = DiffLine(mode, state.added_count, content, state.position)
        orig_line = DiffLine(mode, state.removed_count, content, state.position)
        chunk.new_range.lines.append(new_line)
        chunk.whole_range.lines.append(new_line)
        chunk.orig_range.lines.append(orig_line)
        state.added_count += 1
        state.removed_count += 1
        return

    if state.legacy_compat:
        content = content[1:]

    if mode == "added":
        added = DiffLine(mode, state.added_count, content, state.position)
        chunk.new_range.lines.append(added)
        chunk.whole_range.lines.append(added)
        state.added_count += 1
    else:
        removed = DiffLine(mode, state.removed_count, content, state.position)
        chunk.orig_range.lines.append(removed)
        chunk.whole_range.lines.append(removed)
        state.removed_count += 1


def _range_length(raw: str | None, start: int, legacy_compat: bool) -> int:
    if raw:
        return int(raw)
    return start if legacy_compat else 1
