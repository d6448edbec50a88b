"""Parse unified diffs into a queryable file/chunk/line model."""

from diffparser.diff_parser import (
    Diff,
    DiffChunk,
    DiffFile,
    DiffLine,
    DiffRange,
    MalformedHunkHeading,
    ParseError,
    UnrecognizedLineMode,
    parse_unified_diff,
)
from diffparser.queries import changed_lines, chunk_length, removed_lines

__version__ = "0.1.0"

__all__ = [
    "Diff",
    "DiffChunk",
    "DiffFile",
    "DiffLine",
    "DiffRange",
    "MalformedHunkHeading",
    "ParseError",
    "UnrecognizedLineMode",
    "__version__",
    "changed_lines",
    "chunk_length",
    "parse_unified_diff",
    "removed_lines",
]
