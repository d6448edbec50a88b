"""Read-only queries over a parsed diff."""

from __future__ import annotations

from diffparser.diff_parser import Diff, DiffChunk


def changed_lines(diff: Diff) -> dict[str, list[int]]:
    """Map each file's new name to its added line numbers.

    Deleted files are skipped. Removed lines are not included; see
    ``removed_lines`` for the original-side view.
    """
    changed: dict[str, list[int]] = {}
    for file_diff in diff.files:
        if file_diff.mode == "deleted":
            continue
        for chunk in file_diff.chunks:
            for line in chunk.new_range.lines:
                if line.mode == "added":
                    changed.setdefault(file_diff.new_name, []).append(line.number)
    return changed


def removed_lines(diff: Diff) -> dict[str, list[int]]:
    """Map each file's original name to its removed line numbers, skipping new files."""
    removed: dict[str, list[int]] = {}
    for file_diff in diff.files:
        if file_diff.mode == "new":
            continue
        for chunk in file_diff.chunks:
            for line in chunk.orig_range.lines:
                if line.mode == "removed":
                    removed.setdefault(file_diff.orig_name, []).append(line.number)
    return removed


def chunk_length(chunk: DiffChunk) -> int:
    """Number of diff lines the hunk spans, counting its heading."""
    return len(chunk.whole_range.lines) + 1
