"""Tests for derived queries over parsed diffs."""

from pathlib import Path

from diffparser.diff_parser import Diff, parse_unified_diff
from diffparser.queries import changed_lines, chunk_length, removed_lines

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "diffs"


def _parse_example() -> Diff:
    return parse_unified_diff((FIXTURE_DIR / "example.diff").read_text(encoding="utf-8"))


def test_changed_lines_reports_added_numbers_per_file() -> None:
    assert changed_lines(_parse_example()) == {
        "file1": [1, 12],
        "file4": [1, 2, 3],
        "newname": [1],
    }


def test_changed_lines_skips_deleted_files() -> None:
    changed = changed_lines(_parse_example())
    assert "file2" not in changed
    assert "file3" not in changed
    assert "symlink" not in changed
    assert "" not in changed


def test_changed_lines_excludes_removed_and_context_lines() -> None:
    diff_text = "\n".join(
        [
            "diff --git a/a.py b/a.py",
            "--- a/a.py",
            "+++ b/a.py",
            "@@ -1,3 +1,2 @@",
            " keep",
            "-drop",
            " tail",
        ]
    )
    assert changed_lines(parse_unified_diff(diff_text)) == {}


def test_removed_lines_reports_orig_side() -> None:
    assert removed_lines(_parse_example()) == {
        "file1": [3],
        "file2": [1, 2],
        "file3": [1],
        "symlink": [1],
    }


def test_chunk_length_counts_heading() -> None:
    diff = _parse_example()
    first, second = diff.files[0].chunks

    assert chunk_length(first) == 6
    assert chunk_length(second) == 5
    assert chunk_length(diff.files[4].chunks[0]) == 2


def test_queries_on_empty_diff() -> None:
    diff = parse_unified_diff("")
    assert changed_lines(diff) == {}
    assert removed_lines(diff) == {}
