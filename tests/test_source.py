from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

from hunkwise.errors import HunkwiseTreeError
from hunkwise.model import ChangeType
from hunkwise.source import DirectorySource, TextSource

SAMPLE = (
    "diff --git a/f.txt b/f.txt\n"
    "--- a/f.txt\n"
    "+++ b/f.txt\n"
    "@@ -1,2 +1,3 @@\n"
    " line1\n"
    "+line2\n"
    " line3\n"
)


def test_text_source_reads_stream() -> None:
    src = TextSource(stream=io.StringIO(SAMPLE))

    files = src.load()

    assert src.label == "<stdin>"
    assert [f.path for f in files] == ["f.txt"]


def test_text_source_dash_reads_stdin(monkeypatch) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO(SAMPLE))
    assert TextSource(Path("-")).get_diff() == SAMPLE


def test_text_source_reads_file(tmp_path: Path) -> None:
    patch = tmp_path / "change.patch"
    patch.write_text(SAMPLE, encoding="utf-8")
    src = TextSource(patch)

    assert src.label == str(patch)
    assert src.load()[0].hunks[0].new_lines == 3


def test_text_source_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(HunkwiseTreeError):
        TextSource(tmp_path / "missing.patch").get_diff()


def test_directory_source_compares_trees(tmp_path: Path) -> None:
    left = tmp_path / "left"
    right = tmp_path / "right"
    left.mkdir()
    right.mkdir()
    (left / "a.txt").write_text("1\n", encoding="utf-8")
    (right / "a.txt").write_text("2\n", encoding="utf-8")
    (right / "b.txt").write_text("new\n", encoding="utf-8")
    (right / "noise.log").write_text("x\n", encoding="utf-8")

    src = DirectorySource(left, right, exclude=["*.log"])
    files = src.load()

    assert src.label == "diff-editor"
    assert [(f.path, f.change_type) for f in files] == [
        ("a.txt", ChangeType.MODIFIED),
        ("b.txt", ChangeType.ADDED),
    ]


def test_directory_source_missing_side_raises(tmp_path: Path) -> None:
    with pytest.raises(HunkwiseTreeError, match="Not a directory"):
        DirectorySource(tmp_path / "nope", tmp_path).get_diff()
