from __future__ import annotations

import pytest

from hunkwise.model import ChangeType, FileChange, Hunk
from hunkwise.selection import (
    HunkSelection,
    SelectionState,
    has_any_selection,
    unselected_files,
)


def _file(path: str, n_hunks: int) -> FileChange:
    hunks = tuple(Hunk("@@ -1 +1 @@", 1, 1, 1, 1) for _ in range(n_hunks))
    return FileChange(path, ChangeType.MODIFIED, hunks)


def test_hunk_selection_rejects_whole_with_lines() -> None:
    with pytest.raises(ValueError):
        HunkSelection(whole=True, lines=frozenset({1}))


def test_hunk_selection_constructors() -> None:
    assert HunkSelection.none().is_empty
    assert HunkSelection.all().whole
    assert HunkSelection.partial([2, 3]).lines == frozenset({2, 3})


def test_toggle_hunk_clears_partial_selection() -> None:
    sel = SelectionState()
    sel.toggle_line("a.py", 0, 2)
    assert sel.has_partial_selection("a.py", 0)

    sel.toggle_hunk("a.py", 0)

    assert sel.is_hunk_selected("a.py", 0)
    assert not sel.has_partial_selection("a.py", 0)
    assert all(sel.is_line_selected("a.py", 0, i) for i in range(10))


def test_toggle_hunk_twice_unselects() -> None:
    sel = SelectionState()
    sel.toggle_hunk("a.py", 0)
    sel.toggle_hunk("a.py", 0)

    assert not sel.is_hunk_selected("a.py", 0)
    assert not sel
    assert len(sel) == 0


def test_toggle_line_is_noop_while_whole_selected() -> None:
    sel = SelectionState()
    sel.toggle_hunk("a.py", 1)
    sel.toggle_line("a.py", 1, 0)

    assert sel.get("a.py", 1) == HunkSelection.all()


def test_toggle_line_flips_membership() -> None:
    sel = SelectionState()
    sel.toggle_line("a.py", 0, 3)
    sel.toggle_line("a.py", 0, 4)
    sel.toggle_line("a.py", 0, 3)

    assert sel.get("a.py", 0).lines == frozenset({4})
    assert not sel.is_line_selected("a.py", 0, 3)

    sel.toggle_line("a.py", 0, 4)
    assert len(sel) == 0


def test_select_line_range_accepts_reversed_bounds() -> None:
    sel = SelectionState()
    sel.select_line_range("a.py", 0, 5, 2)
    assert sel.get("a.py", 0).lines == frozenset({2, 3, 4, 5})


def test_select_line_range_replaces_whole_selection() -> None:
    sel = SelectionState()
    sel.toggle_hunk("a.py", 0)
    sel.select_line_range("a.py", 0, 1, 1)

    assert not sel.is_hunk_selected("a.py", 0)
    assert sel.has_partial_selection("a.py", 0)
    assert not sel.is_line_selected("a.py", 0, 0)


def test_select_all_and_clear() -> None:
    files = [_file("a.py", 2), _file("b.py", 1)]
    sel = SelectionState()
    sel.select_all(files)

    assert len(sel) == 3
    assert all(has_any_selection(f, sel) for f in files)

    sel.clear()
    assert not sel


def test_unselected_files_is_sorted() -> None:
    files = [_file("z.py", 1), _file("m.py", 1), _file("a.py", 1)]
    sel = SelectionState()
    sel.toggle_line("m.py", 0, 0)

    assert has_any_selection(files[1], sel)
    assert unselected_files(files, sel) == ["a.py", "z.py"]


def test_unselected_files_skips_files_without_hunks() -> None:
    files = [_file("a.py", 1), FileChange("empty.txt", ChangeType.ADDED)]

    assert unselected_files(files, SelectionState()) == ["a.py"]
