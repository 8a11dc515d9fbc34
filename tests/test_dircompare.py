from __future__ import annotations

from hunkwise.applier import apply
from hunkwise.dircompare import (
    HunkWindow,
    compare,
    diff_to_lines,
    file_diff,
    group_changes,
    split_lines,
)
from hunkwise.model import ChangeType, Line, LineType
from hunkwise.parser import parse
from hunkwise.selection import SelectionState


def _numbered(n: int, prefix: str = "l") -> str:
    return "".join(f"{prefix}{i}\n" for i in range(1, n + 1))


def test_identical_trees_yield_empty_diff() -> None:
    tree = {"a.txt": b"one\ntwo\n", "sub/b.txt": b"x\n"}
    assert compare(tree, dict(tree)) == ""


def test_against_empty_tree_every_file_is_added() -> None:
    right = {"b/c.txt": "x\n", "a.txt": b"1\n2\n"}

    out = compare({}, right)

    assert out.count("diff --git") == 2
    assert out.count("new file mode 100644") == 2
    assert "diff --git a/a.txt b/a.txt\nnew file mode 100644\n--- /dev/null\n+++ b/a.txt\n" in out
    assert "@@ -0,0 +1,2 @@\n+1\n+2\n" in out
    assert "@@ -0,0 +1,1 @@\n+x\n" in out
    assert out.index("a/a.txt") < out.index("a/b/c.txt")


def test_missing_on_right_is_deleted() -> None:
    out = compare({"gone.txt": b"a\nb\nc\n"}, {})

    assert "deleted file mode 100644\n--- a/gone.txt\n+++ /dev/null\n" in out
    assert "@@ -1,3 +0,0 @@\n-a\n-b\n-c\n" in out


def test_output_parses_back_with_change_types() -> None:
    left = {"keep.txt": b"same\n", "mod.txt": b"a\nb\n", "old.txt": b"x\n"}
    right = {"keep.txt": b"same\n", "mod.txt": b"a\nB\n", "new.txt": b"y\n"}

    files = parse(compare(left, right))

    assert [(f.path, f.change_type) for f in files] == [
        ("mod.txt", ChangeType.MODIFIED),
        ("new.txt", ChangeType.ADDED),
        ("old.txt", ChangeType.DELETED),
    ]


def test_overlapping_windows_merge_into_one_hunk() -> None:
    left = _numbered(10)
    right = left.replace("l3\n", "L3\n").replace("l7\n", "L7\n")

    out = compare({"f.txt": left}, {"f.txt": right})

    assert out.count("@@ -") == 1
    assert "@@ -1,10 +1,10 @@\n" in out


def test_distant_changes_make_separate_hunks() -> None:
    left = _numbered(30)
    right = left.replace("l2\n", "L2\n").replace("l25\n", "L25\n")

    files = parse(compare({"f.txt": left}, {"f.txt": right}))

    hunks = files[0].hunks
    assert len(hunks) == 2
    assert (hunks[0].old_start, hunks[0].old_lines) == (1, 5)
    assert (hunks[1].old_start, hunks[1].old_lines) == (22, 7)


def test_context_argument_narrows_windows() -> None:
    left = _numbered(10)
    right = left.replace("l5\n", "L5\n")

    out = compare({"f.txt": left}, {"f.txt": right}, context=0)

    assert "@@ -5,1 +5,1 @@\n-l5\n+L5\n" in out


def test_full_selection_of_comparison_reproduces_right() -> None:
    left = {"f.txt": _numbered(20), "g.txt": "alpha\nbeta\n"}
    right = {
        "f.txt": _numbered(20).replace("l4\n", "").replace("l18\n", "l18\nnew\n"),
        "g.txt": "alpha\ngamma\nbeta\n",
    }

    files = parse(compare(left, right))
    sel = SelectionState()
    sel.select_all(files)

    for f in files:
        assert apply(f, left[f.path], right[f.path], sel) == right[f.path]


def test_file_diff_identical_contents_is_empty() -> None:
    assert file_diff("x", "a\n", "a\n") == ""


def test_split_lines_drops_final_newline_only() -> None:
    assert split_lines("") == []
    assert split_lines("a\nb\n") == ["a", "b"]
    assert split_lines("a\n\n") == ["a", ""]
    assert split_lines("a") == ["a"]


def test_diff_to_lines_numbers_each_side() -> None:
    lines = diff_to_lines(["a", "b"], ["a", "c"])
    assert [(ln.render(), ln.old_line_num, ln.new_line_num) for ln in lines] == [
        (" a", 1, 1),
        ("-b", 2, 0),
        ("+c", 0, 2),
    ]


def _with_changes_at(n: int, changes: set[int]) -> list[Line]:
    return [
        Line(LineType.ADDITION if i in changes else LineType.CONTEXT, str(i), i + 1, i + 1)
        for i in range(n)
    ]


def test_group_changes_merges_adjacent_windows() -> None:
    assert group_changes(_with_changes_at(12, {0, 7}), 3) == [HunkWindow(0, 10)]


def test_group_changes_splits_when_gap_remains() -> None:
    assert group_changes(_with_changes_at(12, {0, 8}), 3) == [
        HunkWindow(0, 3),
        HunkWindow(5, 11),
    ]


def test_group_changes_without_changes() -> None:
    assert group_changes(_with_changes_at(5, set()), 3) == []


def test_final_newline_only_difference_is_omitted() -> None:
    assert compare({"f.txt": b"a\nb\n"}, {"f.txt": b"a\nb"}) == ""
    assert file_diff("f.txt", "a\n", "a") == ""
