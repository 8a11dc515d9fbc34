from __future__ import annotations

from hunkwise.model import ChangeType, LineType
from hunkwise.parser import determine_change_type, parse, parse_hunk_header

SAMPLE = (
    "diff --git a/f.txt b/f.txt\n"
    "--- a/f.txt\n"
    "+++ b/f.txt\n"
    "@@ -1,2 +1,3 @@\n"
    " line1\n"
    "+line2\n"
    " line3\n"
)


def test_parse_single_file_example() -> None:
    files = parse(SAMPLE)

    assert len(files) == 1
    f = files[0]
    assert f.path == "f.txt"
    assert f.change_type is ChangeType.MODIFIED
    assert len(f.hunks) == 1

    h = f.hunks[0]
    assert (h.old_start, h.old_lines, h.new_start, h.new_lines) == (1, 2, 1, 3)
    assert [ln.line_type for ln in h.lines] == [
        LineType.CONTEXT,
        LineType.ADDITION,
        LineType.CONTEXT,
    ]
    assert [ln.content for ln in h.lines] == ["line1", "line2", "line3"]


def test_parse_empty_input_yields_empty_list() -> None:
    assert parse("") == []


def test_parse_numbers_lines_per_side() -> None:
    text = (
        "diff --git a/a.py b/a.py\n"
        "@@ -10,3 +20,3 @@ def f():\n"
        " keep\n"
        "-old\n"
        "+new\n"
        " tail\n"
    )
    lines = parse(text)[0].hunks[0].lines

    assert [(ln.old_line_num, ln.new_line_num) for ln in lines] == [
        (10, 20),
        (11, 0),
        (0, 21),
        (12, 22),
    ]


def test_hunk_counts_match_line_types() -> None:
    for f in parse(SAMPLE):
        for h in f.hunks:
            ctx = sum(1 for ln in h.lines if ln.line_type is LineType.CONTEXT)
            dels = sum(1 for ln in h.lines if ln.line_type is LineType.DELETION)
            adds = sum(1 for ln in h.lines if ln.line_type is LineType.ADDITION)
            assert h.old_lines == ctx + dels
            assert h.new_lines == ctx + adds


def test_parse_hunk_header_defaults_count_to_one() -> None:
    h = parse_hunk_header("@@ -5 +7 @@")
    assert h is not None
    assert (h.old_start, h.old_lines, h.new_start, h.new_lines) == (5, 1, 7, 1)


def test_parse_hunk_header_keeps_section_text() -> None:
    h = parse_hunk_header("@@ -1,2 +1,2 @@ def foo():")
    assert h is not None
    assert h.header == "@@ -1,2 +1,2 @@ def foo():"


def test_parse_hunk_header_rejects_garbage() -> None:
    assert parse_hunk_header("@@ -x +1 @@") is None
    assert parse_hunk_header("@@ nothing here") is None


def test_parse_multiple_files_and_change_types() -> None:
    text = (
        "diff --git a/new.txt b/new.txt\n"
        "new file mode 100644\n"
        "--- /dev/null\n"
        "+++ b/new.txt\n"
        "@@ -0,0 +1,1 @@\n"
        "+hello\n"
        "diff --git a/gone.txt b/gone.txt\n"
        "deleted file mode 100644\n"
        "--- a/gone.txt\n"
        "+++ /dev/null\n"
        "@@ -1,1 +0,0 @@\n"
        "-bye\n"
        "diff --git a/old.txt b/moved.txt\n"
        "similarity index 100%\n"
        "rename from old.txt\n"
        "rename to moved.txt\n"
    )
    files = parse(text)

    assert [(f.path, f.change_type) for f in files] == [
        ("new.txt", ChangeType.ADDED),
        ("gone.txt", ChangeType.DELETED),
        ("moved.txt", ChangeType.RENAMED),
    ]
    assert files[0].hunks[0].lines[0].new_line_num == 1
    assert files[1].hunks[0].lines[0].old_line_num == 1
    assert files[2].hunks == ()


def test_determine_change_type_defaults_to_modified() -> None:
    assert determine_change_type("diff --git a/x b/x\n@@ -1 +1 @@\n") is ChangeType.MODIFIED


def test_section_without_header_is_skipped() -> None:
    assert parse("not a diff at all\n+just noise\n") == []
    files = parse("preamble\n" + SAMPLE)
    assert [f.path for f in files] == ["f.txt"]


def test_unparsable_hunk_header_drops_content_until_next_header() -> None:
    text = (
        "diff --git a/f.txt b/f.txt\n"
        "@@ -x,1 +1 @@\n"
        "+lost\n"
        "-lost too\n"
        "@@ -1,1 +1,1 @@\n"
        "-a\n"
        "+b\n"
    )
    hunks = parse(text)[0].hunks

    assert len(hunks) == 1
    assert [ln.render() for ln in hunks[0].lines] == ["-a", "+b"]


def test_no_newline_marker_is_ignored() -> None:
    text = (
        "diff --git a/f.txt b/f.txt\n"
        "@@ -1,1 +1,1 @@\n"
        "-a\n"
        "\\ No newline at end of file\n"
        "+b\n"
        "\\ No newline at end of file\n"
    )
    lines = parse(text)[0].hunks[0].lines
    assert [ln.render() for ln in lines] == ["-a", "+b"]


def test_deleted_line_that_looks_like_header_is_kept() -> None:
    text = (
        "diff --git a/f.md b/f.md\n"
        "--- a/f.md\n"
        "+++ b/f.md\n"
        "@@ -1,2 +1,1 @@\n"
        "--- a rule\n"
        " keep\n"
    )
    lines = parse(text)[0].hunks[0].lines

    assert lines[0].line_type is LineType.DELETION
    assert lines[0].content == "-- a rule"
    assert lines[1].content == "keep"


def test_header_noise_after_exhausted_hunk_is_skipped() -> None:
    text = (
        "diff --git a/f.txt b/f.txt\n"
        "@@ -1,1 +1,1 @@\n"
        "-a\n"
        "+b\n"
        "index 123..456 100644\n"
    )
    lines = parse(text)[0].hunks[0].lines
    assert len(lines) == 2


def test_parse_multiple_hunks_in_one_file() -> None:
    text = (
        "diff --git a/f.txt b/f.txt\n"
        "--- a/f.txt\n"
        "+++ b/f.txt\n"
        "@@ -1,1 +1,1 @@\n"
        "-a\n"
        "+A\n"
        "@@ -20,1 +20,2 @@\n"
        " t\n"
        "+u\n"
    )
    f = parse(text)[0]

    assert len(f.hunks) == 2
    assert f.hunks[1].lines[1].new_line_num == 21
    assert f.added_lines == 2
    assert f.deleted_lines == 1
    assert f.total_lines == 4
