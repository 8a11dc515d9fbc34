"""Unified diff between two in-memory directory trees.

A tree is a mapping of relative POSIX path to file content (bytes or text).
Reading trees from disk is the job of `hunkwise.tree`; this module only
compares what it is given, so the output can be fed straight back into
`hunkwise.parser.parse`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from hunkwise.model import Line, LineType
from hunkwise.patch import DEFAULT_CONTEXT_LINES, recalculate_hunk_header, render_lines
from hunkwise.textdiff import DiffOp, diff_lines

Tree = Mapping[str, bytes | str]


def _as_text(content: bytes | str) -> str:
    if isinstance(content, bytes):
        # Round-trips arbitrary bytes; encoding detection is not attempted.
        return content.decode("utf-8", errors="surrogateescape")
    return content


def split_lines(content: str) -> list[str]:
    """Split on newlines, ignoring the empty tail left by a final newline."""

    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def compare(left_tree: Tree, right_tree: Tree, *, context: int = DEFAULT_CONTEXT_LINES) -> str:
    """Return git-style unified diff text turning `left_tree` into `right_tree`."""

    out: list[str] = []
    for path in sorted(set(left_tree) | set(right_tree)):
        in_left = path in left_tree
        in_right = path in right_tree
        left = left_tree[path] if in_left else b""
        right = right_tree[path] if in_right else b""
        if in_left and in_right and left == right:
            continue
        out.append(
            file_diff(path, _as_text(left), _as_text(right), in_left, in_right, context=context)
        )
    return "".join(out)


def file_diff(
    path: str,
    left: str,
    right: str,
    in_left: bool = True,
    in_right: bool = True,
    *,
    context: int = DEFAULT_CONTEXT_LINES,
) -> str:
    """Diff text for one path, including its `diff --git` header."""

    header = [f"diff --git a/{path} b/{path}"]
    if not in_left:
        header += ["new file mode 100644", "--- /dev/null", f"+++ b/{path}"]
        body = _whole_file_hunk(split_lines(right), LineType.ADDITION)
    elif not in_right:
        header += ["deleted file mode 100644", f"--- a/{path}", "+++ /dev/null"]
        body = _whole_file_hunk(split_lines(left), LineType.DELETION)
    else:
        if left == right:
            return ""
        header += [f"--- a/{path}", f"+++ b/{path}"]
        body = compute_hunks(split_lines(left), split_lines(right), context=context)
        if not body:
            # Differ only by a final newline; nothing to select.
            return ""
    return "\n".join(header) + "\n" + body


def _whole_file_hunk(lines: list[str], line_type: LineType) -> str:
    if not lines:
        return ""
    n = len(lines)
    if line_type is LineType.ADDITION:
        header = f"@@ -0,0 +1,{n} @@"
        body = [Line(line_type, text, new_line_num=i) for i, text in enumerate(lines, start=1)]
    else:
        header = f"@@ -1,{n} +0,0 @@"
        body = [Line(line_type, text, old_line_num=i) for i, text in enumerate(lines, start=1)]
    return render_lines(header, body)


def diff_to_lines(old_lines: list[str], new_lines: list[str]) -> list[Line]:
    """Flatten a line diff into numbered Context/Addition/Deletion lines."""

    out: list[Line] = []
    old_num = 1
    new_num = 1
    for block in diff_lines(old_lines, new_lines):
        for text in block.items:
            if block.op is DiffOp.EQUAL:
                out.append(Line(LineType.CONTEXT, text, old_num, new_num))
                old_num += 1
                new_num += 1
            elif block.op is DiffOp.DELETE:
                out.append(Line(LineType.DELETION, text, old_line_num=old_num))
                old_num += 1
            else:
                out.append(Line(LineType.ADDITION, text, new_line_num=new_num))
                new_num += 1
    return out


@dataclass(frozen=True, slots=True)
class HunkWindow:
    """Inclusive index range into the flattened line list."""

    start: int
    end: int


def group_changes(lines: list[Line], context: int = DEFAULT_CONTEXT_LINES) -> list[HunkWindow]:
    """Group change lines into windows padded by `context` lines.

    A change whose window would start at or before the line right after the
    current window's end is merged into it.
    """

    changes = [i for i, ln in enumerate(lines) if ln.line_type is not LineType.CONTEXT]
    if not changes:
        return []

    last = len(lines) - 1
    windows: list[HunkWindow] = []
    start = max(0, changes[0] - context)
    end = min(last, changes[0] + context)
    for idx in changes[1:]:
        if idx - context <= end + 1:
            end = min(last, idx + context)
            continue
        windows.append(HunkWindow(start, end))
        start = max(0, idx - context)
        end = min(last, idx + context)
    windows.append(HunkWindow(start, end))
    return windows


def compute_hunks(
    old_lines: list[str], new_lines: list[str], *, context: int = DEFAULT_CONTEXT_LINES
) -> str:
    lines = diff_to_lines(old_lines, new_lines)
    out: list[str] = []
    for window in group_changes(lines, context):
        run = lines[window.start : window.end + 1]
        out.append(render_lines(recalculate_hunk_header(run), run))
    return "".join(out)
