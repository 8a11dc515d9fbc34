"""Generate a unified diff containing only the selected hunks and lines."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from hunkwise.model import ChangeType, FileChange, Hunk, Line, count_sides
from hunkwise.selection import SelectionQuery

DEFAULT_CONTEXT_LINES = 3


def generate_patch(
    files: Iterable[FileChange],
    selection: SelectionQuery,
    *,
    context: int = DEFAULT_CONTEXT_LINES,
) -> str:
    """Render the selected subset of `files` as git-style unified diff text.

    Files and hunks with nothing selected are left out; an empty selection
    yields "".
    """

    out: list[str] = []
    for file in files:
        rendered: list[str] = []
        for hunk_idx, hunk in enumerate(file.hunks):
            if selection.is_hunk_selected(file.path, hunk_idx):
                rendered.append(render_whole_hunk(hunk))
            elif selection.has_partial_selection(file.path, hunk_idx):
                rendered.append(
                    render_partial_hunk(hunk, hunk_idx, file.path, selection, context=context)
                )

        rendered = [r for r in rendered if r]
        if not rendered:
            continue
        out.append(render_file_header(file))
        out.extend(rendered)
    return "".join(out)


def render_file_header(file: FileChange) -> str:
    path = file.path
    lines = [f"diff --git a/{path} b/{path}"]
    if file.change_type is ChangeType.ADDED:
        lines += ["new file mode 100644", "--- /dev/null", f"+++ b/{path}"]
    elif file.change_type is ChangeType.DELETED:
        lines += ["deleted file mode 100644", f"--- a/{path}", "+++ /dev/null"]
    else:
        lines += [f"--- a/{path}", f"+++ b/{path}"]
    return "\n".join(lines) + "\n"


def render_lines(header: str, lines: Sequence[Line]) -> str:
    return "".join([header, "\n", *(ln.render() + "\n" for ln in lines)])


def render_whole_hunk(hunk: Hunk) -> str:
    return render_lines(hunk.header, hunk.lines)


def render_partial_hunk(
    hunk: Hunk,
    hunk_idx: int,
    path: str,
    selection: SelectionQuery,
    *,
    context: int = DEFAULT_CONTEXT_LINES,
) -> str:
    """Render the selected lines of a hunk, each run widened by `context` lines.

    Every contiguous run of the widened selection becomes its own `@@` section
    with a recalculated header.
    """

    selected = {
        idx for idx in range(len(hunk.lines)) if selection.is_line_selected(path, hunk_idx, idx)
    }
    if not selected:
        return ""

    out: list[str] = []
    for start, end in contiguous_runs(expand_with_context(selected, len(hunk.lines), context)):
        run = hunk.lines[start : end + 1]
        out.append(render_lines(recalculate_hunk_header(run), run))
    return "".join(out)


def expand_with_context(selected: Iterable[int], total_lines: int, context: int) -> set[int]:
    """Indices of `selected` plus up to `context` neighbours each side, within bounds."""

    expanded: set[int] = set()
    for idx in selected:
        lo = max(0, idx - context)
        hi = min(total_lines - 1, idx + context)
        expanded.update(range(lo, hi + 1))
    return expanded


def contiguous_runs(indices: Iterable[int]) -> list[tuple[int, int]]:
    """Group indices into inclusive (start, end) runs of consecutive values."""

    runs: list[tuple[int, int]] = []
    for idx in sorted(set(indices)):
        if runs and idx == runs[-1][1] + 1:
            runs[-1] = (runs[-1][0], idx)
        else:
            runs.append((idx, idx))
    return runs


def _first_position(lines: Sequence[Line], attr: str) -> int:
    for ln in lines:
        num = getattr(ln, attr)
        if num > 0:
            return num
    return 1


def recalculate_hunk_header(lines: Sequence[Line]) -> str:
    """Build a fresh `@@` header for an arbitrary run of hunk lines.

    Starts come from the first line; when it has no number on a side (a run
    that opens on an addition or deletion), the first later line that has one
    is used, or 1 if none does.
    """

    if not lines:
        return "@@ -0,0 +0,0 @@"

    first = lines[0]
    old_start = first.old_line_num or _first_position(lines, "old_line_num")
    new_start = first.new_line_num or _first_position(lines, "new_line_num")
    old_count, new_count = count_sides(lines)
    return f"@@ -{old_start},{old_count} +{new_start},{new_count} @@"
