"""Reconstruct file contents that keep only the selected changes.

Used when no patch tool is available (diff-editor mode): given the baseline
("left") and current ("right") contents of one file, produce the text that
should remain on disk. Pure text in, text out; `None` means the destination
file should be removed.
"""

from __future__ import annotations

from collections.abc import Iterator

from hunkwise.model import ChangeType, FileChange, Line, LineType, count_sides
from hunkwise.selection import SelectionQuery, has_any_selection


def _line_selected(
    file: FileChange, hunk_idx: int, line_idx: int, selection: SelectionQuery
) -> bool:
    if selection.is_hunk_selected(file.path, hunk_idx):
        return True
    return selection.has_partial_selection(file.path, hunk_idx) and selection.is_line_selected(
        file.path, hunk_idx, line_idx
    )


def _selected_lines(
    file: FileChange, line_type: LineType, selection: SelectionQuery
) -> Iterator[Line]:
    for hunk_idx, hunk in enumerate(file.hunks):
        for line_idx, line in enumerate(hunk.lines):
            if line.line_type is line_type and _line_selected(file, hunk_idx, line_idx, selection):
                yield line


def apply(
    file: FileChange,
    left_content: str,
    right_content: str,
    selection: SelectionQuery,
) -> str | None:
    """Return the content to write for `file`, or None to delete the destination."""

    if file.change_type is ChangeType.ADDED:
        return reconstruct_added(file, right_content, selection)
    if file.change_type is ChangeType.DELETED:
        return reconstruct_deleted(file, left_content, selection)
    return reconstruct_modified(file, left_content, selection)


def reconstruct_added(
    file: FileChange, right_content: str, selection: SelectionQuery
) -> str | None:
    """Keep only the selected lines of a newly added file.

    An empty new file has no hunks to select and is always kept.
    """

    if not file.hunks:
        return ""
    if not has_any_selection(file, selection):
        return None

    right_lines = right_content.split("\n")
    kept = [
        right_lines[line.new_line_num - 1]
        for line in _selected_lines(file, LineType.ADDITION, selection)
        if 0 < line.new_line_num <= len(right_lines)
    ]
    return "\n".join(kept)


def reconstruct_deleted(
    file: FileChange, left_content: str, selection: SelectionQuery
) -> str | None:
    """Remove only the selected lines of a deleted file.

    With nothing selected the deletion is reverted entirely; if every line
    ends up removed, the file stays deleted. An empty deleted file has no hunks
    and stays deleted.
    """

    if not file.hunks:
        return None
    if not has_any_selection(file, selection):
        return left_content

    removed = {line.old_line_num for line in _selected_lines(file, LineType.DELETION, selection)}
    left_lines = left_content.split("\n")
    kept = [text for num, text in enumerate(left_lines, start=1) if num not in removed]
    result = "\n".join(kept)
    return result if result else None


def _addition_anchors(file: FileChange, selection: SelectionQuery) -> dict[int, list[str]]:
    """Map each selected addition to the old-side line number it goes before.

    An addition sits before the next Context or Deletion line of its hunk, or
    right after the hunk's last old line. A hunk made only of additions is
    placed from its new-side position minus the offset of earlier hunks.
    """

    anchors: dict[int, list[str]] = {}
    offset = 0
    for hunk_idx, hunk in enumerate(file.hunks):
        pending: list[str] = []
        last_old = 0
        for line_idx, line in enumerate(hunk.lines):
            if line.line_type is LineType.ADDITION:
                if _line_selected(file, hunk_idx, line_idx, selection):
                    pending.append(line.content)
                continue
            last_old = line.old_line_num
            if pending:
                anchors.setdefault(last_old, []).extend(pending)
                pending = []
        if pending:
            if last_old:
                anchor = last_old + 1
            else:
                first_new = next(
                    ln.new_line_num for ln in hunk.lines if ln.line_type is LineType.ADDITION
                )
                anchor = first_new - offset
            anchors.setdefault(anchor, []).extend(pending)
        old_count, new_count = count_sides(hunk.lines)
        offset += new_count - old_count
    return anchors


def reconstruct_modified(file: FileChange, left_content: str, selection: SelectionQuery) -> str:
    """Replay the selected deletions and additions onto the baseline content.

    Selected additions are anchored to old-side line numbers, so unselected
    changes earlier in the file do not shift them. Unselected changes are
    reverted: deletions stay, additions are absent.
    """

    deletions = {line.old_line_num for line in _selected_lines(file, LineType.DELETION, selection)}
    anchors = _addition_anchors(file, selection)

    result: list[str] = []
    left_lines = left_content.split("\n")
    for old_num, text in enumerate(left_lines, start=1):
        result.extend(anchors.pop(old_num, ()))
        if old_num in deletions:
            continue
        result.append(text)

    # Anchored past the end of the baseline.
    for num in sorted(anchors):
        result.extend(anchors[num])
    return "\n".join(result)
