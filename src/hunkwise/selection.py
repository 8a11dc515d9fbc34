"""Hunk and line selection state.

The engine only ever *queries* a selection through `SelectionQuery`; callers
own and mutate `SelectionState`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from hunkwise.model import FileChange


class SelectionQuery(Protocol):
    def is_hunk_selected(self, path: str, hunk_idx: int) -> bool: ...

    def has_partial_selection(self, path: str, hunk_idx: int) -> bool: ...

    def is_line_selected(self, path: str, hunk_idx: int, line_idx: int) -> bool: ...


@dataclass(frozen=True, slots=True)
class HunkSelection:
    """Selection of one hunk: nothing, the whole hunk, or a set of line indices.

    A hunk is never whole-selected and partially selected at the same time.
    """

    whole: bool = False
    lines: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        if self.whole and self.lines:
            raise ValueError("whole-hunk selection cannot carry line indices")

    @classmethod
    def none(cls) -> HunkSelection:
        return cls()

    @classmethod
    def all(cls) -> HunkSelection:
        return cls(whole=True)

    @classmethod
    def partial(cls, lines: Iterable[int]) -> HunkSelection:
        return cls(lines=frozenset(lines))

    @property
    def is_empty(self) -> bool:
        return not self.whole and not self.lines


class SelectionState:
    """Mutable selection keyed by (file path, hunk index)."""

    def __init__(self) -> None:
        self._hunks: dict[tuple[str, int], HunkSelection] = {}

    def get(self, path: str, hunk_idx: int) -> HunkSelection:
        return self._hunks.get((path, hunk_idx), HunkSelection())

    def set(self, path: str, hunk_idx: int, value: HunkSelection) -> None:
        if value.is_empty:
            self._hunks.pop((path, hunk_idx), None)
        else:
            self._hunks[(path, hunk_idx)] = value

    # -- queries ---------------------------------------------------------

    def is_hunk_selected(self, path: str, hunk_idx: int) -> bool:
        return self.get(path, hunk_idx).whole

    def has_partial_selection(self, path: str, hunk_idx: int) -> bool:
        sel = self.get(path, hunk_idx)
        return not sel.whole and bool(sel.lines)

    def is_line_selected(self, path: str, hunk_idx: int, line_idx: int) -> bool:
        sel = self.get(path, hunk_idx)
        return sel.whole or line_idx in sel.lines

    def __len__(self) -> int:
        return len(self._hunks)

    def __bool__(self) -> bool:
        return bool(self._hunks)

    # -- mutation --------------------------------------------------------

    def toggle_hunk(self, path: str, hunk_idx: int) -> None:
        """Flip whole-hunk selection; turning it on drops any line selection."""

        if self.get(path, hunk_idx).whole:
            self.set(path, hunk_idx, HunkSelection.none())
        else:
            self.set(path, hunk_idx, HunkSelection.all())

    def toggle_line(self, path: str, hunk_idx: int, line_idx: int) -> None:
        """Flip one line. No-op while the whole hunk is selected."""

        sel = self.get(path, hunk_idx)
        if sel.whole:
            return
        self.set(path, hunk_idx, HunkSelection.partial(sel.lines ^ {line_idx}))

    def select_line_range(self, path: str, hunk_idx: int, start: int, end: int) -> None:
        """Add lines start..end (inclusive, either order) to the line selection.

        A whole-hunk selection is replaced by the explicit range.
        """

        if start > end:
            start, end = end, start
        sel = self.get(path, hunk_idx)
        current = frozenset() if sel.whole else sel.lines
        self.set(path, hunk_idx, HunkSelection.partial(current | set(range(start, end + 1))))

    def select_all(self, files: Iterable[FileChange]) -> None:
        for file in files:
            for hunk_idx in range(len(file.hunks)):
                self.set(file.path, hunk_idx, HunkSelection.all())

    def clear(self) -> None:
        self._hunks.clear()


def has_any_selection(file: FileChange, selection: SelectionQuery) -> bool:
    """True if any hunk of `file` is whole- or partially selected."""

    path = file.path
    return any(
        selection.is_hunk_selected(path, idx) or selection.has_partial_selection(path, idx)
        for idx in range(len(file.hunks))
    )


def unselected_files(files: Iterable[FileChange], selection: SelectionQuery) -> list[str]:
    """Sorted paths of files with nothing selected (to be restored to their old state).

    Files without hunks (empty adds and deletes) have nothing to revert.
    """

    return sorted(f.path for f in files if f.hunks and not has_any_selection(f, selection))
