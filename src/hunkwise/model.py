"""Structured change model produced by the parser and the directory comparator.

Instances are immutable snapshots: they are built once per diff load and
thrown away on the next reload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ChangeType(Enum):
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    RENAMED = "renamed"

    @property
    def code(self) -> str:
        """Single-letter status code shown in file lists."""
        return _CHANGE_CODES[self]


_CHANGE_CODES = {
    ChangeType.MODIFIED: "M",
    ChangeType.ADDED: "A",
    ChangeType.DELETED: "D",
    ChangeType.RENAMED: "R",
}


class LineType(Enum):
    CONTEXT = " "
    ADDITION = "+"
    DELETION = "-"

    @property
    def marker(self) -> str:
        return self.value

    @classmethod
    def from_marker(cls, marker: str) -> LineType:
        if marker == "+":
            return cls.ADDITION
        if marker == "-":
            return cls.DELETION
        return cls.CONTEXT


@dataclass(frozen=True, slots=True)
class Line:
    """One line of diff content.

    `old_line_num`/`new_line_num` are 1-based; 0 means the line has no
    position on that side (additions have no old number, deletions no new one).
    """

    line_type: LineType
    content: str
    old_line_num: int = 0
    new_line_num: int = 0

    def render(self) -> str:
        return f"{self.line_type.marker}{self.content}"


@dataclass(frozen=True, slots=True)
class Hunk:
    header: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: tuple[Line, ...] = ()


@dataclass(frozen=True, slots=True)
class FileChange:
    path: str
    change_type: ChangeType
    hunks: tuple[Hunk, ...] = field(default=())

    @property
    def total_lines(self) -> int:
        return sum(len(h.lines) for h in self.hunks)

    @property
    def added_lines(self) -> int:
        return _count(self, LineType.ADDITION)

    @property
    def deleted_lines(self) -> int:
        return _count(self, LineType.DELETION)


def _count(file: FileChange, line_type: LineType) -> int:
    return sum(1 for h in file.hunks for ln in h.lines if ln.line_type is line_type)


def count_sides(lines: tuple[Line, ...] | list[Line]) -> tuple[int, int]:
    """Return (old_count, new_count) for a run of lines.

    Context and deletion lines occupy the old side; context and addition lines
    occupy the new side.
    """

    old_count = 0
    new_count = 0
    for ln in lines:
        if ln.line_type is LineType.CONTEXT:
            old_count += 1
            new_count += 1
        elif ln.line_type is LineType.DELETION:
            old_count += 1
        else:
            new_count += 1
    return old_count, new_count
