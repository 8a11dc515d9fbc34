"""Unified-diff parser.

Accepts partial or diagnostic output from external diff sources. Malformed
sections and unparsable hunk headers are dropped (logged at DEBUG) instead of
raising.
"""

from __future__ import annotations

import logging
import re

from hunkwise.model import ChangeType, FileChange, Hunk, Line, LineType

logger = logging.getLogger("hunkwise.parser")

FILE_SEPARATOR = "diff --git"

_SECTION_SPLIT_RE = re.compile(r"^(?=diff --git)", re.MULTILINE)
_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")

_HEADER_NOISE = ("---", "+++", "index ", "new file", "deleted file")


def parse(diff_text: str) -> list[FileChange]:
    """Parse unified-diff text (git flavour) into one FileChange per file section."""

    if not diff_text:
        return []

    files: list[FileChange] = []
    for section in _SECTION_SPLIT_RE.split(diff_text):
        if not section.strip():
            continue
        file = _parse_file_section(section)
        if file is not None:
            files.append(file)
    return files


def parse_hunk_header(line: str) -> Hunk | None:
    """Parse `@@ -a[,b] +c[,d] @@...` into an empty Hunk, or None if malformed.

    An omitted count defaults to 1, per the unified-diff grammar.
    """

    m = _HUNK_HEADER_RE.match(line)
    if m is None:
        return None
    return Hunk(
        header=line,
        old_start=int(m.group(1)),
        old_lines=int(m.group(2)) if m.group(2) is not None else 1,
        new_start=int(m.group(3)),
        new_lines=int(m.group(4)) if m.group(4) is not None else 1,
    )


def determine_change_type(section: str) -> ChangeType:
    if "new file mode" in section:
        return ChangeType.ADDED
    if "deleted file mode" in section:
        return ChangeType.DELETED
    if "rename from" in section:
        return ChangeType.RENAMED
    return ChangeType.MODIFIED


class _HunkBuilder:
    """Accumulates content lines for one hunk, numbering them as it goes."""

    def __init__(self, header: Hunk) -> None:
        self.header = header
        self.lines: list[Line] = []
        self.old_num = header.old_start
        self.new_num = header.new_start
        self.old_left = header.old_lines
        self.new_left = header.new_lines

    @property
    def exhausted(self) -> bool:
        return self.old_left <= 0 and self.new_left <= 0

    def add(self, raw: str) -> None:
        line_type = LineType.from_marker(raw[0])
        content = raw[1:] if raw[0] in "+- " else raw

        if line_type is LineType.CONTEXT:
            line = Line(line_type, content, self.old_num, self.new_num)
            self.old_num += 1
            self.new_num += 1
            self.old_left -= 1
            self.new_left -= 1
        elif line_type is LineType.DELETION:
            line = Line(line_type, content, old_line_num=self.old_num)
            self.old_num += 1
            self.old_left -= 1
        else:
            line = Line(line_type, content, new_line_num=self.new_num)
            self.new_num += 1
            self.new_left -= 1
        self.lines.append(line)

    def build(self) -> Hunk:
        h = self.header
        return Hunk(
            header=h.header,
            old_start=h.old_start,
            old_lines=h.old_lines,
            new_start=h.new_start,
            new_lines=h.new_lines,
            lines=tuple(self.lines),
        )


def _parse_file_section(section: str) -> FileChange | None:
    raw_lines = section.split("\n")

    m = _DIFF_HEADER_RE.match(raw_lines[0])
    if m is None:
        logger.debug("skipping diff section without a/ b/ header: %r", raw_lines[0][:80])
        return None
    path = m.group(2)

    hunks: list[Hunk] = []
    # None before the first hunk header and after a malformed one; content
    # lines are discarded until the next valid header.
    current: _HunkBuilder | None = None

    for raw in raw_lines[1:]:
        if raw.startswith("@@"):
            if current is not None:
                hunks.append(current.build())
                current = None
            header = parse_hunk_header(raw)
            if header is None:
                logger.debug("dropping unparsable hunk header in %s: %r", path, raw)
            else:
                current = _HunkBuilder(header)
            continue

        if current is None:
            continue
        if not raw or raw.startswith("\\"):
            # Blank separators and "\ No newline at end of file" markers.
            continue
        # Only once counts run out: a deleted "-- x" line renders as "--- x".
        if current.exhausted and raw.startswith(_HEADER_NOISE):
            continue

        current.add(raw)

    if current is not None:
        hunks.append(current.build())

    return FileChange(path=path, change_type=determine_change_type(section), hunks=tuple(hunks))
