"""Intra-line (word-level) highlighting for paired deletion/addition lines.

Offsets are character offsets into the Python string, so spans never split a
multi-byte character.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from hunkwise.model import Hunk, Line, LineType
from hunkwise.textdiff import DiffOp, diff_chars


class SpanType(Enum):
    EQUAL = "equal"
    ADDED = "added"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class IntraLineSpan:
    start: int
    end: int
    span_type: SpanType
    text: str


@dataclass(frozen=True, slots=True)
class WordDiffResult:
    old_spans: list[IntraLineSpan] = field(default_factory=list)
    new_spans: list[IntraLineSpan] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class LinePair:
    old_line_idx: int
    new_line_idx: int
    old_line: Line
    new_line: Line


def diff_pair(old_line: str, new_line: str) -> WordDiffResult:
    """Character-level diff of two lines, split into spans for each side."""

    old_spans: list[IntraLineSpan] = []
    new_spans: list[IntraLineSpan] = []
    old_pos = 0
    new_pos = 0

    for block in diff_chars(old_line, new_line):
        text = str(block.items)
        n = len(text)
        if block.op is DiffOp.EQUAL:
            old_spans.append(IntraLineSpan(old_pos, old_pos + n, SpanType.EQUAL, text))
            new_spans.append(IntraLineSpan(new_pos, new_pos + n, SpanType.EQUAL, text))
            old_pos += n
            new_pos += n
        elif block.op is DiffOp.DELETE:
            old_spans.append(IntraLineSpan(old_pos, old_pos + n, SpanType.DELETED, text))
            old_pos += n
        else:
            new_spans.append(IntraLineSpan(new_pos, new_pos + n, SpanType.ADDED, text))
            new_pos += n

    return WordDiffResult(old_spans=old_spans, new_spans=new_spans)


def find_line_pairs(hunk: Hunk) -> list[LinePair]:
    """Pair each run of deletions with the run of additions right after it.

    Pairing is positional: the i-th deletion of a run goes with the i-th
    addition of the following run, up to the shorter run's length. Leftover
    lines stay unpaired.
    """

    lines = hunk.lines
    pairs: list[LinePair] = []
    i = 0
    while i < len(lines):
        if lines[i].line_type is not LineType.DELETION:
            i += 1
            continue

        del_start = i
        while i < len(lines) and lines[i].line_type is LineType.DELETION:
            i += 1
        add_start = i
        while i < len(lines) and lines[i].line_type is LineType.ADDITION:
            i += 1

        count = min(add_start - del_start, i - add_start)
        for j in range(count):
            pairs.append(
                LinePair(
                    old_line_idx=del_start + j,
                    new_line_idx=add_start + j,
                    old_line=lines[del_start + j],
                    new_line=lines[add_start + j],
                )
            )
    return pairs


def hunk_word_diffs(hunk: Hunk) -> dict[int, WordDiffResult]:
    """Word diffs for every paired line, keyed by both line indices of the pair."""

    results: dict[int, WordDiffResult] = {}
    for pair in find_line_pairs(hunk):
        result = diff_pair(pair.old_line.content, pair.new_line.content)
        results[pair.old_line_idx] = result
        results[pair.new_line_idx] = result
    return results
