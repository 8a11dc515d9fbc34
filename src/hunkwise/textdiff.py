"""Text-diff primitive shared by the directory comparator and the word-level differ.

`diff_blocks` runs `difflib.SequenceMatcher` over any two sequences (a string
for character granularity, a tuple of lines for line granularity) and returns
equal/insert/delete blocks. `cleanup_semantic` then coalesces short equalities
that sit between edits into the surrounding edits so the result reads as whole
changed words or lines rather than scattered one-character matches.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from difflib import SequenceMatcher
from enum import Enum
from itertools import chain


class DiffOp(Enum):
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class DiffBlock:
    op: DiffOp
    items: str | tuple[str, ...]

    def __len__(self) -> int:
        return len(self.items)


def _concat(parts: Sequence[str | tuple[str, ...]]) -> str | tuple[str, ...]:
    if parts and isinstance(parts[0], str):
        return "".join(parts)  # type: ignore[arg-type]
    return tuple(chain.from_iterable(parts))


def _normalize(blocks: list[DiffBlock]) -> list[DiffBlock]:
    """Merge neighbours and order each edit run as one DELETE then one INSERT."""

    out: list[DiffBlock] = []
    deletes: list[str | tuple[str, ...]] = []
    inserts: list[str | tuple[str, ...]] = []

    def flush() -> None:
        if deletes:
            out.append(DiffBlock(DiffOp.DELETE, _concat(deletes)))
            deletes.clear()
        if inserts:
            out.append(DiffBlock(DiffOp.INSERT, _concat(inserts)))
            inserts.clear()

    for blk in blocks:
        if not blk.items:
            continue
        if blk.op is DiffOp.DELETE:
            deletes.append(blk.items)
        elif blk.op is DiffOp.INSERT:
            inserts.append(blk.items)
        else:
            flush()
            if out and out[-1].op is DiffOp.EQUAL:
                out[-1] = DiffBlock(DiffOp.EQUAL, _concat([out[-1].items, blk.items]))
            else:
                out.append(blk)
    flush()
    return out


def _edit_sizes(blocks: list[DiffBlock], indices: range) -> tuple[int, int]:
    deleted = 0
    inserted = 0
    for j in indices:
        blk = blocks[j]
        if blk.op is DiffOp.EQUAL:
            break
        if blk.op is DiffOp.DELETE:
            deleted += len(blk)
        else:
            inserted += len(blk)
    return deleted, inserted


def cleanup_semantic(blocks: list[DiffBlock]) -> list[DiffBlock]:
    """Eliminate equalities no longer than the edits on both sides of them.

    Deterministic: repeatedly folds the first qualifying equality into its
    neighbouring edits until none is left.
    """

    blocks = _normalize(blocks)
    changed = True
    while changed:
        changed = False
        for i in range(1, len(blocks) - 1):
            blk = blocks[i]
            if blk.op is not DiffOp.EQUAL:
                continue
            before = _edit_sizes(blocks, range(i - 1, -1, -1))
            after = _edit_sizes(blocks, range(i + 1, len(blocks)))
            if len(blk) <= max(before) and len(blk) <= max(after):
                blocks[i : i + 1] = [
                    DiffBlock(DiffOp.DELETE, blk.items),
                    DiffBlock(DiffOp.INSERT, blk.items),
                ]
                blocks = _normalize(blocks)
                changed = True
                break
    return blocks


def diff_blocks(
    a: str | Sequence[str],
    b: str | Sequence[str],
    *,
    cleanup: bool = True,
) -> list[DiffBlock]:
    """Diff two sequences into EQUAL/DELETE/INSERT blocks.

    Strings are compared character by character; any other sequence is
    compared item by item (use a list of lines for line granularity).
    """

    if not isinstance(a, str):
        a = tuple(a)
    if not isinstance(b, str):
        b = tuple(b)

    matcher = SequenceMatcher(None, a, b, autojunk=False)
    blocks: list[DiffBlock] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            blocks.append(DiffBlock(DiffOp.EQUAL, a[i1:i2]))
        elif tag == "delete":
            blocks.append(DiffBlock(DiffOp.DELETE, a[i1:i2]))
        elif tag == "insert":
            blocks.append(DiffBlock(DiffOp.INSERT, b[j1:j2]))
        else:
            blocks.append(DiffBlock(DiffOp.DELETE, a[i1:i2]))
            blocks.append(DiffBlock(DiffOp.INSERT, b[j1:j2]))

    if cleanup:
        return cleanup_semantic(blocks)
    return _normalize(blocks)


def diff_lines(old_lines: Sequence[str], new_lines: Sequence[str]) -> list[DiffBlock]:
    return diff_blocks(tuple(old_lines), tuple(new_lines))


def diff_chars(old: str, new: str) -> list[DiffBlock]:
    return diff_blocks(old, new)
