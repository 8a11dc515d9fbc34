"""Filesystem side of diff-editor mode: read directory trees, write results back.

The engine modules work on in-memory text; this module is the only place that
touches the disk. Callers pass two directories (the "left" baseline and the
"right" working copy a VCS hands to an external diff editor).
"""

from __future__ import annotations

import fnmatch
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from hunkwise import applier
from hunkwise.errors import HunkwiseTreeError
from hunkwise.model import FileChange
from hunkwise.selection import SelectionQuery

logger = logging.getLogger("hunkwise.tree")


def _is_excluded(rel_posix: str, *, exclude: Iterable[str]) -> bool:
    for pat in exclude:
        if fnmatch.fnmatchcase(rel_posix, pat):
            return True
        # Treat a leading `**/` as "zero or more directories".
        stripped = pat
        while stripped.startswith("**/"):
            stripped = stripped[3:]
            if fnmatch.fnmatchcase(rel_posix, stripped):
                return True
    return False


def read_tree(root: Path, *, exclude: Iterable[str] = ()) -> dict[str, bytes]:
    """Map every regular file under `root` (relative POSIX path) to its bytes."""

    if not root.is_dir():
        raise HunkwiseTreeError(f"Not a directory: {root}")

    exclude = list(exclude)
    out: dict[str, bytes] = {}
    try:
        for path in sorted(root.rglob("*")):
            if not path.is_file():
                continue
            rel = path.relative_to(root).as_posix()
            if _is_excluded(rel, exclude=exclude):
                continue
            out[rel] = path.read_bytes()
    except OSError as e:
        raise HunkwiseTreeError(f"Failed reading tree {root}: {e}") from e
    return out


def read_text(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8", errors="surrogateescape")
    except OSError as e:
        raise HunkwiseTreeError(f"Failed reading {path}: {e}") from e


def _resolve_inside(root: Path, rel_path: str) -> Path:
    out_path = (root / rel_path).resolve()
    base = root.resolve()
    if base not in out_path.parents:
        raise HunkwiseTreeError(f"Refusing to write outside {root}: {rel_path}")
    return out_path


def write_file(root: Path, rel_path: str, content: str) -> Path:
    """Atomically write `content` to root/rel_path, ending it with a newline."""

    out_path = _resolve_inside(root, rel_path)
    if content and not content.endswith("\n"):
        content += "\n"

    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        # Temp file in the same directory then os.replace.
        fd, tmp = tempfile.mkstemp(dir=str(out_path.parent), prefix=".hunkwise-tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content.encode("utf-8", errors="surrogateescape"))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, out_path)
        finally:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
    except OSError as e:
        raise HunkwiseTreeError(f"Failed writing {out_path}: {e}") from e

    logger.debug("wrote %s (%d bytes)", out_path, len(content))
    return out_path


def remove_file(root: Path, rel_path: str) -> None:
    out_path = _resolve_inside(root, rel_path)
    try:
        out_path.unlink(missing_ok=True)
    except OSError as e:
        raise HunkwiseTreeError(f"Failed removing {out_path}: {e}") from e
    logger.debug("removed %s", out_path)


def apply_to_directory(
    left_dir: Path,
    right_dir: Path,
    files: Iterable[FileChange],
    selection: SelectionQuery,
) -> list[str]:
    """Rewrite `right_dir` so it holds only the selected changes.

    Selected hunks keep the right-hand content; unselected ones are reverted
    to the left-hand content. Returns the paths that were touched.
    """

    touched: list[str] = []
    for file in files:
        left_path = left_dir / file.path
        right_path = right_dir / file.path
        left = read_text(left_path) if left_path.is_file() else ""
        right = read_text(right_path) if right_path.is_file() else ""

        result = applier.apply(file, left, right, selection)
        if result is None:
            remove_file(right_dir, file.path)
        else:
            write_file(right_dir, file.path, result)
        touched.append(file.path)
    return touched
