from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from hunkwise.applier import apply
from hunkwise.dircompare import compare
from hunkwise.model import ChangeType, FileChange, Hunk, Line, LineType
from hunkwise.parser import parse
from hunkwise.patch import generate_patch
from hunkwise.selection import HunkSelection, SelectionQuery, SelectionState
from hunkwise.wordlevel import diff_pair


def _package_version() -> str:
    try:
        return version("hunkwise")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = [
    "ChangeType",
    "FileChange",
    "Hunk",
    "HunkSelection",
    "Line",
    "LineType",
    "SelectionQuery",
    "SelectionState",
    "__version__",
    "apply",
    "compare",
    "diff_pair",
    "generate_patch",
    "parse",
]
