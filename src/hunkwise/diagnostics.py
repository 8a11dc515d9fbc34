"""Error formatting and actionable hints for Hunkwise CLI output.

Keep this module small and dependency-light: it is imported by the CLI layer
and only depends on the error hierarchy.
"""

from __future__ import annotations

from hunkwise.errors import HunkwiseConfigError, HunkwiseSelectionError, HunkwiseTreeError


def format_hint(exc: BaseException) -> str | None:
    """Return an actionable hint for a known error, or None."""
    msg = str(exc)

    if isinstance(exc, HunkwiseConfigError):
        if "Invalid TOML" in msg:
            return "check hunkwise.toml syntax (values need quotes, tables need [brackets])"
        if "Missing hunkwise.toml" in msg:
            return "drop --config to run with defaults"
        return None

    if isinstance(exc, HunkwiseSelectionError):
        return "use PATH:HUNK for whole hunks or PATH:HUNK:LINE[-LINE] for lines (0-based)"

    if isinstance(exc, HunkwiseTreeError):
        if "Not a directory" in msg:
            return "pass the two directories the VCS hands to its diff editor"
        return None

    return None


def format_error_with_hint(exc: BaseException) -> str:
    """Format error message + optional hint for stderr output."""
    msg = (str(exc) or repr(exc)).strip()
    result = f"error: {msg}"
    hint = format_hint(exc)
    if hint:
        result += f"\nhint: {hint}"
    return result


def format_file_summary(path: str, code: str, added: int, deleted: int) -> str:
    """One line of the `show`/`compare` summary, e.g. `M  src/a.py  +3 -1`."""
    return f"{code}  {path}  +{added} -{deleted}"
