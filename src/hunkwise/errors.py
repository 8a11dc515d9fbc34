"""Hunkwise exception hierarchy.

Keep this module small and dependency-free: it is imported broadly across the
project and by tests. The diff engine itself never raises these; only the
collaborator layers (config, tree I/O, CLI selection parsing) do.
"""


class HunkwiseError(Exception):
    """Base exception for all Hunkwise errors."""


class HunkwiseConfigError(HunkwiseError):
    """Raised for invalid user configuration."""


class HunkwiseTreeError(HunkwiseError):
    """Raised when a directory tree cannot be read or written."""


class HunkwiseSelectionError(HunkwiseError):
    """Raised when a selection argument cannot be parsed or does not match the diff."""
