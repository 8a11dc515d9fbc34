"""Where diff text comes from.

The parser accepts unified-diff text from anywhere: a saved patch, a VCS
subprocess the caller ran, or the directory comparator. A `DiffSource`
hides which one, so the same selection workflow runs on all of them.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from hunkwise import dircompare, tree
from hunkwise.model import FileChange
from hunkwise.parser import parse
from hunkwise.patch import DEFAULT_CONTEXT_LINES


class DiffSource(ABC):
    @abstractmethod
    def get_diff(self) -> str:
        """Return unified-diff text."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Short human-readable name of the source."""

    def load(self) -> list[FileChange]:
        return parse(self.get_diff())


@dataclass
class TextSource(DiffSource):
    """Patch text read from a file, or from a stream when `path` is None or "-"."""

    path: Path | None = None
    stream: TextIO | None = field(default=None, repr=False)

    def get_diff(self) -> str:
        if self.path is None or str(self.path) == "-":
            return (self.stream or sys.stdin).read()
        return tree.read_text(self.path)

    @property
    def label(self) -> str:
        if self.path is None or str(self.path) == "-":
            return "<stdin>"
        return str(self.path)


@dataclass
class DirectorySource(DiffSource):
    """Diff of two directories, as handed to an external diff editor."""

    left: Path
    right: Path
    exclude: list[str] = field(default_factory=list)
    context: int = DEFAULT_CONTEXT_LINES

    def get_diff(self) -> str:
        left_tree = tree.read_tree(self.left, exclude=self.exclude)
        right_tree = tree.read_tree(self.right, exclude=self.exclude)
        return dircompare.compare(left_tree, right_tree, context=self.context)

    @property
    def label(self) -> str:
        return "diff-editor"
