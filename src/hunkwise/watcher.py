"""Watch mode: re-compare two directory trees whenever either changes."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hunkwise.model import FileChange
from hunkwise.source import DiffSource

_TMP_PREFIX = ".hunkwise-tmp-"


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A batch of relevant file changes."""

    changed_paths: frozenset[Path]
    timestamp: float


@dataclass(frozen=True, slots=True)
class WatchCycleResult:
    """Result of a single re-compare cycle."""

    files: tuple[FileChange, ...]
    duration_s: float
    changed_paths: frozenset[Path]

    @property
    def added_lines(self) -> int:
        return sum(f.added_lines for f in self.files)

    @property
    def deleted_lines(self) -> int:
        return sum(f.deleted_lines for f in self.files)


def check_watchfiles_available() -> None:
    """Raise ImportError with a helpful message if watchfiles is not installed."""
    import importlib

    try:
        importlib.import_module("watchfiles")
    except ImportError:
        raise ImportError(
            "watchfiles is required for watch mode. Install it with: pip install hunkwise[watch]"
        ) from None


def filter_tree_paths(changed_paths: frozenset[Path], *, roots: list[Path]) -> frozenset[Path]:
    """Keep changed paths under one of `roots`, dropping our own temp files."""
    kept: set[Path] = set()
    for p in changed_paths:
        if p.name.startswith(_TMP_PREFIX):
            continue
        if any(p == r or p.is_relative_to(r) for r in roots):
            kept.add(p)
    return frozenset(kept)


async def run_watch_loop(
    *,
    changes_iter: AsyncIterator[set[tuple[Any, str]]],
    run_cycle: Callable[[WatchEvent], WatchCycleResult],
    on_event: Callable[[str], None],
    on_cycle_result: Callable[[WatchCycleResult], None],
    on_error: Callable[[BaseException], None],
    roots: list[Path],
) -> None:
    """Main watch loop. Consumes changes_iter, filters, and calls run_cycle."""
    async for raw_changes in changes_iter:
        paths = frozenset(Path(p) for _, p in raw_changes)
        relevant = filter_tree_paths(paths, roots=roots)
        if not relevant:
            continue

        event = WatchEvent(changed_paths=relevant, timestamp=time.monotonic())
        names = ", ".join(str(p) for p in sorted(relevant))
        on_event(f"[watch] change detected: {names}")

        try:
            result = run_cycle(event)
        except Exception as exc:
            on_error(exc)
            continue

        on_event(f"[watch] compared {len(result.files)} file(s) ({result.duration_s:.1f}s)")
        on_cycle_result(result)


def format_watch_cycle_json(result: WatchCycleResult) -> dict[str, object]:
    """Format a cycle result as a JSON-serializable dict."""
    return {
        "command": "watch",
        "ok": True,
        "files": [
            {
                "path": f.path,
                "change_type": f.change_type.code,
                "added": f.added_lines,
                "deleted": f.deleted_lines,
            }
            for f in result.files
        ],
        "added": result.added_lines,
        "deleted": result.deleted_lines,
        "duration_s": round(result.duration_s, 2),
        "changed_paths": sorted(str(p) for p in result.changed_paths),
    }


def build_cycle_runner(source: DiffSource) -> Callable[[WatchEvent], WatchCycleResult]:
    """Create a cycle runner that reloads `source` on every event."""

    def runner(event: WatchEvent) -> WatchCycleResult:
        t0 = time.monotonic()
        files = tuple(source.load())
        return WatchCycleResult(
            files=files,
            duration_s=time.monotonic() - t0,
            changed_paths=event.changed_paths,
        )

    return runner


def make_watchfiles_iter(watch_paths: list[Path]) -> AsyncIterator[set[tuple[Any, str]]]:
    """Create an async iterator using watchfiles.awatch()."""
    import watchfiles  # type: ignore[import-untyped]

    return watchfiles.awatch(*watch_paths, debounce=200)
