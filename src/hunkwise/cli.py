from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace
from itertools import zip_longest
from pathlib import Path

from hunkwise import __version__
from hunkwise.config import HunkwiseConfig, RenderOptions, load_config
from hunkwise.diagnostics import format_error_with_hint, format_file_summary
from hunkwise.errors import HunkwiseConfigError, HunkwiseSelectionError, HunkwiseTreeError
from hunkwise.model import FileChange, Hunk, Line, LineType
from hunkwise.selection import SelectionState, has_any_selection, unselected_files

EXIT_OK = 0
EXIT_DIFFERENCES = 1
EXIT_USAGE = 2
EXIT_TREE_ERROR = 3


def _add_common_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--root",
        type=str,
        default=None,
        help="Directory to search upward from for hunkwise.toml (defaults to cwd).",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to hunkwise.toml (defaults to searching upward from --root).",
    )
    p.add_argument("--context", type=int, default=None, help="Context lines around changes.")
    p.add_argument("--json", dest="json_output", action="store_true", help="Emit JSON.")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr.")


def _add_selection_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--all", dest="select_all", action="store_true", help="Select every hunk.")
    p.add_argument(
        "--hunk",
        action="append",
        default=[],
        help="Select a whole hunk as PATH:HUNK (0-based, repeatable).",
    )
    p.add_argument(
        "--line",
        action="append",
        default=[],
        help="Select lines as PATH:HUNK:LINE or PATH:HUNK:START-END (0-based, repeatable).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hunkwise")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    compare_p = subparsers.add_parser("compare", help="Diff two directory trees.")
    _add_common_flags(compare_p)
    compare_p.add_argument("left")
    compare_p.add_argument("right")
    compare_p.add_argument(
        "--exit-code", action="store_true", help="Exit with 1 when the trees differ."
    )

    show_p = subparsers.add_parser("show", help="Summarize a patch.")
    _add_common_flags(show_p)
    show_p.add_argument("patch", nargs="?", default="-", help="Patch file, or - for stdin.")
    show_p.add_argument("--word-diff", action="store_true", help="Mark changed words.")
    show_p.add_argument("--show-whitespace", action="store_true", help="Make whitespace visible.")
    show_p.add_argument(
        "--no-line-numbers", action="store_true", help="Hide the old/new line number gutter."
    )
    show_p.add_argument(
        "--side-by-side", action="store_true", help="Print old and new text in two columns."
    )

    select_p = subparsers.add_parser("select", help="Print only the selected part of a patch.")
    _add_common_flags(select_p)
    select_p.add_argument("patch", nargs="?", default="-", help="Patch file, or - for stdin.")
    _add_selection_flags(select_p)

    apply_p = subparsers.add_parser(
        "apply", help="Diff-editor mode: keep only the selected changes in RIGHT."
    )
    _add_common_flags(apply_p)
    apply_p.add_argument("left")
    apply_p.add_argument("right")
    _add_selection_flags(apply_p)

    watch_p = subparsers.add_parser("watch", help="Re-compare two trees on every change.")
    _add_common_flags(watch_p)
    watch_p.add_argument("left")
    watch_p.add_argument("right")

    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _is_json_mode(args: argparse.Namespace) -> bool:
    return bool(getattr(args, "json_output", False))


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def _emit_json(payload: object) -> None:
    print(json.dumps(payload, sort_keys=True))


def _load_config(args: argparse.Namespace) -> HunkwiseConfig:
    root = Path(args.root).resolve() if args.root else None
    config_path = Path(args.config).resolve() if args.config else None
    return load_config(root=root, config_path=config_path)


def _context(args: argparse.Namespace, cfg: HunkwiseConfig) -> int:
    if args.context is None:
        return cfg.diff.context_lines
    if args.context < 0:
        raise HunkwiseConfigError("--context must be >= 0.")
    return int(args.context)


def _configure_logging(args: argparse.Namespace) -> None:
    if getattr(args, "verbose", False):
        logging.basicConfig(
            level=logging.DEBUG, stream=sys.stderr, format="%(name)s: %(message)s"
        )


def _file_json(file: FileChange) -> dict[str, object]:
    return {
        "path": file.path,
        "change_type": file.change_type.code,
        "added": file.added_lines,
        "deleted": file.deleted_lines,
        "hunks": [
            {
                "header": h.header,
                "old_start": h.old_start,
                "old_lines": h.old_lines,
                "new_start": h.new_start,
                "new_lines": h.new_lines,
            }
            for h in file.hunks
        ],
    }


def _print_summary(files: Sequence[FileChange]) -> None:
    for f in files:
        print(format_file_summary(f.path, f.change_type.code, f.added_lines, f.deleted_lines))


# --- selection arguments ---------------------------------------------------


def _find_file(files: Sequence[FileChange], path: str, arg: str) -> FileChange:
    for f in files:
        if f.path == path:
            return f
    raise HunkwiseSelectionError(f"No file {path!r} in diff (from {arg!r}).")


def _parse_index(value: str, arg: str) -> int:
    try:
        idx = int(value)
    except ValueError:
        raise HunkwiseSelectionError(f"Invalid index {value!r} in {arg!r}.") from None
    if idx < 0:
        raise HunkwiseSelectionError(f"Negative index in {arg!r}.")
    return idx


def _lookup_hunk(files: Sequence[FileChange], path: str, hunk_s: str, arg: str) -> Hunk:
    file = _find_file(files, path, arg)
    hunk_idx = _parse_index(hunk_s, arg)
    if hunk_idx >= len(file.hunks):
        raise HunkwiseSelectionError(
            f"{path!r} has {len(file.hunks)} hunk(s); {arg!r} is out of range."
        )
    return file.hunks[hunk_idx]


def build_selection(
    files: Sequence[FileChange],
    *,
    select_all: bool = False,
    hunk_args: Sequence[str] = (),
    line_args: Sequence[str] = (),
) -> SelectionState:
    """Turn `--all`/`--hunk`/`--line` arguments into a SelectionState."""

    selection = SelectionState()
    if select_all:
        selection.select_all(files)

    for arg in hunk_args:
        path, sep, hunk_s = arg.rpartition(":")
        if not sep or not path:
            raise HunkwiseSelectionError(f"Expected PATH:HUNK, got {arg!r}.")
        _lookup_hunk(files, path, hunk_s, arg)
        if not selection.is_hunk_selected(path, int(hunk_s)):
            selection.toggle_hunk(path, int(hunk_s))

    for arg in line_args:
        parts = arg.rsplit(":", 2)
        if len(parts) != 3 or not parts[0]:
            raise HunkwiseSelectionError(f"Expected PATH:HUNK:LINE[-LINE], got {arg!r}.")
        path, hunk_s, range_s = parts
        hunk = _lookup_hunk(files, path, hunk_s, arg)
        start_s, _, end_s = range_s.partition("-")
        start = _parse_index(start_s, arg)
        end = _parse_index(end_s, arg) if end_s else start
        if max(start, end) >= len(hunk.lines):
            raise HunkwiseSelectionError(
                f"Hunk has {len(hunk.lines)} line(s); {arg!r} is out of range."
            )
        hunk_idx = int(hunk_s)
        if selection.is_hunk_selected(path, hunk_idx):
            continue
        selection.select_line_range(path, hunk_idx, start, end)

    return selection


# --- show rendering --------------------------------------------------------


def _gutter(line: Line) -> str:
    old = str(line.old_line_num) if line.old_line_num else ""
    new = str(line.new_line_num) if line.new_line_num else ""
    return f"{old:>4} {new:>4} "


def _render_hunk_lines(hunk: Hunk, opts: RenderOptions) -> list[str]:
    from hunkwise.whitespace import render_whitespace
    from hunkwise.wordlevel import SpanType, hunk_word_diffs

    diffs = hunk_word_diffs(hunk) if opts.word_diff else {}

    def vis(text: str) -> str:
        return render_whitespace(text, opts.tab_width) if opts.show_whitespace else text

    out: list[str] = []
    for idx, line in enumerate(hunk.lines):
        prefix = _gutter(line) if opts.show_line_numbers else ""
        result = diffs.get(idx)
        if result is None:
            out.append(prefix + line.line_type.marker + vis(line.content))
            continue
        if line.line_type is LineType.DELETION:
            spans = result.old_spans
        else:
            spans = result.new_spans
        parts: list[str] = []
        for span in spans:
            if span.span_type is SpanType.DELETED:
                parts.append(f"[-{vis(span.text)}-]")
            elif span.span_type is SpanType.ADDED:
                parts.append(f"{{+{vis(span.text)}+}}")
            else:
                parts.append(vis(span.text))
        out.append(prefix + line.line_type.marker + "".join(parts))
    return out


def _side_by_side_rows(hunk: Hunk) -> list[tuple[Line | None, Line | None]]:
    """Context on both sides; each deletion run beside the addition run after it."""

    rows: list[tuple[Line | None, Line | None]] = []
    lines = hunk.lines
    i = 0
    while i < len(lines):
        if lines[i].line_type is LineType.CONTEXT:
            rows.append((lines[i], lines[i]))
            i += 1
            continue
        dels: list[Line] = []
        adds: list[Line] = []
        while i < len(lines) and lines[i].line_type is LineType.DELETION:
            dels.append(lines[i])
            i += 1
        while i < len(lines) and lines[i].line_type is LineType.ADDITION:
            adds.append(lines[i])
            i += 1
        rows.extend(zip_longest(dels, adds))
    return rows


def _render_side_by_side(hunk: Hunk, opts: RenderOptions) -> list[str]:
    from hunkwise.whitespace import render_whitespace

    def cell(line: Line | None) -> str:
        if line is None:
            return ""
        text = line.content
        if opts.show_whitespace:
            text = render_whitespace(text, opts.tab_width)
        return line.line_type.marker + text

    rows = [(cell(old), cell(new)) for old, new in _side_by_side_rows(hunk)]
    width = max((len(old) for old, _ in rows), default=0)
    return [f"{old:<{width}} | {new}".rstrip() for old, new in rows]


# --- commands --------------------------------------------------------------


def cmd_compare(args: argparse.Namespace) -> int:
    from hunkwise.source import DirectorySource

    try:
        cfg = _load_config(args)
        source = DirectorySource(
            Path(args.left),
            Path(args.right),
            exclude=list(cfg.diff.exclude),
            context=_context(args, cfg),
        )
        text = source.get_diff()
    except HunkwiseConfigError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_USAGE
    except HunkwiseTreeError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_TREE_ERROR

    if _is_json_mode(args):
        from hunkwise.parser import parse

        _emit_json(
            {"command": "compare", "ok": True, "files": [_file_json(f) for f in parse(text)]}
        )
    else:
        sys.stdout.write(text)

    if args.exit_code and text:
        return EXIT_DIFFERENCES
    return EXIT_OK


def cmd_show(args: argparse.Namespace) -> int:
    from hunkwise.source import TextSource

    try:
        cfg = _load_config(args)
        files = TextSource(Path(args.patch)).load()
    except HunkwiseConfigError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_USAGE
    except HunkwiseTreeError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_TREE_ERROR

    if _is_json_mode(args):
        _emit_json({"command": "show", "ok": True, "files": [_file_json(f) for f in files]})
        return EXIT_OK

    base = cfg.render_options()
    opts = replace(
        base,
        word_diff=base.word_diff or bool(args.word_diff),
        show_whitespace=base.show_whitespace or bool(args.show_whitespace),
        show_line_numbers=base.show_line_numbers and not args.no_line_numbers,
    )
    side_by_side = args.side_by_side or cfg.view.mode == "side-by-side"
    render = _render_side_by_side if side_by_side else _render_hunk_lines
    for f in files:
        print(format_file_summary(f.path, f.change_type.code, f.added_lines, f.deleted_lines))
        for hunk in f.hunks:
            print(hunk.header)
            for text in render(hunk, opts):
                print(text)
    return EXIT_OK


def cmd_select(args: argparse.Namespace) -> int:
    from hunkwise.patch import generate_patch
    from hunkwise.source import TextSource

    try:
        cfg = _load_config(args)
        context = _context(args, cfg)
        files = TextSource(Path(args.patch)).load()
        selection = build_selection(
            files, select_all=args.select_all, hunk_args=args.hunk, line_args=args.line
        )
        if not any(has_any_selection(f, selection) for f in files):
            raise HunkwiseSelectionError("No hunks or lines selected.")
    except (HunkwiseConfigError, HunkwiseSelectionError) as e:
        _eprint(format_error_with_hint(e))
        return EXIT_USAGE
    except HunkwiseTreeError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_TREE_ERROR

    patch = generate_patch(files, selection, context=context)
    if _is_json_mode(args):
        _emit_json({"command": "select", "ok": True, "patch": patch})
    else:
        sys.stdout.write(patch)
    return EXIT_OK


def cmd_apply(args: argparse.Namespace) -> int:
    from hunkwise import tree
    from hunkwise.source import DirectorySource

    left = Path(args.left)
    right = Path(args.right)
    try:
        cfg = _load_config(args)
        source = DirectorySource(
            left, right, exclude=list(cfg.diff.exclude), context=_context(args, cfg)
        )
        files = source.load()
        selection = build_selection(
            files, select_all=args.select_all, hunk_args=args.hunk, line_args=args.line
        )
        touched = tree.apply_to_directory(left, right, files, selection)
    except (HunkwiseConfigError, HunkwiseSelectionError) as e:
        _eprint(format_error_with_hint(e))
        return EXIT_USAGE
    except HunkwiseTreeError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_TREE_ERROR

    reverted = unselected_files(files, selection)
    if _is_json_mode(args):
        _emit_json({"command": "apply", "ok": True, "touched": touched, "reverted": reverted})
    else:
        for path in touched:
            print(f"{'revert' if path in reverted else 'keep'}  {path}")
    return EXIT_OK


def cmd_watch(args: argparse.Namespace) -> int:
    from hunkwise import watcher
    from hunkwise.source import DirectorySource

    try:
        watcher.check_watchfiles_available()
    except ImportError as e:
        _eprint(f"error: {e}")
        return EXIT_USAGE

    left = Path(args.left).resolve()
    right = Path(args.right).resolve()
    try:
        cfg = _load_config(args)
        source = DirectorySource(
            left, right, exclude=list(cfg.diff.exclude), context=_context(args, cfg)
        )
        initial = source.load()
    except HunkwiseConfigError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_USAGE
    except HunkwiseTreeError as e:
        _eprint(format_error_with_hint(e))
        return EXIT_TREE_ERROR

    json_mode = _is_json_mode(args)

    def on_cycle_result(result: watcher.WatchCycleResult) -> None:
        if json_mode:
            _emit_json(watcher.format_watch_cycle_json(result))
        else:
            _print_summary(result.files)

    def on_error(exc: BaseException) -> None:
        _eprint(format_error_with_hint(exc))

    if not json_mode:
        _print_summary(initial)

    try:
        asyncio.run(
            watcher.run_watch_loop(
                changes_iter=watcher.make_watchfiles_iter([left, right]),
                run_cycle=watcher.build_cycle_runner(source),
                on_event=_eprint,
                on_cycle_result=on_cycle_result,
                on_error=on_error,
                roots=[left, right],
            )
        )
    except KeyboardInterrupt:
        pass
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help/--version and parse errors.
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_USAGE

    _configure_logging(args)

    if args.command == "compare":
        return cmd_compare(args)
    if args.command == "show":
        return cmd_show(args)
    if args.command == "select":
        return cmd_select(args)
    if args.command == "apply":
        return cmd_apply(args)
    if args.command == "watch":
        return cmd_watch(args)

    return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
