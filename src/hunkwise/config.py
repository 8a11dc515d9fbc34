"""Configuration loading for Hunkwise.

Reads an optional `hunkwise.toml`, applies defaults, then environment
overrides (`HUNKWISE_*`). Only light validation is done here.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from hunkwise.errors import HunkwiseConfigError

CONFIG_FILENAME = "hunkwise.toml"

VIEW_MODES = ("unified", "side-by-side")
MAX_TAB_WIDTH = 16

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ViewConfig:
    mode: str = "unified"
    show_whitespace: bool = False
    show_line_numbers: bool = True
    tab_width: int = 4
    word_diff: bool = False


@dataclass(frozen=True)
class DiffConfig:
    context_lines: int = 3
    exclude: tuple[str, ...] = ()


@dataclass(frozen=True)
class RenderOptions:
    show_whitespace: bool
    show_line_numbers: bool
    tab_width: int
    word_diff: bool


@dataclass(frozen=True)
class HunkwiseConfig:
    version: int = 1
    view: ViewConfig = ViewConfig()
    diff: DiffConfig = DiffConfig()

    def render_options(self) -> RenderOptions:
        return RenderOptions(
            show_whitespace=self.view.show_whitespace,
            show_line_numbers=self.view.show_line_numbers,
            tab_width=self.view.tab_width,
            word_diff=self.view.word_diff,
        )


def find_config(start: Path) -> Path | None:
    """Walk upward from `start` looking for `hunkwise.toml`; None if there is none."""

    cur = start
    try:
        if cur.is_file():
            cur = cur.parent
    except OSError:
        cur = cur.parent

    cur = cur.resolve()
    while True:
        candidate = cur / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if cur.parent == cur:
            return None
        cur = cur.parent


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise HunkwiseConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise HunkwiseConfigError(f"Expected {name} to be a boolean.")
    return value


def _as_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise HunkwiseConfigError(f"Expected {name} to be an integer.")
    return value


def _as_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise HunkwiseConfigError(f"Expected {name} to be a string.")
    return value


def _as_str_list(value: Any, *, name: str) -> list[str]:
    if not isinstance(value, list) or any(not isinstance(x, str) for x in value):
        raise HunkwiseConfigError(f"Expected {name} to be a list of strings.")
    return list(value)


def _parse_bool_env(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


def apply_env_overrides(cfg: HunkwiseConfig, environ: Mapping[str, str]) -> HunkwiseConfig:
    """Apply `HUNKWISE_*` overrides; unrecognised values are ignored."""

    view = cfg.view

    mode = environ.get("HUNKWISE_VIEW_MODE", "")
    if mode in ("side-by-side", "sidebyside"):
        view = replace(view, mode="side-by-side")
    elif mode == "unified":
        view = replace(view, mode="unified")

    flags = {
        "HUNKWISE_SHOW_WHITESPACE": "show_whitespace",
        "HUNKWISE_SHOW_LINE_NUMBERS": "show_line_numbers",
        "HUNKWISE_WORD_DIFF": "word_diff",
    }
    for env_name, attr in flags.items():
        value = environ.get(env_name, "")
        if value:
            view = replace(view, **{attr: _parse_bool_env(value)})

    tab_width = environ.get("HUNKWISE_TAB_WIDTH", "")
    if tab_width:
        try:
            width = int(tab_width)
        except ValueError:
            width = 0
        if 0 < width <= MAX_TAB_WIDTH:
            view = replace(view, tab_width=width)

    return replace(cfg, view=view)


def _load_file(config_path: Path) -> HunkwiseConfig:
    try:
        raw = config_path.read_bytes()
    except FileNotFoundError as e:
        raise HunkwiseConfigError(f"Missing {CONFIG_FILENAME} at: {config_path}") from e
    except OSError as e:
        raise HunkwiseConfigError(f"Failed reading config file: {config_path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise HunkwiseConfigError(f"Config is not valid UTF-8: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise HunkwiseConfigError(f"Invalid TOML in {config_path}: {e}") from e

    version = _as_int(data.get("version", 1), name="version")
    if version != 1:
        raise HunkwiseConfigError(f"Unsupported config version: {version} (expected 1).")

    view_tbl = _as_table(data.get("view"), name="view")
    diff_tbl = _as_table(data.get("diff"), name="diff")
    defaults = ViewConfig()

    mode = _as_str(view_tbl.get("mode", defaults.mode), name="view.mode")
    show_whitespace = _as_bool(
        view_tbl.get("show_whitespace", defaults.show_whitespace), name="view.show_whitespace"
    )
    show_line_numbers = _as_bool(
        view_tbl.get("show_line_numbers", defaults.show_line_numbers),
        name="view.show_line_numbers",
    )
    tab_width = _as_int(view_tbl.get("tab_width", defaults.tab_width), name="view.tab_width")
    word_diff = _as_bool(view_tbl.get("word_diff", defaults.word_diff), name="view.word_diff")

    context_lines = _as_int(diff_tbl.get("context_lines", 3), name="diff.context_lines")
    exclude = _as_str_list(diff_tbl.get("exclude", []), name="diff.exclude")

    # Validation
    if mode not in VIEW_MODES:
        raise HunkwiseConfigError(
            f"Invalid config: view.mode must be one of {', '.join(VIEW_MODES)} (got {mode!r})."
        )
    if not 1 <= tab_width <= MAX_TAB_WIDTH:
        raise HunkwiseConfigError(f"Invalid config: view.tab_width must be 1..{MAX_TAB_WIDTH}.")
    if context_lines < 0:
        raise HunkwiseConfigError("Invalid config: diff.context_lines must be >= 0.")

    return HunkwiseConfig(
        version=version,
        view=ViewConfig(
            mode=mode,
            show_whitespace=show_whitespace,
            show_line_numbers=show_line_numbers,
            tab_width=tab_width,
            word_diff=word_diff,
        ),
        diff=DiffConfig(context_lines=context_lines, exclude=tuple(exclude)),
    )


def load_config(
    *,
    root: Path | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> HunkwiseConfig:
    """Load `hunkwise.toml` (if any) and apply environment overrides.

    An explicit `config_path` must exist. Otherwise the file is searched for
    upward from `root` (default: the current directory) and defaults are used
    when none is found.
    """

    if config_path is None:
        config_path = find_config(root if root is not None else Path.cwd())

    cfg = _load_file(config_path) if config_path is not None else HunkwiseConfig()
    return apply_env_overrides(cfg, os.environ if environ is None else environ)
