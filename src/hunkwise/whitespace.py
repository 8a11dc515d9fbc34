"""Make tabs, spaces and trailing whitespace visible in rendered diff lines."""

from __future__ import annotations

from collections.abc import Callable

TAB_CHAR = "→"
SPACE_CHAR = "·"
TRAILING_SPACE = "␣"


def _render_tab(tab_width: int) -> str:
    return TAB_CHAR + " " * max(0, tab_width - 1)


def render_whitespace_simple(content: str, tab_width: int = 4) -> str:
    """Replace every tab and space with a visible marker."""

    # Spaces first: tab padding stays plain spaces.
    return content.replace(" ", SPACE_CHAR).replace("\t", _render_tab(tab_width))


def render_whitespace(
    content: str,
    tab_width: int = 4,
    *,
    highlight_trailing: Callable[[str], str] | None = None,
) -> str:
    """Like `render_whitespace_simple`, but trailing spaces get their own marker.

    `highlight_trailing` lets a renderer wrap the trailing run (e.g. in a
    colour escape).
    """

    if not content:
        return content

    trimmed = content.rstrip(" \t")
    trailing = content[len(trimmed) :]
    out = render_whitespace_simple(trimmed, tab_width)
    if trailing:
        marked = trailing.replace(" ", TRAILING_SPACE).replace("\t", _render_tab(tab_width))
        out += highlight_trailing(marked) if highlight_trailing else marked
    return out


def has_trailing_whitespace(content: str) -> bool:
    return content.endswith((" ", "\t"))


def count_trailing_whitespace(content: str) -> int:
    return len(content) - len(content.rstrip(" \t"))
