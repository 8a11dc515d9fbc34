from __future__ import annotations

from hunkwise.whitespace import (
    count_trailing_whitespace,
    has_trailing_whitespace,
    render_whitespace,
    render_whitespace_simple,
)


def test_render_simple_marks_tabs_and_spaces() -> None:
    assert render_whitespace_simple("a\tb c", 4) == "a→   b·c"
    assert render_whitespace_simple("\t", 1) == "→"


def test_render_marks_trailing_run_separately() -> None:
    assert render_whitespace("x  ") == "x␣␣"
    assert render_whitespace("a b ") == "a·b␣"
    assert render_whitespace("  ") == "␣␣"
    assert render_whitespace("") == ""


def test_render_highlight_callback_wraps_trailing_only() -> None:
    out = render_whitespace("x \t", 2, highlight_trailing=lambda s: f"[{s}]")
    assert out == "x[␣→ ]"


def test_trailing_whitespace_helpers() -> None:
    assert has_trailing_whitespace("ab \t")
    assert not has_trailing_whitespace("ab")
    assert count_trailing_whitespace("ab \t") == 2
    assert count_trailing_whitespace("") == 0
