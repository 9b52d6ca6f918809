"""Diff colorizing and terminal-text sanitization.

Uses Pygments' diff lexer with a terminal formatter, loaded lazily on first
use. Also neutralizes terminal control bytes in git output before printing.
"""

from __future__ import annotations

import re

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

_PYGMENTS_READY = False
_PYGMENTS_HIGHLIGHT = None
_PYGMENTS_DIFF_LEXER = None
_PYGMENTS_TERMINAL_FORMATTER = None
_PYGMENTS_GET_STYLE_BY_NAME = None
_PYGMENTS_FORMATTERS: dict[str, object] = {}


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def _ensure_pygments_loaded() -> None:
    global _PYGMENTS_READY
    global _PYGMENTS_HIGHLIGHT
    global _PYGMENTS_DIFF_LEXER
    global _PYGMENTS_TERMINAL_FORMATTER
    global _PYGMENTS_GET_STYLE_BY_NAME

    if _PYGMENTS_READY:
        return

    from pygments import highlight as pygments_highlight
    from pygments.formatters import TerminalFormatter
    from pygments.lexers import DiffLexer
    from pygments.styles import get_style_by_name

    _PYGMENTS_HIGHLIGHT = pygments_highlight
    _PYGMENTS_DIFF_LEXER = DiffLexer()
    _PYGMENTS_TERMINAL_FORMATTER = TerminalFormatter
    _PYGMENTS_GET_STYLE_BY_NAME = get_style_by_name
    _PYGMENTS_READY = True


def _formatter_for_style(style: str):
    formatter = _PYGMENTS_FORMATTERS.get(style)
    if formatter is not None:
        return formatter
    assert _PYGMENTS_TERMINAL_FORMATTER is not None
    assert _PYGMENTS_GET_STYLE_BY_NAME is not None
    resolved = style
    try:
        _PYGMENTS_GET_STYLE_BY_NAME(style)
    except Exception:
        resolved = "monokai"
    formatter = _PYGMENTS_TERMINAL_FORMATTER(style=resolved)
    _PYGMENTS_FORMATTERS[style] = formatter
    return formatter


def colorize_diff(diff_text: str, style: str = "monokai", no_color: bool = False) -> str:
    """Return sanitized ``diff_text``, ANSI-colorized unless ``no_color``."""
    diff_text = sanitize_terminal_text(diff_text)
    if no_color or not diff_text:
        return diff_text

    _ensure_pygments_loaded()
    assert _PYGMENTS_HIGHLIGHT is not None
    return _PYGMENTS_HIGHLIGHT(diff_text, _PYGMENTS_DIFF_LEXER, _formatter_for_style(style))


__all__ = ["colorize_diff", "sanitize_terminal_text"]
