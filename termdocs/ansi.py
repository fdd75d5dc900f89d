"""ANSI-aware text measurement and line shaping utilities.

Frames mix escape sequences, box-drawing rules and wide glyphs, so every
width decision goes through :func:`display_width` instead of ``len``.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
RESET = "\033[0m"


def char_display_width(ch: str, col: int = 0) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks and zero-width
    format characters consume no columns, and East Asian wide/fullwidth
    characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.category(ch) in {"Cf", "Mn", "Me"}:
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    """Return the number of terminal columns ``text`` occupies.

    Escape sequences are ignored; tabs are measured from column zero.
    """
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1

    clipped = "".join(out)
    if "\x1b" in clipped and not clipped.endswith(RESET):
        clipped += RESET
    return clipped


def align_right(text: str, width: int) -> str:
    """Place ``text`` flush against the right edge of a ``width``-column line."""
    clipped = clip_ansi_line(text, width)
    return " " * max(0, width - display_width(clipped)) + clipped


def join_horizontal(left: str, right: str, gap: int = 0) -> str:
    """Place two multi-line blocks side by side, aligned at the top.

    The left block is padded to its widest line so the right block starts in
    the same column on every row.
    """
    left_lines = left.split("\n") if left else []
    right_lines = right.split("\n") if right else []
    left_width = max((display_width(line) for line in left_lines), default=0)
    rows = max(len(left_lines), len(right_lines))
    out: list[str] = []
    for row in range(rows):
        lhs = left_lines[row] if row < len(left_lines) else ""
        rhs = right_lines[row] if row < len(right_lines) else ""
        if not rhs:
            out.append(lhs)
            continue
        filler = " " * (left_width - display_width(lhs) + gap)
        out.append(f"{lhs}{filler}{rhs}")
    return "\n".join(out)


def wrap_ansi_line(text: str, width: int) -> list[str]:
    """Wrap a styled line into chunks that fit ``width`` display columns.

    Escape sequences remain attached to their surrounding chunk, and tab
    expansion respects terminal tab-stop alignment for each wrapped segment.
    """
    if width <= 0 or not text:
        return [""]

    wrapped: list[str] = []
    chunk: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                chunk.append(match.group(0))
                i = match.end()
                continue

        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > width and chunk:
            wrapped.append("".join(chunk))
            chunk = []
            col = 0
            w = char_display_width(ch, col)
        chunk.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1

    wrapped.append("".join(chunk))
    return wrapped


def build_screen_lines(rendered: str, width: int) -> list[str]:
    """Split rendered output into display lines wrapped to ``width`` columns."""
    if not rendered:
        return []
    screen_lines: list[str] = []
    for line in rendered.rstrip("\n").split("\n"):
        screen_lines.extend(wrap_ansi_line(line.rstrip("\r"), width))
    return screen_lines
