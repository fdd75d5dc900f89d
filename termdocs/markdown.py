"""Markdown to styled terminal text via Rich.

Theme names follow the terminal-markdown convention (``dark``, ``light``,
``notty``). ``dark`` and ``light`` pick the Pygments style Rich uses for
fenced code; any other name is taken as a Pygments style directly.
``notty`` skips styling and returns the source as written.
"""

from __future__ import annotations

import threading

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound
from rich.console import Console
from rich.errors import ConsoleError, StyleError
from rich.markdown import Markdown

from .documents import sanitize_terminal_text
from .errors import MarkdownRenderError

THEME_CODE_STYLES: dict[str, str] = {
    "dark": "monokai",
    "light": "default",
}
PLAIN_THEME_NAME = "notty"
DEFAULT_RENDER_WIDTH = 80
COLOR_SYSTEM = "256"

_KNOWN_CODE_STYLES: set[str] = set()
_KNOWN_CODE_STYLES_LOCK = threading.Lock()


def code_style_for_theme(theme_name: str) -> str:
    return THEME_CODE_STYLES.get(theme_name, theme_name)


def _check_code_style(style: str) -> None:
    # Rich quietly falls back to "default" for unknown styles.
    with _KNOWN_CODE_STYLES_LOCK:
        if style in _KNOWN_CODE_STYLES:
            return
        try:
            get_style_by_name(style)
        except ClassNotFound as exc:
            raise MarkdownRenderError(f"unknown markdown theme: {style!r}") from exc
        _KNOWN_CODE_STYLES.add(style)


def render_markdown(text: str, width: int = DEFAULT_RENDER_WIDTH, theme_name: str = "dark") -> str:
    """Render markdown ``text`` into ANSI-styled lines at most ``width`` columns wide.

    Control bytes in the source are escaped first so document content can
    never move the remote cursor. Raises :class:`MarkdownRenderError`.
    """
    source = sanitize_terminal_text(text)
    if theme_name == PLAIN_THEME_NAME:
        return source
    code_style = code_style_for_theme(theme_name)
    _check_code_style(code_style)

    # One console per call: sessions render concurrently.
    console = Console(
        width=max(1, width),
        force_terminal=True,
        color_system=COLOR_SYSTEM,
        legacy_windows=False,
        highlight=False,
    )
    try:
        with console.capture() as capture:
            console.print(Markdown(source, code_theme=code_style, hyperlinks=False))
    except (ConsoleError, StyleError, ValueError, TypeError) as exc:
        raise MarkdownRenderError(str(exc)) from exc
    return capture.get()
