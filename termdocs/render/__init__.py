"""Frame composition for the document list and document content views.

Every function here is pure: given a :class:`SessionState` and immutable
:class:`RenderSettings` it returns the text of one terminal frame. Widths
are measured with :func:`display_width` so rules and the scroll indicator
line up exactly with the terminal edge whatever glyphs the labels contain.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..ansi import align_right, build_screen_lines, clip_ansi_line, display_width, join_horizontal
from ..input.keymap import LIST_HELP_ACTIONS, SHORT_HELP_ACTIONS
from ..state import SessionState, ViewState
from ..theme import DARK_THEME, Theme
from .help import short_help

CONTENT_HEADER_ROWS = 1
CONTENT_FOOTER_ROWS = 2
LIST_FOOTER_ROWS = 1
MIN_LIST_ROWS = 3
INITIALIZING_TEXT = "Initializing..."
EMPTY_LIST_TEXT = "No documents available."
DEFAULT_BANNER_TITLE = " termdocs "
DEFAULT_INTRO_TEXT = "Browse the documents below. Press enter to read one, esc to come back."


@dataclass(frozen=True)
class RenderSettings:
    """Process-wide presentation settings shared read-only by all sessions."""

    theme: Theme = DARK_THEME
    banner_title: str = DEFAULT_BANNER_TITLE
    intro_text: str = DEFAULT_INTRO_TEXT


def chrome_heights(view: ViewState) -> tuple[int, int]:
    """Return ``(header_rows, footer_rows)`` reserved around the viewport."""
    if view is ViewState.CONTENT:
        return CONTENT_HEADER_ROWS, CONTENT_FOOTER_ROWS
    return 0, 0


def viewport_height_for(view: ViewState, terminal_height: int) -> int:
    header_rows, footer_rows = chrome_heights(view)
    return max(0, terminal_height - header_rows - footer_rows)


def rule(theme: Theme, count: int) -> str:
    if count <= 0:
        return ""
    return theme.rule.render(theme.rule_char * count)


def header_line(state: SessionState, settings: RenderSettings) -> str:
    """Document name on the left, rule filling the rest of the width."""
    theme = settings.theme
    name = state.selected_document.name if state.selected_document is not None else ""
    title = clip_ansi_line(theme.header.render(name), state.terminal_width)
    return title + rule(theme, state.terminal_width - display_width(title))


def footer_lines(state: SessionState, settings: RenderSettings) -> list[str]:
    """Right-aligned short help, then a rule ending in the scroll percentage."""
    theme = settings.theme
    width = state.terminal_width
    help_line = align_right(short_help(SHORT_HELP_ACTIONS, theme, width), width)
    percent = round(state.viewport.scroll_percent() * 100)
    info = clip_ansi_line(theme.footer.render(f"{percent:3d}%"), width)
    return [help_line, rule(theme, width - display_width(info)) + info]


def content_frame(state: SessionState, settings: RenderSettings) -> str:
    width = state.terminal_width
    body = [clip_ansi_line(line, width) for line in state.viewport.visible_lines()]
    return "\n".join([header_line(state, settings), *body, *footer_lines(state, settings)])


def banner_lines(state: SessionState, settings: RenderSettings) -> list[str]:
    """Title bar, logo and QR art side by side, then the wrapped intro text."""
    theme = settings.theme
    width = state.terminal_width
    lines = [clip_ansi_line(theme.banner.render(settings.banner_title), width)]
    art = join_horizontal(state.decor.logo, state.decor.qr, gap=2)
    if art:
        lines.extend(clip_ansi_line(line, width) for line in art.split("\n"))
    if settings.intro_text:
        lines.append("")
        lines.extend(theme.intro.render(line) for line in build_screen_lines(settings.intro_text, max(1, width)))
    lines.append("")
    return lines


def list_entry_capacity(state: SessionState, settings: RenderSettings) -> int:
    """Return how many document rows fit below the banner (at least one)."""
    available = state.terminal_height - LIST_FOOTER_ROWS - len(banner_lines(state, settings))
    if available < MIN_LIST_ROWS:
        # Banner gets cut instead; keep a few entries visible.
        available = min(MIN_LIST_ROWS, state.terminal_height - LIST_FOOTER_ROWS)
    return max(1, available)


def entry_line(state: SessionState, settings: RenderSettings, index: int) -> str:
    theme = settings.theme
    description = state.documents[index].description
    if index == state.cursor:
        text = theme.entry_selected.render(f"{theme.entry_marker}{description}")
    else:
        text = theme.entry.render(f"{' ' * display_width(theme.entry_marker)}{description}")
    return clip_ansi_line(text, state.terminal_width)


def list_frame(state: SessionState, settings: RenderSettings) -> str:
    """Banner, windowed document entries, then the help hint.

    When the banner and entries do not both fit, the banner is cut from the
    bottom so the selected entry and the help hint stay on screen.
    """
    theme = settings.theme
    height = max(1, state.terminal_height)
    capacity = list_entry_capacity(state, settings)
    count = len(state.documents)
    if count == 0:
        entries = [clip_ansi_line(theme.intro.render(EMPTY_LIST_TEXT), state.terminal_width)]
    else:
        start = max(0, min(state.list_offset, count - capacity))
        if state.cursor < start:
            start = state.cursor
        elif state.cursor >= start + capacity:
            start = state.cursor - capacity + 1
        entries = [entry_line(state, settings, idx) for idx in range(start, min(count, start + capacity))]

    hint = align_right(short_help(LIST_HELP_ACTIONS, theme, state.terminal_width), state.terminal_width)
    banner = banner_lines(state, settings)
    banner = banner[: max(0, height - LIST_FOOTER_ROWS - len(entries))]
    lines = [*banner, *entries, hint]
    return "\n".join(lines[:height])


def compose_frame(state: SessionState, settings: RenderSettings) -> str:
    """Return the full frame for the session's current view."""
    if not state.ready:
        return INITIALIZING_TEXT
    if state.view is ViewState.CONTENT:
        return content_frame(state, settings)
    return list_frame(state, settings)


__all__ = [
    "CONTENT_FOOTER_ROWS",
    "CONTENT_HEADER_ROWS",
    "RenderSettings",
    "banner_lines",
    "chrome_heights",
    "compose_frame",
    "content_frame",
    "footer_lines",
    "header_line",
    "list_entry_capacity",
    "list_frame",
    "viewport_height_for",
]
