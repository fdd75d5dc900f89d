"""UI theme definitions and selection helpers.

Themes are immutable ANSI palettes for the chrome around documents (banner,
list entries, header/footer rules, help). Markdown colouring is a separate
setting carried as ``markdown_style`` and handed to the markdown renderer.
A theme is resolved once at process start and shared read-only by sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Style:
    """One text style, rendered as a single SGR sequence."""

    fg: str | None = None
    bg: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    reverse: bool = False
    padding: int = 0

    def sgr(self) -> str:
        params: list[str] = []
        if self.bold:
            params.append("1")
        if self.italic:
            params.append("3")
        if self.underline:
            params.append("4")
        if self.reverse:
            params.append("7")
        if self.fg:
            params.append("38;" + _color_params(self.fg))
        if self.bg:
            params.append("48;" + _color_params(self.bg))
        if not params:
            return ""
        return f"\033[{';'.join(params)}m"

    def render(self, text: str) -> str:
        """Apply padding and style to ``text``; empty styles add no escapes."""
        pad = " " * self.padding
        body = f"{pad}{text}{pad}"
        prefix = self.sgr()
        if not prefix:
            return body
        return f"{prefix}{body}\033[0m"


def _color_params(color: str) -> str:
    """Translate ``#rrggbb`` or a 256-colour index into SGR colour parameters."""
    if color.startswith("#") and len(color) == 7:
        r = int(color[1:3], 16)
        g = int(color[3:5], 16)
        b = int(color[5:7], 16)
        return f"2;{r};{g};{b}"
    return f"5;{int(color)}"


def derive_style(base: Style, **overrides: object) -> Style:
    """Return a copy of ``base`` with ``overrides`` applied."""
    return replace(base, **overrides)


@dataclass(frozen=True)
class Theme:
    """Semantic palette used by the frame composer."""

    name: str
    markdown_style: str
    rule_char: str
    rule: Style
    header: Style
    footer: Style
    banner: Style
    intro: Style
    entry: Style
    entry_selected: Style
    entry_marker: str
    help_key: Style
    help_desc: Style
    help_separator: Style
    error: Style


def _build_dark_theme() -> Theme:
    accent = "#fcd34d"
    header = Style(fg="#1f2937", bg=accent, bold=True, padding=1)
    return Theme(
        name="dark",
        markdown_style="dark",
        rule_char="─",
        rule=Style(fg=accent),
        header=header,
        footer=derive_style(header, bold=False),
        banner=Style(fg="#1f2937", bg=accent, bold=True),
        intro=Style(fg="252"),
        entry=Style(fg="250"),
        entry_selected=Style(fg=accent, bold=True),
        entry_marker="> ",
        help_key=Style(fg="245"),
        help_desc=Style(fg="240"),
        help_separator=Style(fg="238"),
        error=Style(fg="196"),
    )


def _build_light_theme() -> Theme:
    accent = "#b45309"
    header = Style(fg="#ffffff", bg=accent, bold=True, padding=1)
    return Theme(
        name="light",
        markdown_style="light",
        rule_char="─",
        rule=Style(fg=accent),
        header=header,
        footer=derive_style(header, bold=False),
        banner=Style(fg="#ffffff", bg=accent, bold=True),
        intro=Style(fg="236"),
        entry=Style(fg="240"),
        entry_selected=Style(fg=accent, bold=True),
        entry_marker="> ",
        help_key=Style(fg="242"),
        help_desc=Style(fg="246"),
        help_separator=Style(fg="250"),
        error=Style(fg="160"),
    )


def _build_plain_theme() -> Theme:
    plain = Style()
    return Theme(
        name="notty",
        markdown_style="notty",
        rule_char="-",
        rule=plain,
        header=Style(padding=1),
        footer=Style(padding=1),
        banner=plain,
        intro=plain,
        entry=plain,
        entry_selected=Style(reverse=True),
        entry_marker="> ",
        help_key=plain,
        help_desc=plain,
        help_separator=plain,
        error=plain,
    )


DARK_THEME = _build_dark_theme()
LIGHT_THEME = _build_light_theme()
PLAIN_THEME = _build_plain_theme()

_THEMES: dict[str, Theme] = {
    DARK_THEME.name: DARK_THEME,
    LIGHT_THEME.name: LIGHT_THEME,
    PLAIN_THEME.name: PLAIN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to ``dark``."""
    if not name:
        return DARK_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DARK_THEME.name


def resolve_theme(name: str | None) -> Theme:
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "Style",
    "Theme",
    "DARK_THEME",
    "LIGHT_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "derive_style",
    "normalize_theme_name",
    "resolve_theme",
]
