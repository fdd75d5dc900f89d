"""Scrollable window over rendered document lines.

Tracks the vertical offset into the content and the visible span. All
mutators clamp so ``0 <= y_offset <= max(0, content_line_count - height)``.
"""

from __future__ import annotations

from collections.abc import Sequence


class Viewport:
    """Vertical viewport with clamped scrolling and padded visible rows."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.y_offset = 0
        self._lines: list[str] = []

    @property
    def content_line_count(self) -> int:
        return len(self._lines)

    @property
    def max_y_offset(self) -> int:
        return max(0, self.content_line_count - self.height)

    def _clamp(self) -> None:
        self.y_offset = max(0, min(self.y_offset, self.max_y_offset))

    def set_content(self, lines: Sequence[str]) -> None:
        """Replace content lines and clamp the current offset into range."""
        self._lines = list(lines)
        self._clamp()

    def resize(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._clamp()

    def scroll_to_top(self) -> None:
        self.y_offset = 0

    def scroll_to_bottom(self) -> None:
        self.y_offset = self.max_y_offset

    def scroll_by(self, delta: int) -> None:
        self.y_offset += delta
        self._clamp()

    def page_down(self) -> None:
        self.scroll_by(max(1, self.height))

    def page_up(self) -> None:
        self.scroll_by(-max(1, self.height))

    def half_page_down(self) -> None:
        self.scroll_by(max(1, self.height // 2))

    def half_page_up(self) -> None:
        self.scroll_by(-max(1, self.height // 2))

    def scroll_percent(self) -> float:
        """Return scroll position as a fraction in ``[0, 1]``.

        Content that fits entirely inside the viewport reports ``0``.
        """
        if self.content_line_count <= self.height:
            return 0.0
        percent = self.y_offset / max(1, self.content_line_count - self.height)
        return max(0.0, min(1.0, percent))

    def visible_lines(self) -> list[str]:
        """Return exactly ``height`` rows starting at ``y_offset``."""
        rows = self._lines[self.y_offset : self.y_offset + self.height]
        if len(rows) < self.height:
            rows.extend([""] * (self.height - len(rows)))
        return rows
