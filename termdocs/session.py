"""Per-connection view-state machine.

A :class:`Session` owns one :class:`SessionState` and applies key actions and
resizes to it. It performs no I/O of its own: reading a document and
rendering markdown are delegated to injected callables, and their failures
degrade the content shown instead of ending the session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .ansi import build_screen_lines
from .decor import EMPTY_DECOR, DecorArt
from .documents import Document, strip_metadata
from .errors import DocumentError, MarkdownRenderError
from .input.key_registry import Action
from .input.keymap import dispatch_key
from .render import RenderSettings, compose_frame, list_entry_capacity, viewport_height_for
from .state import SessionState, ViewState

logger = logging.getLogger(__name__)

READ_ERROR_TEXT = "Error reading file"
RENDER_ERROR_TEXT = "Error parsing markdown"
WHEEL_SCROLL_LINES = 3


class Session:
    """Apply actions and resizes to one session's state and compose frames."""

    def __init__(
        self,
        state: SessionState,
        settings: RenderSettings,
        read_document: Callable[[str], str],
        render_markdown: Callable[[str, int], str],
    ) -> None:
        self.state = state
        self.settings = settings
        self._read_document = read_document
        self._render_markdown = render_markdown

    @classmethod
    def create(
        cls,
        documents: list[Document],
        width: int,
        height: int,
        settings: RenderSettings,
        read_document: Callable[[str], str],
        render_markdown: Callable[[str, int], str],
        decor: DecorArt = EMPTY_DECOR,
    ) -> Session:
        state = SessionState(
            documents=list(documents),
            terminal_width=max(0, width),
            terminal_height=max(0, height),
            decor=decor,
        )
        return cls(state, settings, read_document, render_markdown)

    # -- event entry points -------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Dispatch one key token; return ``True`` when the session should end."""
        action = dispatch_key(key, self.state.view)
        if action is None:
            return False
        return self.apply(action)

    def apply(self, action: Action) -> bool:
        """Apply ``action`` to the current view; return ``True`` on quit."""
        if action is Action.QUIT:
            return True
        if self.state.view is ViewState.LIST:
            self._apply_list_action(action)
        else:
            self._apply_content_action(action)
        return False

    def resize(self, width: int, height: int) -> None:
        """Track new terminal geometry and re-lay out the viewport for any view."""
        state = self.state
        state.terminal_width = max(0, width)
        state.terminal_height = max(0, height)
        self._layout()
        self._scroll_list_to_cursor()
        if not state.ready:
            state.ready = True
            logger.debug("session ready at %dx%d", state.terminal_width, state.terminal_height)

    def frame(self) -> str:
        return compose_frame(self.state, self.settings)

    # -- list view ----------------------------------------------------------

    def _apply_list_action(self, action: Action) -> None:
        state = self.state
        if action is Action.UP:
            state.cursor = max(0, state.cursor - 1)
        elif action is Action.DOWN:
            state.cursor = max(0, min(len(state.documents) - 1, state.cursor + 1))
        elif action is Action.ENTER:
            self.open_selected()
            return
        else:
            return
        self._scroll_list_to_cursor()

    def _scroll_list_to_cursor(self) -> None:
        state = self.state
        count = len(state.documents)
        if count == 0:
            state.cursor = 0
            state.list_offset = 0
            return
        capacity = list_entry_capacity(state, self.settings)
        if state.cursor < state.list_offset:
            state.list_offset = state.cursor
        elif state.cursor >= state.list_offset + capacity:
            state.list_offset = state.cursor - capacity + 1
        state.list_offset = max(0, min(state.list_offset, count - capacity))

    def open_selected(self) -> None:
        """Load, render and show the document under the cursor.

        The cursor is validated against the current listing on every call;
        with an empty listing this is a no-op.
        """
        state = self.state
        if not 0 <= state.cursor < len(state.documents):
            return
        document = state.documents[state.cursor]
        try:
            raw = self._read_document(document.name)
        except DocumentError as exc:
            logger.warning("failed to read document %s: %s", document.name, exc)
            state.raw_content = READ_ERROR_TEXT
            state.content_error = READ_ERROR_TEXT
        else:
            state.raw_content = strip_metadata(raw)
            state.content_error = ""
        state.selected_document = document
        state.view = ViewState.CONTENT
        self._layout(force_render=True)
        state.viewport.scroll_to_top()
        logger.debug("opened document %s", document.name)

    # -- content view -------------------------------------------------------

    def _apply_content_action(self, action: Action) -> None:
        state = self.state
        viewport = state.viewport
        if action is Action.BACK:
            state.view = ViewState.LIST
            viewport.scroll_to_top()
            self._layout()
            self._scroll_list_to_cursor()
        elif action is Action.TOP:
            viewport.scroll_to_top()
        elif action is Action.BOTTOM:
            viewport.scroll_to_bottom()
        elif action is Action.PAGE_DOWN:
            viewport.page_down()
        elif action is Action.PAGE_UP:
            viewport.page_up()
        elif action is Action.HALF_PAGE_DOWN:
            viewport.half_page_down()
        elif action is Action.HALF_PAGE_UP:
            viewport.half_page_up()
        elif action is Action.SCROLL_DOWN:
            viewport.scroll_by(WHEEL_SCROLL_LINES)
        elif action is Action.SCROLL_UP:
            viewport.scroll_by(-WHEEL_SCROLL_LINES)

    # -- layout -------------------------------------------------------------

    def _layout(self, force_render: bool = False) -> None:
        """Size the viewport for the current view and re-render content on width changes."""
        state = self.state
        state.viewport.resize(state.terminal_width, viewport_height_for(state.view, state.terminal_height))
        if state.view is ViewState.CONTENT and (force_render or state.content_width != state.terminal_width):
            self._render_content()

    def _render_content(self) -> None:
        """Render the selected document at the current width and load it into the viewport."""
        state = self.state
        width = max(1, state.terminal_width)
        state.content_width = state.terminal_width
        if state.content_error:
            rendered = self.settings.theme.error.render(state.content_error)
        else:
            try:
                rendered = self._render_markdown(state.raw_content, width)
            except MarkdownRenderError as exc:
                name = state.selected_document.name if state.selected_document is not None else ""
                logger.warning("failed to render document %s: %s", name, exc)
                rendered = self.settings.theme.error.render(RENDER_ERROR_TEXT)
        state.rendered_content = rendered
        state.viewport.set_content(build_screen_lines(rendered, width))
