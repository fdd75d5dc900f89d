"""Session state machine: navigation, document loading and layout."""

from __future__ import annotations

import unittest

from termdocs.ansi import strip_ansi
from termdocs.documents import Document
from termdocs.errors import DocumentError, MarkdownRenderError
from termdocs.input.key_registry import Action
from termdocs.render import RenderSettings
from termdocs.session import READ_ERROR_TEXT, RENDER_ERROR_TEXT, Session
from termdocs.state import ViewState
from termdocs.theme import PLAIN_THEME


def _docs(*names: str) -> list[Document]:
    return [Document(name=name, description=f"About {name}") for name in names]


class _FakeStore:
    def __init__(self, texts: dict[str, str]) -> None:
        self.texts = texts
        self.reads: list[str] = []

    def read(self, name: str) -> str:
        self.reads.append(name)
        if name not in self.texts:
            raise DocumentError(f"no such document: {name}")
        return self.texts[name]


def _identity(text: str, width: int) -> str:
    return text


def _session(
    names: tuple[str, ...] = ("a.md", "b.md"),
    texts: dict[str, str] | None = None,
    render=_identity,
    width: int = 80,
    height: int = 24,
) -> tuple[Session, _FakeStore]:
    if texts is None:
        texts = {name: f"About {name}\n---\n# {name}\nbody" for name in names}
    store = _FakeStore(texts)
    session = Session.create(
        _docs(*names),
        width,
        height,
        RenderSettings(theme=PLAIN_THEME),
        store.read,
        render,
    )
    session.resize(width, height)
    return session, store


class ListNavigationTests(unittest.TestCase):
    def test_down_down_enter_back_walkthrough(self) -> None:
        session, _store = _session()
        state = session.state
        self.assertEqual(state.cursor, 0)
        session.handle_key("DOWN")
        self.assertEqual(state.cursor, 1)
        session.handle_key("DOWN")
        self.assertEqual(state.cursor, 1)
        session.handle_key("ENTER")
        self.assertIs(state.view, ViewState.CONTENT)
        self.assertEqual(state.selected_document.name, "b.md")
        session.handle_key("ESC")
        self.assertIs(state.view, ViewState.LIST)
        self.assertEqual(state.cursor, 1)

    def test_up_clamps_at_zero(self) -> None:
        session, _store = _session()
        session.handle_key("UP")
        session.handle_key("k")
        self.assertEqual(session.state.cursor, 0)

    def test_vim_keys_move_cursor(self) -> None:
        session, _store = _session(names=("a.md", "b.md", "c.md"))
        session.handle_key("j")
        session.handle_key("j")
        session.handle_key("k")
        self.assertEqual(session.state.cursor, 1)

    def test_empty_listing_ignores_navigation(self) -> None:
        session, store = _session(names=())
        for key in ("DOWN", "UP", "ENTER", "ESC", "g"):
            self.assertFalse(session.handle_key(key))
        self.assertEqual(session.state.cursor, 0)
        self.assertIs(session.state.view, ViewState.LIST)
        self.assertEqual(store.reads, [])

    def test_cursor_stays_in_range_for_any_key_sequence(self) -> None:
        session, _store = _session(names=("a.md", "b.md", "c.md"))
        keys = ["DOWN", "DOWN", "DOWN", "DOWN", "ENTER", "ESC", "UP", "x", "ENTER", "G", "ESC", "UP", "UP"]
        for key in keys:
            session.handle_key(key)
            self.assertTrue(0 <= session.state.cursor < 3)

    def test_quit_keys_end_session_in_both_views(self) -> None:
        session, _store = _session()
        self.assertTrue(session.handle_key("q"))
        session.handle_key("ENTER")
        self.assertTrue(session.handle_key("CTRL_C"))
        self.assertEqual(session.apply(Action.QUIT), True)

    def test_top_is_ignored_in_list_view(self) -> None:
        session, _store = _session()
        session.handle_key("DOWN")
        session.handle_key("g")
        self.assertEqual(session.state.cursor, 1)


class DocumentLoadingTests(unittest.TestCase):
    def test_enter_strips_metadata_and_renders(self) -> None:
        rendered: list[str] = []

        def render(text: str, width: int) -> str:
            rendered.append(text)
            return text.upper()

        session, store = _session(render=render)
        session.handle_key("ENTER")
        self.assertEqual(store.reads, ["a.md"])
        self.assertEqual(session.state.raw_content, "# a.md\nbody")
        self.assertEqual(rendered, ["# a.md\nbody"])
        self.assertEqual(session.state.rendered_content, "# A.MD\nBODY")

    def test_read_failure_shows_placeholder_and_still_opens(self) -> None:
        session, _store = _session(texts={})
        session.handle_key("ENTER")
        state = session.state
        self.assertIs(state.view, ViewState.CONTENT)
        self.assertEqual(state.selected_document.name, "a.md")
        self.assertEqual(state.raw_content, READ_ERROR_TEXT)
        self.assertIn(READ_ERROR_TEXT, strip_ansi(session.frame()))

    def test_render_failure_shows_placeholder(self) -> None:
        def render(text: str, width: int) -> str:
            raise MarkdownRenderError("bad input")

        session, _store = _session(render=render)
        session.handle_key("ENTER")
        self.assertIs(session.state.view, ViewState.CONTENT)
        self.assertIn(RENDER_ERROR_TEXT, strip_ansi(session.frame()))

    def test_opening_resets_scroll_to_top(self) -> None:
        long_text = "meta\n---\n" + "\n".join(f"line {idx}" for idx in range(100))
        session, _store = _session(texts={"a.md": long_text, "b.md": long_text}, height=10)
        session.handle_key("ENTER")
        session.handle_key("G")
        self.assertGreater(session.state.viewport.y_offset, 0)
        session.handle_key("ESC")
        session.handle_key("DOWN")
        session.handle_key("ENTER")
        self.assertEqual(session.state.viewport.y_offset, 0)


class ContentScrollingTests(unittest.TestCase):
    def setUp(self) -> None:
        long_text = "meta\n---\n" + "\n".join(f"line {idx}" for idx in range(100))
        self.session, _store = _session(texts={"a.md": long_text, "b.md": long_text}, height=12)
        self.session.handle_key("ENTER")
        self.viewport = self.session.state.viewport

    def test_paging_keys_scroll(self) -> None:
        self.session.handle_key("PGDN")
        self.assertEqual(self.viewport.y_offset, 9)
        self.session.handle_key("u")
        self.assertEqual(self.viewport.y_offset, 5)
        self.session.handle_key("g")
        self.assertEqual(self.viewport.y_offset, 0)

    def test_bottom_reaches_last_line(self) -> None:
        self.session.handle_key("END")
        self.assertEqual(self.viewport.y_offset, 100 - 9)
        self.assertIn("100%", self.session.frame())

    def test_mouse_wheel_scrolls(self) -> None:
        self.session.handle_key("MOUSE_WHEEL_DOWN")
        self.assertEqual(self.viewport.y_offset, 3)
        self.session.handle_key("MOUSE_WHEEL_UP")
        self.assertEqual(self.viewport.y_offset, 0)

    def test_list_keys_do_not_act_in_content_view(self) -> None:
        self.session.handle_key("DOWN")
        self.session.handle_key("ENTER")
        self.assertEqual(self.session.state.cursor, 0)
        self.assertEqual(self.viewport.y_offset, 0)


class LayoutTests(unittest.TestCase):
    def test_initial_frame_waits_for_size(self) -> None:
        session = Session.create(_docs("a.md"), 0, 0, RenderSettings(), lambda name: "", _identity)
        self.assertEqual(session.frame(), "Initializing...")
        session.resize(40, 10)
        self.assertNotEqual(session.frame(), "Initializing...")

    def test_viewport_height_tracks_resize_in_both_views(self) -> None:
        session, _store = _session(height=24)
        self.assertEqual(session.state.viewport.height, 24)
        session.handle_key("ENTER")
        self.assertEqual(session.state.viewport.height, 21)
        session.resize(80, 30)
        self.assertEqual(session.state.viewport.height, 27)
        session.handle_key("ESC")
        session.resize(80, 10)
        self.assertEqual(session.state.viewport.height, 10)
        session.handle_key("ENTER")
        self.assertEqual(session.state.viewport.height, 7)

    def test_tiny_terminal_has_empty_viewport(self) -> None:
        session, _store = _session(height=2)
        session.handle_key("ENTER")
        self.assertEqual(session.state.viewport.height, 0)
        self.assertEqual(session.state.viewport.visible_lines(), [])

    def test_width_change_rewraps_content(self) -> None:
        text = "meta\n---\n" + "w" * 50
        session, _store = _session(texts={"a.md": text, "b.md": text}, width=80)
        session.handle_key("ENTER")
        self.assertEqual(session.state.viewport.content_line_count, 1)
        session.resize(20, 24)
        self.assertEqual(session.state.viewport.content_line_count, 3)

    def test_renderer_receives_terminal_width(self) -> None:
        widths: list[int] = []

        def render(text: str, width: int) -> str:
            widths.append(width)
            return text

        session, _store = _session(render=render, width=72)
        session.handle_key("ENTER")
        session.resize(72, 40)
        session.resize(50, 40)
        session.handle_key("ESC")
        session.resize(30, 40)
        self.assertEqual(widths, [72, 50])
        session.handle_key("ENTER")
        self.assertEqual(widths, [72, 50, 30])

    def test_frame_rows_never_exceed_terminal_height(self) -> None:
        session, _store = _session(names=tuple(f"d{idx}.md" for idx in range(30)), height=9)
        for _ in range(29):
            session.handle_key("DOWN")
            self.assertLessEqual(len(session.frame().split("\n")), 9)
        self.assertIn("> About d29.md", strip_ansi(session.frame()))


if __name__ == "__main__":
    unittest.main()
