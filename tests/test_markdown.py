"""Markdown rendering through Rich."""

from __future__ import annotations

import unittest
from unittest import mock

from termdocs import markdown as markdown_mod
from termdocs.ansi import display_width, strip_ansi
from termdocs.errors import MarkdownRenderError
from termdocs.markdown import code_style_for_theme, render_markdown

SAMPLE = "# Title\n\n* item **bold**\n\nSome *emphasis* and `code`.\n"


class RenderMarkdownTests(unittest.TestCase):
    def test_markup_is_rendered_not_shown(self) -> None:
        rendered = render_markdown(SAMPLE, 60, "dark")
        plain = strip_ansi(rendered)
        self.assertIn("\x1b[", rendered)
        self.assertIn("Title", plain)
        self.assertIn("item bold", plain)
        self.assertNotIn("# Title", plain)
        self.assertNotIn("**", plain)
        self.assertNotIn("*emphasis*", plain)

    def test_light_theme_renders_markup(self) -> None:
        plain = strip_ansi(render_markdown(SAMPLE, 60, "light"))
        self.assertIn("emphasis", plain)
        self.assertNotIn("**", plain)

    def test_output_is_wrapped_to_width(self) -> None:
        text = " ".join(["wrapped"] * 40)
        rendered = render_markdown(text, 24, "dark")
        lines = rendered.rstrip("\n").split("\n")
        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertLessEqual(display_width(line), 24)

    def test_notty_returns_plain_source(self) -> None:
        self.assertEqual(render_markdown(SAMPLE, 60, "notty"), SAMPLE)

    def test_control_bytes_are_neutralised(self) -> None:
        self.assertEqual(render_markdown("clear\x1b[2J\n", 60, "notty"), "clear\\x1b[2J\n")
        self.assertNotIn("\x1b[2J", render_markdown("clear\x1b[2J\n", 60, "dark"))

    def test_unknown_style_raises(self) -> None:
        with self.assertRaises(MarkdownRenderError):
            render_markdown(SAMPLE, 60, "no-such-style")

    def test_renderer_failure_raises(self) -> None:
        with mock.patch.object(markdown_mod, "Markdown", side_effect=ValueError("broken")):
            with self.assertRaises(MarkdownRenderError):
                render_markdown(SAMPLE, 60, "dark")

    def test_theme_names_map_to_code_styles(self) -> None:
        self.assertEqual(code_style_for_theme("dark"), "monokai")
        self.assertEqual(code_style_for_theme("light"), "default")
        self.assertEqual(code_style_for_theme("native"), "native")


if __name__ == "__main__":
    unittest.main()
