"""Banner art generation via external programs."""

from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from termdocs import decor
from termdocs.errors import DecorError


def _completed(argv: list[str], stdout: bytes) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(argv, 0, stdout=stdout, stderr=b"")


class DecorTests(unittest.TestCase):
    def setUp(self) -> None:
        decor.clear_decor_cache()
        self.addCleanup(decor.clear_decor_cache)

    def test_pad_block_indents_each_line(self) -> None:
        self.assertEqual(decor.pad_block("ab\ncd", 2), "  ab\n  cd")

    def test_commands_and_padding(self) -> None:
        def fake_run(argv, **kwargs):
            return _completed(argv, b"LOGO\n" if argv[0] == "catimg" else b"QR\n")

        with mock.patch.object(decor.subprocess, "run", side_effect=fake_run) as run:
            art = decor.load_decor("logo.jpeg", 15, "https://example.invalid", 2)

        self.assertEqual(art, decor.DecorArt(logo="  LOGO", qr="  QR"))
        argvs = [call.args[0] for call in run.call_args_list]
        self.assertEqual(
            argvs,
            [
                ["catimg", "logo.jpeg", "-H", "15"],
                ["qrencode", "-m", "2", "-t", "utf8", "https://example.invalid"],
            ],
        )

    def test_results_are_cached(self) -> None:
        with mock.patch.object(decor.subprocess, "run", side_effect=lambda argv, **kw: _completed(argv, b"x")) as run:
            first = decor.load_decor("logo.jpeg", 15, "u", 0)
            second = decor.load_decor("logo.jpeg", 15, "u", 0)
        self.assertIs(first, second)
        self.assertEqual(run.call_count, 2)

    def test_missing_program_raises_and_is_not_cached(self) -> None:
        with mock.patch.object(decor.subprocess, "run", side_effect=FileNotFoundError("catimg")):
            with self.assertRaises(DecorError):
                decor.load_decor("logo.jpeg", 15, "u", 0)
        with mock.patch.object(decor.subprocess, "run", side_effect=lambda argv, **kw: _completed(argv, b"ok")):
            self.assertEqual(decor.load_decor("logo.jpeg", 15, "u", 0).logo, "ok")

    def test_failing_program_raises(self) -> None:
        error = subprocess.CalledProcessError(1, ["qrencode"], output=b"", stderr=b"bad url")
        with mock.patch.object(decor.subprocess, "run", side_effect=error):
            with self.assertRaisesRegex(DecorError, "bad url"):
                decor.run_qrencode("u", 0)


if __name__ == "__main__":
    unittest.main()
