"""Decorative banner art produced by external programs.

``catimg`` turns the logo image into coloured block characters and
``qrencode`` draws the community-link QR code. Both are pure with respect to
their arguments, so results are computed once per process and shared.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path

from .errors import DecorError

logger = logging.getLogger(__name__)

DECOR_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class DecorArt:
    logo: str
    qr: str


EMPTY_DECOR = DecorArt(logo="", qr="")

_DECOR_CACHE: dict[tuple[str, int, str, int], DecorArt] = {}
_DECOR_CACHE_LOCK = threading.Lock()


def pad_block(text: str, padding: int) -> str:
    """Indent every line of ``text`` by ``padding`` spaces."""
    prefix = " " * max(0, padding)
    return "\n".join(prefix + line for line in text.split("\n"))


def _run(argv: list[str]) -> str:
    try:
        completed = subprocess.run(
            argv,
            check=True,
            capture_output=True,
            timeout=DECOR_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as exc:
        raise DecorError(f"{argv[0]} is not installed") from exc
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.decode("utf-8", errors="replace").strip() if exc.stderr else ""
        raise DecorError(f"{argv[0]} exited with status {exc.returncode}: {stderr}") from exc
    except (subprocess.TimeoutExpired, OSError) as exc:
        raise DecorError(f"failed to run {argv[0]}: {exc}") from exc
    return completed.stdout.decode("utf-8", errors="replace").rstrip("\n")


def run_catimg(image_path: Path | str, height: int, padding: int) -> str:
    """Render ``image_path`` as terminal art ``height`` rows tall."""
    return pad_block(_run(["catimg", str(image_path), "-H", str(height)]), padding)


def run_qrencode(url: str, padding: int) -> str:
    """Render ``url`` as a UTF-8 QR code with a two-module margin."""
    return pad_block(_run(["qrencode", "-m", "2", "-t", "utf8", url]), padding)


def load_decor(logo_path: Path | str, logo_height: int, qr_url: str, padding: int) -> DecorArt:
    """Return cached banner art, running the external programs on first use.

    Raises :class:`DecorError` when either program fails; failures are not
    cached so a later session retries.
    """
    key = (str(logo_path), logo_height, qr_url, padding)
    with _DECOR_CACHE_LOCK:
        cached = _DECOR_CACHE.get(key)
        if cached is not None:
            return cached
        art = DecorArt(
            logo=run_catimg(logo_path, logo_height, padding),
            qr=run_qrencode(qr_url, padding),
        )
        _DECOR_CACHE[key] = art
        logger.info("generated banner art for %s", logo_path)
        return art


def clear_decor_cache() -> None:
    with _DECOR_CACHE_LOCK:
        _DECOR_CACHE.clear()
