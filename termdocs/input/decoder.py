"""Incremental decoding of raw terminal input bytes into key tokens.

Remote input arrives in arbitrary chunks, so escape sequences may be split
across reads. ``KeyDecoder`` keeps an incomplete tail pending until more
bytes arrive or the reader's escape timeout fires and calls :meth:`flush`.
"""

from __future__ import annotations

import codecs

ESC_SEQUENCE_TIMEOUT_MS = 25

_CONTROL_KEYS: dict[str, str] = {
    "\r": "ENTER",
    "\n": "ENTER",
    "\t": "TAB",
    "\x7f": "BACKSPACE",
    "\x08": "BACKSPACE",
    "\x03": "CTRL_C",
    "\x04": "CTRL_D",
    "\x15": "CTRL_U",
}

_CSI_FINAL_KEYS: dict[str, str] = {
    "A": "UP",
    "B": "DOWN",
    "C": "RIGHT",
    "D": "LEFT",
    "H": "HOME",
    "F": "END",
}

_CSI_TILDE_KEYS: dict[str, str] = {
    "1": "HOME",
    "3": "DELETE",
    "4": "END",
    "5": "PGUP",
    "6": "PGDN",
    "7": "HOME",
    "8": "END",
}

MAX_SEQUENCE_LEN = 64


def _decode_sgr_mouse(params: str, final: str) -> str:
    """Translate an SGR mouse report into a wheel token or ``MOUSE``."""
    try:
        btn_s, col_s, row_s = params.split(";")
        btn = int(btn_s)
        int(col_s)
        int(row_s)
    except ValueError:
        return "MOUSE"
    if btn & 0b0100_0000 and final == "M":
        if btn & 0b11 == 0:
            return "MOUSE_WHEEL_UP"
        if btn & 0b11 == 1:
            return "MOUSE_WHEEL_DOWN"
    return "MOUSE"


class KeyDecoder:
    """Stateful byte-to-key decoder for one connection."""

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def feed(self, data: bytes) -> list[str]:
        """Decode ``data`` and return every complete key token it finishes."""
        self._pending += self._utf8.decode(data)
        keys: list[str] = []
        while self._pending:
            key, consumed = self._parse(self._pending)
            if consumed == 0:
                break
            self._pending = self._pending[consumed:]
            if key:
                keys.append(key)
        return keys

    def flush(self) -> list[str]:
        """Resolve a stalled escape prefix once no more bytes are coming."""
        if not self._pending:
            return []
        pending = self._pending
        self._pending = ""
        keys = ["ESC"]
        rest = pending[1:]
        if rest:
            keys.extend(self.feed(rest.encode("utf-8")))
            keys.extend(self.flush())
        return keys

    def _parse(self, text: str) -> tuple[str, int]:
        """Return ``(key, consumed)``; ``consumed == 0`` means wait for more."""
        ch = text[0]
        if ch != "\x1b":
            if ch in _CONTROL_KEYS:
                consumed = 1
                if ch == "\r" and text[1:2] == "\n":
                    consumed = 2
                return _CONTROL_KEYS[ch], consumed
            if ord(ch) < 32:
                return "", 1
            return ch, 1

        if len(text) == 1:
            return "", 0
        intro = text[1]
        if intro == "\x1b":
            return "ESC", 1
        if intro == "O":
            if len(text) < 3:
                return "", 0
            key = _CSI_FINAL_KEYS.get(text[2])
            if key is None:
                return "ESC", 1
            return key, 3
        if intro != "[":
            # Alt+key: report the bare ESC and let the key decode on its own.
            return "ESC", 1

        idx = 2
        while idx < len(text) and idx < MAX_SEQUENCE_LEN:
            final = text[idx]
            if "@" <= final <= "~":
                params = text[2:idx]
                return self._csi_key(params, final), idx + 1
            idx += 1
        if idx >= MAX_SEQUENCE_LEN:
            return "", idx
        return "", 0

    @staticmethod
    def _csi_key(params: str, final: str) -> str:
        if params.startswith("<") and final in {"M", "m"}:
            return _decode_sgr_mouse(params[1:], final)
        if final == "~":
            return _CSI_TILDE_KEYS.get(params.split(";", 1)[0], "")
        # Modified arrows (``1;5A``) decode to their base key.
        return _CSI_FINAL_KEYS.get(final, "")
