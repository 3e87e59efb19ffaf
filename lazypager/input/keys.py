"""Terminal byte decoding into key tokens.

Tokens are plain strings: printable characters stand for themselves, special
keys use upper-case names such as ``ENTER``, ``PAGE_DOWN`` or ``CTRL_D``.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25

_PENDING_BYTES: list[bytes] = []

_CSI_FINAL_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}
_CSI_TILDE_KEYS = {
    "1": "HOME",
    "2": "INSERT",
    "3": "DELETE",
    "4": "END",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
    "7": "HOME",
    "8": "END",
}
_CONTROL_BYTES = {
    b"\r": "ENTER",
    b"\n": "ENTER",
    b"\t": "TAB",
    b"\x7f": "BACKSPACE",
    b"\x08": "BACKSPACE",
}


def _wait_readable(fd: int, timeout_ms: int) -> bool:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    return bool(ready)


def _read_byte(fd: int, timeout_ms: int | None = None) -> bytes:
    if _PENDING_BYTES:
        return _PENDING_BYTES.pop(0)
    if timeout_ms is not None and not _wait_readable(fd, timeout_ms):
        return b""
    return os.read(fd, 1)


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_mouse(fd: int) -> str:
    """Decode an SGR mouse report after ``ESC [ <``; only wheel events are kept."""
    payload: list[bytes] = []
    while True:
        part = _read_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if not part:
            return "ESC"
        if part in {b"M", b"m"}:
            break
        payload.append(part)
        if len(payload) > 64:
            return "ESC"
    try:
        btn_s, col_s, row_s = b"".join(payload).decode("ascii").split(";")
        btn = int(btn_s)
        col = int(col_s)
        row = int(row_s)
    except ValueError:
        return "ESC"
    if btn == 64:
        return f"MOUSE_WHEEL_UP:{col}:{row}"
    if btn == 65:
        return f"MOUSE_WHEEL_DOWN:{col}:{row}"
    return "MOUSE"


def _read_escape(fd: int) -> str:
    seq = _read_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if not seq:
        return "ESC"
    if seq == b"O":
        final = _read_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        return _CSI_FINAL_KEYS.get(final, "ESC")
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"

    first = _read_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if not first:
        return "ESC"
    if first in _CSI_FINAL_KEYS:
        return _CSI_FINAL_KEYS[first]
    if first == b"<":
        return _read_mouse(fd)
    if not first.isdigit():
        return "ESC"

    params = [first]
    while len(params) < 16:
        part = _read_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if not part:
            return "ESC"
        if part == b"~":
            number = b"".join(params).decode("ascii").split(";")[0]
            return _CSI_TILDE_KEYS.get(number, "ESC")
        if part in _CSI_FINAL_KEYS:
            # Modified arrows such as ESC [ 1 ; 2 C fold onto the plain key.
            return _CSI_FINAL_KEYS[part]
        params.append(part)
    return "ESC"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token from ``fd``; returns ``""`` on timeout or EOF."""
    ch = _read_byte(fd, timeout_ms)
    if not ch:
        return ""

    if ch in _CONTROL_BYTES:
        return _CONTROL_BYTES[ch]
    if ch == b"\x1b":
        return _read_escape(fd)
    code = ch[0]
    if 1 <= code <= 26:
        return f"CTRL_{chr(code + 64)}"
    if code < 0x20:
        return ""

    length = _utf8_length(code)
    raw = ch
    while len(raw) < length:
        more = _read_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if not more:
            break
        raw += more
    return raw.decode("utf-8", errors="replace")


def is_text_key(key: str) -> bool:
    """Return whether ``key`` is a single printable character token."""
    return len(key) == 1 and key.isprintable()


def is_named_mark_key(key: str) -> bool:
    """Return whether key is a valid single-character mark name."""
    return len(key) == 1 and key.isprintable() and not key.isspace()
