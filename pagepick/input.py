"""Low-level terminal input decoding.

Reads raw bytes from the tty and translates them into ``KeyEvent`` and
``FocusEvent`` values. Handles ESC-sequence timing, xterm modifier
parameters, and multi-byte UTF-8 characters. ``EventSource`` adds resize
detection on top.
"""

from __future__ import annotations

import os
import select
from collections.abc import Callable
from dataclasses import dataclass, replace

from .keybinds import KeyCode, KeyEvent, Modifiers

ESC_SEQUENCE_TIMEOUT_MS = 25
MAX_CSI_PARAM_BYTES = 16
_PENDING_BYTES: list[bytes] = []

_CSI_LETTER_KEYS: dict[bytes, KeyCode] = {
    b"A": KeyCode.UP,
    b"B": KeyCode.DOWN,
    b"C": KeyCode.RIGHT,
    b"D": KeyCode.LEFT,
    b"H": KeyCode.HOME,
    b"F": KeyCode.END,
}

_SS3_FUNCTION_KEYS: dict[bytes, int] = {b"P": 1, b"Q": 2, b"R": 3, b"S": 4}

_TILDE_KEYS: dict[int, KeyCode] = {
    1: KeyCode.HOME,
    2: KeyCode.INSERT,
    3: KeyCode.DELETE,
    4: KeyCode.END,
    5: KeyCode.PAGE_UP,
    6: KeyCode.PAGE_DOWN,
    7: KeyCode.HOME,
    8: KeyCode.END,
}

_TILDE_FUNCTION_KEYS: dict[int, int] = {
    11: 1, 12: 2, 13: 3, 14: 4, 15: 5,
    17: 6, 18: 7, 19: 8, 20: 9, 21: 10,
    23: 11, 24: 12,
}


@dataclass(frozen=True)
class FocusEvent:
    gained: bool


@dataclass(frozen=True)
class ResizeEvent:
    columns: int
    rows: int


TerminalEvent = KeyEvent | FocusEvent | ResizeEvent


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    if _PENDING_BYTES:
        return _PENDING_BYTES.pop(0)
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _xterm_modifiers(param: str) -> Modifiers:
    """Translate an xterm modifier parameter (1 + bitmask) to ``Modifiers``."""
    try:
        bits = int(param) - 1
    except ValueError:
        return Modifiers.NONE
    modifiers = Modifiers.NONE
    if bits & 1:
        modifiers |= Modifiers.SHIFT
    if bits & 2:
        modifiers |= Modifiers.ALT
    if bits & 4:
        modifiers |= Modifiers.CONTROL
    return modifiers


def _char_event(ch: str) -> KeyEvent:
    modifiers = Modifiers.SHIFT if ch.isupper() else Modifiers.NONE
    return KeyEvent(KeyCode.CHAR, modifiers, char=ch)


def _decode_utf8(fd: int, lead: bytes) -> KeyEvent | None:
    first = lead[0]
    if first >= 0xF0:
        length = 4
    elif first >= 0xE0:
        length = 3
    elif first >= 0xC0:
        length = 2
    else:
        return None
    data = bytearray(lead)
    while len(data) < length:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        data.extend(part)
    text = bytes(data).decode("utf-8", errors="replace")
    if len(text) != 1:
        return None
    return _char_event(text)


def _decode_byte(fd: int, ch: bytes) -> KeyEvent | FocusEvent | None:
    code = ch[0]
    if ch == b"\t":
        return KeyEvent(KeyCode.TAB)
    if ch in {b"\r", b"\n"}:
        return KeyEvent(KeyCode.ENTER)
    if ch in {b"\x08", b"\x7f"}:
        return KeyEvent(KeyCode.BACKSPACE)
    if ch == b"\x1b":
        return _decode_escape(fd)
    if code == 0:
        return KeyEvent(KeyCode.CHAR, Modifiers.CONTROL, char=" ")
    if code < 0x1B:
        return KeyEvent(KeyCode.CHAR, Modifiers.CONTROL, char=chr(0x60 + code))
    if code < 0x20:
        return KeyEvent(KeyCode.CHAR, Modifiers.CONTROL, char=chr(code + 0x18))
    if code < 0x80:
        return _char_event(chr(code))
    return _decode_utf8(fd, ch)


def _decode_escape(fd: int) -> KeyEvent | FocusEvent | None:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return KeyEvent(KeyCode.ESC)
    if seq == b"[":
        return _decode_csi(fd)
    if seq == b"O":
        return _decode_ss3(fd)
    if seq == b"\x1b":
        _PENDING_BYTES.append(seq)
        return KeyEvent(KeyCode.ESC)
    inner = _decode_byte(fd, seq)
    if isinstance(inner, KeyEvent):
        return replace(inner, modifiers=inner.modifiers | Modifiers.ALT)
    return inner


def _decode_ss3(fd: int) -> KeyEvent | None:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return KeyEvent(KeyCode.CHAR, Modifiers.SHIFT | Modifiers.ALT, char="O")
    number = _SS3_FUNCTION_KEYS.get(seq)
    if number is not None:
        return KeyEvent(KeyCode.F, number=number)
    key = _CSI_LETTER_KEYS.get(seq)
    if key is not None:
        return KeyEvent(key)
    _PENDING_BYTES.append(seq)
    return KeyEvent(KeyCode.CHAR, Modifiers.SHIFT | Modifiers.ALT, char="O")


def _decode_csi(fd: int) -> KeyEvent | FocusEvent | None:
    payload = bytearray()
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return KeyEvent(KeyCode.ESC)
        if 0x40 <= part[0] <= 0x7E:
            final = part
            break
        payload.extend(part)
        if len(payload) > MAX_CSI_PARAM_BYTES:
            return None

    params = payload.decode("ascii", errors="replace").split(";")
    modifiers = _xterm_modifiers(params[1]) if len(params) > 1 else Modifiers.NONE

    if final == b"I" and not payload:
        return FocusEvent(gained=True)
    if final == b"O" and not payload:
        return FocusEvent(gained=False)
    if final == b"Z":
        return KeyEvent(KeyCode.BACK_TAB, Modifiers.SHIFT)
    key = _CSI_LETTER_KEYS.get(final)
    if key is not None:
        return KeyEvent(key, modifiers)
    number = _SS3_FUNCTION_KEYS.get(final)
    if number is not None:
        return KeyEvent(KeyCode.F, modifiers, number=number)
    if final == b"~":
        try:
            code = int(params[0])
        except ValueError:
            return None
        key = _TILDE_KEYS.get(code)
        if key is not None:
            return KeyEvent(key, modifiers)
        number = _TILDE_FUNCTION_KEYS.get(code)
        if number is not None:
            return KeyEvent(KeyCode.F, modifiers, number=number)
    return None


def read_key(fd: int, timeout_ms: int | None = None) -> KeyEvent | FocusEvent | None:
    """Read and decode one key or focus event.

    Returns ``None`` on timeout, end of input, or an unrecognized sequence.
    Bytes read ahead while disambiguating ESC are kept for the next call.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None
        ch = os.read(fd, 1)
        if not ch:
            return None
    return _decode_byte(fd, ch)


class EventSource:
    """Terminal events for the interaction loop.

    A size change observed since the previous poll is reported as a
    ``ResizeEvent`` before any pending input is read.
    """

    def __init__(self, fd: int, size: Callable[[], tuple[int, int]]) -> None:
        self.fd = fd
        self._size = size
        self._last_size = size()

    def poll(self, timeout_ms: int) -> TerminalEvent | None:
        current = self._size()
        if current != self._last_size:
            self._last_size = current
            return ResizeEvent(columns=current[0], rows=current[1])
        return read_key(self.fd, timeout_ms=timeout_ms)


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "EventSource",
    "FocusEvent",
    "ResizeEvent",
    "TerminalEvent",
    "read_key",
]
