"""Terminal control helpers for the picker session.

Owns the raw-mode lifecycle and focus-change reporting. The picker draws on
the controlling tty so stdout stays free for the selected value.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty
from typing import TextIO

from .ansi import ERASE_SCREEN, move_to

TTY_PATH = "/dev/tty"
FOCUS_REPORTING_ON = "\033[?1004h"
FOCUS_REPORTING_OFF = "\033[?1004l"


class TerminalController:
    """Manage terminal mode transitions for one picker session."""

    def __init__(self, stdin_fd: int, output: TextIO) -> None:
        """Capture tty state and bind the input descriptor and output stream."""
        self.stdin_fd = stdin_fd
        self.output = output
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_picker_mode(self) -> None:
        """Enter raw mode, clear the screen, and turn on focus reporting."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        self.output.write(f"{ERASE_SCREEN}{FOCUS_REPORTING_ON}")
        self.output.flush()

    def disable_picker_mode(self) -> None:
        """Clear the picker, stop focus reporting, and restore tty attributes."""
        try:
            self.output.write(f"{FOCUS_REPORTING_OFF}{ERASE_SCREEN}{move_to(0, 0)}")
            self.output.flush()
        finally:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def size(self) -> tuple[int, int]:
        """Return ``(columns, rows)`` of the tty, with an 80x24 fallback."""
        try:
            size = os.get_terminal_size(self.output.fileno())
        except (OSError, ValueError):
            size = shutil.get_terminal_size((80, 24))
        return size.columns, size.lines

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with picker enter/exit calls."""
        try:
            self.enable_picker_mode()
            yield
        finally:
            self.disable_picker_mode()


@contextlib.contextmanager
def open_tty(path: str = TTY_PATH):
    """Open the controlling terminal as ``(input_fd, output_stream)``."""
    stdin_fd = os.open(path, os.O_RDONLY)
    try:
        with open(path, "w", encoding="utf-8", errors="replace") as output:
            yield stdin_fd, output
    finally:
        os.close(stdin_fd)
