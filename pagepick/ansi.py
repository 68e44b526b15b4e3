"""Terminal cell measurement for picker text.

Names, values, and queries are plain text (no escape sequences); these
helpers only account for wide and combining characters.
"""

from __future__ import annotations

import unicodedata

CSI = "\033["
SAVE_CURSOR = "\0337"
RESTORE_CURSOR = "\0338"
ERASE_SCREEN = f"{CSI}2J"
ERASE_LINE = f"{CSI}2K"
ERASE_BELOW = f"{CSI}J"
SHOW_CURSOR = f"{CSI}?25h"


def char_display_width(ch: str) -> int:
    """Return terminal column width for one character.

    Combining marks and control characters consume no columns, East Asian
    wide/fullwidth characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.category(ch) in {"Cc", "Cf"}:
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    return sum(char_display_width(ch) for ch in text)


def clip_to_width(text: str, max_cols: int) -> str:
    """Return the longest prefix of ``text`` that fits in ``max_cols`` cells."""
    if max_cols <= 0:
        return ""
    col = 0
    for idx, ch in enumerate(text):
        w = char_display_width(ch)
        if col + w > max_cols:
            return text[:idx]
        col += w
    return text


def move_to(row: int, col: int) -> str:
    """Absolute cursor move using zero-based ``row``/``col``."""
    return f"{CSI}{row + 1};{col + 1}H"
