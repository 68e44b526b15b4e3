"""Frame rendering for the picker.

Composes one full frame (page tabs, prompt and query, candidate list) as a
list of ANSI fragments and writes it with a single ``write`` + ``flush``.
Rendering never mutates state; write errors propagate to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .ansi import (
    CSI,
    ERASE_BELOW,
    ERASE_LINE,
    ERASE_SCREEN,
    RESTORE_CURSOR,
    SAVE_CURSOR,
    SHOW_CURSOR,
    clip_to_width,
    display_width,
    move_to,
)
from .config import Page
from .fuzzy import Candidate
from .state import InterfaceState
from .theme import PickerTheme

SPACING = 2
ROW_MENU_LINE = 0
ROW_PROMPT = 2
ROW_ENTRIES = 4
# Tab line, gap, prompt line, gap, and a bottom guard row.
RESERVED_ROWS = 5
OVERFLOW_MARKER = "+"
MIN_VALUE_COLUMNS = 4


class OutputSink(Protocol):
    def write(self, data: str) -> object: ...

    def flush(self) -> None: ...


def candidate_rows(term_rows: int) -> int:
    """Rows available to the candidate region for a terminal height."""
    return max(0, term_rows - RESERVED_ROWS)


def visible_candidate_count(term_rows: int, total: int) -> int:
    """Number of candidates actually drawn.

    When the list does not fit, the last region row shows the overflow
    indicator instead of a candidate.
    """
    rows = candidate_rows(term_rows)
    if total <= rows:
        return total
    return max(0, rows - 1)


def _render_menu_line(
    out: list[str],
    theme: PickerTheme,
    pages: Sequence[Page],
    page_index: int,
    width: int,
) -> None:
    out.append(move_to(ROW_MENU_LINE, 0))
    out.append(ERASE_LINE)
    x = 0
    for idx, page in enumerate(pages):
        if x >= width:
            break
        if idx > 0:
            gap = min(SPACING, width - x)
            out.append(" " * gap)
            x += gap
        label = clip_to_width(page.label, width - x)
        if not label:
            break
        style = theme.menu_cursor if idx == page_index else theme.menu_name
        out.append(f"{style}{label}{theme.reset}")
        x += display_width(label)


def _name_fragments(theme: PickerTheme, candidate: Candidate, name: str, selected: bool) -> list[str]:
    if candidate.match is None:
        return [theme.entry_hidden, name, theme.reset]

    matched = set(candidate.match.positions)
    plain_style = theme.entry_cursor if selected else theme.entry_name
    match_style = theme.entry_cursor_match if selected else theme.entry_match
    fragments: list[str] = []
    current_style: str | None = None
    for idx, ch in enumerate(name):
        style = match_style if idx in matched else plain_style
        if style != current_style:
            fragments.append(theme.reset)
            fragments.append(style)
            current_style = style
        fragments.append(ch)
    fragments.append(theme.reset)
    return fragments


def _value_fragments(theme: PickerTheme, candidate: Candidate, width: int, name_width: int) -> list[str]:
    """Right-align the value, truncating with a marker when it does not fit."""
    value = candidate.value
    style = theme.entry_value if candidate.match is not None else theme.entry_hidden
    remaining = width - (name_width + SPACING)
    value_width = display_width(value)

    if remaining >= value_width:
        return [f"{CSI}{width - value_width + 1}G", style, value, theme.reset]
    if remaining < MIN_VALUE_COLUMNS:
        return []

    truncated = clip_to_width(value, remaining - len(OVERFLOW_MARKER))
    total = display_width(truncated) + len(OVERFLOW_MARKER)
    return [
        f"{CSI}{width - total + 1}G",
        style,
        truncated,
        theme.reset,
        theme.overflow,
        OVERFLOW_MARKER,
        theme.reset,
    ]


def _render_candidates(
    out: list[str],
    theme: PickerTheme,
    state: InterfaceState,
    candidates: Sequence[Candidate],
    width: int,
    height: int,
) -> int:
    total = len(candidates)
    shown = visible_candidate_count(height, total)
    row = ROW_ENTRIES
    for idx in range(shown):
        candidate = candidates[idx]
        selected = state.result_cursor and idx == state.result_index
        name = clip_to_width(candidate.name, width)
        out.append(move_to(row, 0))
        out.append(ERASE_LINE)
        out.extend(_name_fragments(theme, candidate, name, selected))
        out.extend(_value_fragments(theme, candidate, width, display_width(name)))
        row += 1

    if 0 < shown < total:
        out.append(move_to(row, 0))
        out.append(ERASE_LINE)
        out.append(f"{theme.overflow}{clip_to_width(f'+{total - shown} more', width)}{theme.reset}")
        row += 1

    out.append(move_to(row, 0))
    out.append(ERASE_BELOW)
    return shown


def _render_prompt(out: list[str], theme: PickerTheme, prompt: str, state: InterfaceState, width: int) -> None:
    prompt = clip_to_width(prompt, max(0, width - 1))
    prompt_width = display_width(prompt)
    out.append(move_to(ROW_PROMPT, 0))
    out.append(ERASE_LINE)
    out.append(f"{theme.prompt}{prompt}{theme.reset}")
    out.append(SAVE_CURSOR)
    out.append(f"{theme.input}{clip_to_width(state.query, width - prompt_width)}{theme.reset}")
    out.append(RESTORE_CURSOR)
    offset = min(display_width(state.query[: state.cursor]), max(0, width - prompt_width - 1))
    if offset > 0:
        out.append(f"{CSI}{offset}C")
    out.append(SHOW_CURSOR)


def render(
    output: OutputSink,
    theme: PickerTheme,
    state: InterfaceState,
    pages: Sequence[Page],
    candidates: Sequence[Candidate],
    size: tuple[int, int],
    *,
    clear_screen: bool = False,
) -> None:
    """Draw one frame for ``state`` onto ``output``.

    ``size`` is ``(columns, rows)``. The prompt line is drawn last so the
    visible cursor ends up inside the query.
    """
    width, height = size
    page = pages[state.page_index]
    out: list[str] = []
    if clear_screen:
        out.append(ERASE_SCREEN)
    _render_menu_line(out, theme, pages, state.page_index, width)
    _render_candidates(out, theme, state, candidates, width, height)
    _render_prompt(out, theme, page.prompt, state, width)
    output.write("".join(out))
    output.flush()


__all__ = [
    "OutputSink",
    "RESERVED_ROWS",
    "ROW_ENTRIES",
    "ROW_MENU_LINE",
    "ROW_PROMPT",
    "SPACING",
    "candidate_rows",
    "render",
    "visible_candidate_count",
]
