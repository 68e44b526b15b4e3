"""Main interactive loop for the picker.

Each cycle waits briefly for one terminal event, applies it to the interface
state, re-ranks the active page, consumes the pending action, and redraws
only when something visible changed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Protocol

from .config import Page
from .fuzzy import Candidate, matched_count, rank
from .input import FocusEvent, ResizeEvent, TerminalEvent
from .keybinds import KeyEvent, Keybinds
from .render import OutputSink, render, visible_candidate_count
from .state import Action, InterfaceState
from .theme import PickerTheme
from .transitions import transition

POLL_TIMEOUT_MS = 100

logger = logging.getLogger(__name__)


class PickerError(RuntimeError):
    """Raised when the loop reaches an inconsistent state."""


class EventPoller(Protocol):
    def poll(self, timeout_ms: int) -> TerminalEvent | None: ...


@dataclass(frozen=True)
class LoopOptions:
    """Behavior switches for ``run_picker``."""

    exit_on_focus_loss: bool = False
    strict_keys: bool = False
    poll_timeout_ms: int = POLL_TIMEOUT_MS


def selectable_count(query: str, candidates: Sequence[Candidate], term_rows: int) -> int:
    """Number of candidates the result cursor may visit.

    Every candidate counts for an empty query, only matches otherwise; the
    result is capped by how many candidate rows the terminal can show.
    """
    count = len(candidates) if not query else matched_count(candidates)
    return min(count, visible_candidate_count(term_rows, len(candidates)))


def _clamp_result_cursor(state: InterfaceState) -> InterfaceState:
    if state.result_count == 0:
        if state.result_cursor or state.result_index:
            return replace(state, result_cursor=False, result_index=0)
        return state
    if state.result_index >= state.result_count:
        return replace(state, result_index=state.result_count - 1)
    return state


def run_picker(
    pages: Sequence[Page],
    keybinds: Keybinds,
    theme: PickerTheme,
    events: EventPoller,
    output: OutputSink,
    size: Callable[[], tuple[int, int]],
    options: LoopOptions = LoopOptions(),
) -> str | None:
    """Run the picker until the user submits or exits.

    Returns the submitted entry's value, or ``None`` when the user exits or
    focus is lost with ``exit_on_focus_loss`` set.
    """
    if not pages:
        raise PickerError("no pages to show")

    state = InterfaceState(page_count=len(pages), action=Action.CLEAR)
    first = True
    logger.debug("picker started with %d page(s)", len(pages))

    while True:
        previous = state
        force_redraw = first
        clear_screen = False

        if not first:
            event = events.poll(options.poll_timeout_ms)
            if event is None:
                continue
            if isinstance(event, ResizeEvent):
                force_redraw = True
                clear_screen = True
            elif isinstance(event, FocusEvent):
                if not event.gained and options.exit_on_focus_loss:
                    logger.debug("focus lost, exiting")
                    return None
                continue
            elif isinstance(event, KeyEvent):
                state = transition(keybinds, event, state, strict=options.strict_keys)

        if not 0 <= state.page_index < len(pages):
            raise PickerError("invalid menu index")
        columns, rows = size()
        candidates = rank(state.query, pages[state.page_index].entries)
        state = replace(state, result_count=selectable_count(state.query, candidates, rows))
        state = _clamp_result_cursor(state)

        if state.action is Action.EXIT:
            logger.debug("exit requested")
            return None
        if state.action is Action.SUBMIT:
            if state.result_count > 0:
                index = state.result_index if state.result_cursor else 0
                if index >= len(candidates):
                    raise PickerError("selection index out of bounds")
                selection = candidates[index]
                logger.debug("submitted %r", selection.name)
                return selection.value
            state = replace(state, action=Action.NONE)
        elif state.action is Action.CLEAR:
            clear_screen = True
            state = replace(state, action=Action.NONE)

        if state == previous and not first and not force_redraw:
            continue

        render(output, theme, state, pages, candidates, (columns, rows), clear_screen=clear_screen)
        first = False
