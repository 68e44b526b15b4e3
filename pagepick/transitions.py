"""Key event -> interface state transitions.

Every handler takes the current ``InterfaceState`` and returns a new one;
nothing here touches the terminal. ``transition`` picks the handler for the
first bound action in priority order and falls back to text insertion.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

from .keybinds import KeyCode, KeyEvent, Keybinds
from .state import Action, InterfaceState


class TransitionError(RuntimeError):
    """Raised when a key cannot be applied to the current state."""


StateHandler = Callable[[InterfaceState], InterfaceState]


def _exit(state: InterfaceState) -> InterfaceState:
    return replace(state, action=Action.EXIT)


def _submit(state: InterfaceState) -> InterfaceState:
    return replace(state, action=Action.SUBMIT)


def _clear(state: InterfaceState) -> InterfaceState:
    return replace(state, query="", cursor=0, result_cursor=False, result_index=0)


def _delete_next(state: InterfaceState) -> InterfaceState:
    query = state.query[: state.cursor] + state.query[state.cursor + 1 :]
    return replace(state, query=query, result_cursor=False, result_index=0)


def _delete_back(state: InterfaceState) -> InterfaceState:
    if state.cursor == 0:
        return state
    cursor = state.cursor - 1
    query = state.query[:cursor] + state.query[state.cursor :]
    return replace(state, query=query, cursor=cursor, result_cursor=False, result_index=0)


def _input_next(state: InterfaceState) -> InterfaceState:
    return replace(state, cursor=min(len(state.query), state.cursor + 1))


def _input_back(state: InterfaceState) -> InterfaceState:
    return replace(state, cursor=max(0, state.cursor - 1))


def _entry_next(state: InterfaceState) -> InterfaceState:
    if state.result_count == 0:
        return state
    index = (state.result_index + 1) % state.result_count if state.result_cursor else 0
    return replace(state, result_cursor=True, result_index=index)


def _entry_back(state: InterfaceState) -> InterfaceState:
    if state.result_count == 0:
        return state
    if state.result_cursor and state.result_index != 0:
        index = (state.result_index - 1) % state.result_count
    else:
        index = state.result_count - 1
    return replace(state, result_cursor=True, result_index=index)


def _switch_page(state: InterfaceState, step: int) -> InterfaceState:
    if state.page_count == 0:
        raise TransitionError("zero menus")
    return replace(
        state,
        query="",
        cursor=0,
        result_cursor=False,
        result_index=0,
        page_index=(state.page_index + step) % state.page_count,
    )


def _menu_next(state: InterfaceState) -> InterfaceState:
    return _switch_page(state, 1)


def _menu_back(state: InterfaceState) -> InterfaceState:
    return _switch_page(state, -1)


ACTION_HANDLERS: dict[str, StateHandler] = {
    "exit": _exit,
    "submit": _submit,
    "clear": _clear,
    "delete_next": _delete_next,
    "delete_back": _delete_back,
    "input_next": _input_next,
    "input_back": _input_back,
    "entry_next": _entry_next,
    "entry_back": _entry_back,
    "menu_next": _menu_next,
    "menu_back": _menu_back,
}


def insert_character(event: KeyEvent, state: InterfaceState) -> InterfaceState | None:
    """Insert a typed character at the cursor.

    Only plain or shift-only character events qualify; anything else returns
    ``None`` so the caller can decide what an unhandled key means.
    """
    if event.code is not KeyCode.CHAR or not event.char or event.modifiers > 1:
        return None
    if not event.char.isprintable():
        return None
    cursor = min(state.cursor, len(state.query))
    query = state.query[:cursor] + event.char + state.query[cursor:]
    return replace(
        state,
        query=query,
        cursor=cursor + len(event.char),
        result_cursor=False,
        result_index=0,
    )


def transition(
    keybinds: Keybinds,
    event: KeyEvent,
    state: InterfaceState,
    *,
    strict: bool = False,
) -> InterfaceState:
    """Apply one key event and return the next state.

    Unbound keys that are not printable input leave ``state`` unchanged, or
    raise ``TransitionError`` when ``strict`` is set.
    """
    action = keybinds.bound_action(event)
    if action is not None:
        return ACTION_HANDLERS[action](state)

    inserted = insert_character(event, state)
    if inserted is not None:
        return inserted
    if strict:
        raise TransitionError(f"unhandled key event: {event!r}")
    return state
