"""Key codes, modifier bitsets, and the keybind table.

Keybinds are written as plus-separated shorthand such as ``ctrl+n`` or
``shift+tab``. Parsing happens once while loading configuration; the state
machine only ever sees ``KeyPattern`` values.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields


class KeybindError(ValueError):
    """Raised when keybind shorthand cannot be parsed."""


class KeyCode(enum.Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    ENTER = "enter"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    PAGE_UP = "pageup"
    PAGE_DOWN = "pagedown"
    TAB = "tab"
    BACK_TAB = "backtab"
    DELETE = "delete"
    INSERT = "insert"
    ESC = "esc"
    F = "f"


class Modifiers(enum.IntFlag):
    NONE = 0
    SHIFT = 1
    CONTROL = 2
    ALT = 4


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key press.

    ``char`` is set for ``KeyCode.CHAR`` events and ``number`` for function
    keys; both stay at their defaults otherwise.
    """

    code: KeyCode
    modifiers: Modifiers = Modifiers.NONE
    char: str = ""
    number: int = 0


@dataclass(frozen=True)
class KeyPattern:
    code: KeyCode
    modifiers: Modifiers = Modifiers.NONE
    char: str = ""
    number: int = 0

    def matches(self, event: KeyEvent) -> bool:
        """Return whether ``event`` triggers this pattern.

        Back-tab is folded onto tab so one binding covers both directions, and
        the modifier set must be identical.
        """
        code = KeyCode.TAB if event.code is KeyCode.BACK_TAB else event.code
        if code is not self.code or event.modifiers != self.modifiers:
            return False
        if code is KeyCode.CHAR:
            return event.char.lower() == self.char
        if code is KeyCode.F:
            return event.number == self.number
        return True


_MODIFIER_NAMES: dict[str, Modifiers] = {
    "shift": Modifiers.SHIFT,
    "control": Modifiers.CONTROL,
    "ctrl": Modifiers.CONTROL,
    "alt": Modifiers.ALT,
}

_KEY_NAMES: dict[str, KeyCode] = {
    "backspace": KeyCode.BACKSPACE,
    "back": KeyCode.BACKSPACE,
    "enter": KeyCode.ENTER,
    "return": KeyCode.ENTER,
    "ret": KeyCode.ENTER,
    "left": KeyCode.LEFT,
    "right": KeyCode.RIGHT,
    "up": KeyCode.UP,
    "down": KeyCode.DOWN,
    "home": KeyCode.HOME,
    "end": KeyCode.END,
    "pageup": KeyCode.PAGE_UP,
    "pgup": KeyCode.PAGE_UP,
    "pagedown": KeyCode.PAGE_DOWN,
    "pgdn": KeyCode.PAGE_DOWN,
    "tab": KeyCode.TAB,
    "delete": KeyCode.DELETE,
    "del": KeyCode.DELETE,
    "insert": KeyCode.INSERT,
    "escape": KeyCode.ESC,
    "esc": KeyCode.ESC,
}


def _parse_key_token(token: str) -> KeyPattern:
    named = _KEY_NAMES.get(token)
    if named is not None:
        return KeyPattern(named)
    if len(token) == 1:
        return KeyPattern(KeyCode.CHAR, char=token)
    if token.startswith("f"):
        try:
            number = int(token[1:])
        except ValueError as exc:
            raise KeybindError(f"invalid function key code: {token!r}") from exc
        if not 1 <= number <= 255:
            raise KeybindError(f"invalid function key code: {token!r}")
        return KeyPattern(KeyCode.F, number=number)
    raise KeybindError(f"unknown key: {token!r}")


def parse_key_pattern(text: str) -> KeyPattern:
    """Parse shorthand like ``ctrl+shift+k`` into a ``KeyPattern``.

    Tokens are trimmed and lowercased. Exactly one non-modifier key is
    required; any number of modifiers may accompany it.
    """
    if not isinstance(text, str):
        raise KeybindError(f"keybind must be a string, got {type(text).__name__}")

    modifiers = Modifiers.NONE
    key: KeyPattern | None = None
    for raw_token in text.split("+"):
        token = raw_token.strip().lower()
        if not token:
            raise KeybindError(f"empty key code in {text!r}")
        modifier = _MODIFIER_NAMES.get(token)
        if modifier is not None:
            modifiers |= modifier
            continue
        if key is not None:
            raise KeybindError(f"multiple non-modifier keys in {text!r}")
        key = _parse_key_token(token)

    if key is None:
        raise KeybindError(f"keybind must include one non-modifier key: {text!r}")
    return KeyPattern(key.code, modifiers, key.char, key.number)


def _patterns(*texts: str) -> tuple[KeyPattern, ...]:
    return tuple(parse_key_pattern(text) for text in texts)


@dataclass(frozen=True)
class Keybinds:
    """Action name -> bound key patterns.

    Field order is the dispatch priority used by the state machine.
    """

    exit: tuple[KeyPattern, ...] = ()
    submit: tuple[KeyPattern, ...] = ()
    clear: tuple[KeyPattern, ...] = ()
    delete_next: tuple[KeyPattern, ...] = ()
    delete_back: tuple[KeyPattern, ...] = ()
    input_next: tuple[KeyPattern, ...] = ()
    input_back: tuple[KeyPattern, ...] = ()
    entry_next: tuple[KeyPattern, ...] = ()
    entry_back: tuple[KeyPattern, ...] = ()
    menu_next: tuple[KeyPattern, ...] = ()
    menu_back: tuple[KeyPattern, ...] = ()

    def bound_action(self, event: KeyEvent) -> str | None:
        """Return the first action (in priority order) bound to ``event``."""
        for name in ACTION_NAMES:
            if any(pattern.matches(event) for pattern in getattr(self, name)):
                return name
        return None


ACTION_NAMES: tuple[str, ...] = tuple(field.name for field in fields(Keybinds))

DEFAULT_KEYBINDS = Keybinds(
    exit=_patterns("esc", "ctrl+c"),
    submit=_patterns("enter"),
    clear=_patterns("ctrl+u"),
    delete_next=_patterns("delete"),
    delete_back=_patterns("backspace"),
    input_next=_patterns("right"),
    input_back=_patterns("left"),
    entry_next=_patterns("down", "ctrl+n"),
    entry_back=_patterns("up", "ctrl+p"),
    menu_next=_patterns("tab"),
    menu_back=_patterns("shift+tab"),
)


def keybinds_from_mapping(
    overrides: Mapping[str, Iterable[str]],
    base: Keybinds = DEFAULT_KEYBINDS,
) -> Keybinds:
    """Return ``base`` with actions replaced by parsed ``overrides``.

    Each override value is a list of shorthand strings; a bare string is
    accepted as a one-element list.
    """
    replaced: dict[str, tuple[KeyPattern, ...]] = {}
    for name, raw_patterns in overrides.items():
        if name not in ACTION_NAMES:
            raise KeybindError(f"unknown keybind action: {name!r}")
        if isinstance(raw_patterns, str):
            raw_patterns = [raw_patterns]
        elif not isinstance(raw_patterns, (list, tuple)):
            raise KeybindError(f"keybind {name!r} must be a list of strings")
        replaced[name] = tuple(parse_key_pattern(text) for text in raw_patterns)

    values = {name: getattr(base, name) for name in ACTION_NAMES}
    values.update(replaced)
    return Keybinds(**values)


__all__ = [
    "ACTION_NAMES",
    "DEFAULT_KEYBINDS",
    "KeyCode",
    "KeyEvent",
    "KeyPattern",
    "KeybindError",
    "Keybinds",
    "Modifiers",
    "keybinds_from_mapping",
    "parse_key_pattern",
]
