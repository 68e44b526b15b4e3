"""Picker theme: named style tokens resolved to ANSI SGR strings.

Config styles are ``{"fg": ..., "bg": ..., "attrs": ...}`` objects. Colors
are pygments ANSI color names such as ``ansibrightcyan``, or CSS colors
(``#rgb``, ``#rrggbb``, or a name like ``orange``) rendered as true color.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace

import webcolors
from pygments.formatters.terminal256 import EscapeSequence
from pygments.style import ansicolors

RESET = "\033[0m"

_EXTRA_ATTRIBUTE_SGR = {
    "dim": "\033[2m",
    "hidden": "\033[8m",
}
_ATTRIBUTE_NAMES = frozenset({"bold", "dim", "italic", "underlined", "hidden"})


class ThemeError(ValueError):
    """Raised when a configured style cannot be converted."""


@dataclass(frozen=True)
class PickerTheme:
    """Semantic SGR palette used by the renderer."""

    overflow: str
    prompt: str
    input: str
    entry_name: str
    entry_value: str
    entry_match: str
    entry_hidden: str
    entry_cursor: str
    entry_cursor_match: str
    menu_name: str
    menu_cursor: str
    reset: str = RESET


STYLE_NAMES: tuple[str, ...] = tuple(field.name for field in fields(PickerTheme) if field.name != "reset")

DEFAULT_THEME = PickerTheme(
    overflow="\033[2;38;5;250m",
    prompt="\033[1;38;5;81m",
    input="\033[38;5;255m",
    entry_name="\033[38;5;252m",
    entry_value="\033[2;38;5;109m",
    entry_match="\033[1;38;5;214m",
    entry_hidden="\033[2;38;5;242m",
    entry_cursor="\033[7;38;5;255m",
    entry_cursor_match="\033[1;7;38;5;214m",
    menu_name="\033[2;38;5;250m",
    menu_cursor="\033[1;4;38;5;81m",
)

PLAIN_THEME = PickerTheme(
    overflow="",
    prompt="",
    input="",
    entry_name="",
    entry_value="",
    entry_match="",
    entry_hidden="",
    entry_cursor="",
    entry_cursor_match="",
    menu_name="",
    menu_cursor="",
    reset="",
)


def _css_rgb(color: str) -> tuple[int, int, int]:
    try:
        rgb = webcolors.hex_to_rgb(color) if color.startswith("#") else webcolors.name_to_rgb(color)
    except ValueError as exc:
        raise ThemeError(f"invalid color: {color!r}") from exc
    return rgb.red, rgb.green, rgb.blue


def _color_sgr(value: object, *, background: bool) -> str:
    if value is None or value == "" or value == "reset":
        return ""
    if not isinstance(value, str):
        raise ThemeError(f"color must be a string, got {value!r}")
    color = value.strip().lower()
    if color in ansicolors:
        seq = EscapeSequence(bg=color) if background else EscapeSequence(fg=color)
        return seq.color_string()
    rgb = _css_rgb(color)
    seq = EscapeSequence(bg=rgb) if background else EscapeSequence(fg=rgb)
    return seq.true_color_string()


def _attribute_names(value: object) -> list[str]:
    if value is None or value == "":
        return []
    if not isinstance(value, str):
        raise ThemeError(f"attrs must be a comma-separated string, got {value!r}")
    names = [part.strip().lower() for part in value.split(",") if part.strip()]
    for name in names:
        if name not in _ATTRIBUTE_NAMES:
            raise ThemeError(f"invalid attribute {name!r}")
    return names


def style_from_mapping(spec: Mapping[str, object]) -> str:
    """Convert one ``{"fg", "bg", "attrs"}`` style object to an SGR prefix."""
    unknown = set(spec) - {"fg", "bg", "attrs"}
    if unknown:
        raise ThemeError(f"unknown style keys: {', '.join(sorted(unknown))}")
    attrs = _attribute_names(spec.get("attrs"))
    parts = [
        _color_sgr(spec.get("fg"), background=False),
        _color_sgr(spec.get("bg"), background=True),
        EscapeSequence(
            bold="bold" in attrs,
            underline="underlined" in attrs,
            italic="italic" in attrs,
        ).color_string(),
    ]
    parts.extend(_EXTRA_ATTRIBUTE_SGR[name] for name in attrs if name in _EXTRA_ATTRIBUTE_SGR)
    return "".join(parts)


def theme_from_mapping(overrides: Mapping[str, object], base: PickerTheme = DEFAULT_THEME) -> PickerTheme:
    """Return ``base`` with the named styles replaced."""
    changes: dict[str, str] = {}
    for name, spec in overrides.items():
        if name not in STYLE_NAMES:
            raise ThemeError(f"unknown theme style: {name!r}")
        if not isinstance(spec, Mapping):
            raise ThemeError(f"theme style {name!r} must be an object")
        try:
            changes[name] = style_from_mapping(spec)
        except ThemeError as exc:
            raise ThemeError(f"theme style {name!r}: {exc}") from exc
    return replace(base, **changes)


__all__ = [
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "PickerTheme",
    "STYLE_NAMES",
    "ThemeError",
    "style_from_mapping",
    "theme_from_mapping",
]
