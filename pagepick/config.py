"""Launcher configuration: pages of entries, theme overrides, keybinds.

The config is a JSON object. Unlike runtime preferences it is not optional:
every problem is reported as ``ConfigError`` before the terminal is touched.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .keybinds import DEFAULT_KEYBINDS, KeybindError, Keybinds, keybinds_from_mapping
from .theme import DEFAULT_THEME, PickerTheme, ThemeError, theme_from_mapping

APP_NAME = "pagepick"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

_TOP_LEVEL_KEYS = frozenset({"pages", "theme", "keybinds"})
_PAGE_KEYS = frozenset({"order", "prompt", "entries"})

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when the config file is missing, malformed, or invalid."""


@dataclass(frozen=True)
class Entry:
    name: str
    value: str


@dataclass(frozen=True)
class Page:
    label: str
    prompt: str
    entries: tuple[Entry, ...]
    order: int = 0


@dataclass(frozen=True)
class Config:
    pages: tuple[Page, ...]
    theme: PickerTheme = DEFAULT_THEME
    keybinds: Keybinds = DEFAULT_KEYBINDS


def sort_pages(pages: list[Page]) -> tuple[Page, ...]:
    """Order pages by ``order``, then case-insensitively by label."""
    return tuple(sorted(pages, key=lambda page: (page.order, page.label.casefold())))


def _parse_page(label: str, raw: object) -> Page:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"page {label!r} must be an object")
    unknown = set(raw) - _PAGE_KEYS
    if unknown:
        raise ConfigError(f"page {label!r} has unknown keys: {', '.join(sorted(unknown))}")

    order = raw.get("order", 0)
    if isinstance(order, bool) or not isinstance(order, int):
        raise ConfigError(f"page {label!r}: order must be an integer")

    prompt = raw.get("prompt")
    if not isinstance(prompt, str):
        raise ConfigError(f"page {label!r}: prompt must be a string")

    raw_entries = raw.get("entries")
    if not isinstance(raw_entries, Mapping):
        raise ConfigError(f"page {label!r}: entries must be an object of name -> value")
    entries: list[Entry] = []
    for name, value in raw_entries.items():
        if not isinstance(value, str):
            raise ConfigError(f"page {label!r}: entry {name!r} must map to a string")
        entries.append(Entry(name=name, value=value))

    return Page(label=label, prompt=prompt, entries=tuple(entries), order=order)


def parse_config(data: object) -> Config:
    """Validate decoded JSON and build a ``Config``.

    Theme and keybind sections are merged over the built-in defaults.
    """
    if not isinstance(data, Mapping):
        raise ConfigError("config must be a JSON object")
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")

    raw_pages = data.get("pages")
    if not isinstance(raw_pages, Mapping) or not raw_pages:
        raise ConfigError("config must define at least one page under 'pages'")
    pages = sort_pages([_parse_page(label, raw) for label, raw in raw_pages.items()])

    raw_theme = data.get("theme", {})
    if not isinstance(raw_theme, Mapping):
        raise ConfigError("'theme' must be an object")
    raw_keybinds = data.get("keybinds", {})
    if not isinstance(raw_keybinds, Mapping):
        raise ConfigError("'keybinds' must be an object")

    try:
        theme = theme_from_mapping(raw_theme)
    except ThemeError as exc:
        raise ConfigError(str(exc)) from exc
    try:
        keybinds = keybinds_from_mapping(raw_keybinds)
    except KeybindError as exc:
        raise ConfigError(str(exc)) from exc

    return Config(pages=pages, theme=theme, keybinds=keybinds)


def load_config(path: Path | None = None) -> Config:
    """Read and validate the config at ``path`` (default: user config dir)."""
    config_path = DEFAULT_CONFIG_PATH if path is None else path
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config {config_path}: {exc.strerror or exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"malformed config {config_path}: {exc}") from exc

    try:
        config = parse_config(data)
    except ConfigError as exc:
        raise ConfigError(f"{config_path}: {exc}") from exc
    logger.info("loaded %d page(s) from %s", len(config.pages), config_path)
    return config
