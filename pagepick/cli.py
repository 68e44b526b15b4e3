"""Command-line front door for pagepick.

Parses CLI options and loads the config, then runs the picker on the
controlling terminal and hands the selection to ``launch``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from .input import EventSource
from .launch import LaunchError, submit_selection
from .loop import LoopOptions, PickerError, run_picker
from .terminal import TerminalController, open_tty
from .theme import PLAIN_THEME
from .transitions import TransitionError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagepick",
        description="A multi-page fuzzy launcher for your terminal.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        type=Path,
        default=None,
        help=f"Configuration file path (default: {DEFAULT_CONFIG_PATH}).",
    )
    execute = parser.add_mutually_exclusive_group()
    execute.add_argument("-x", "--exec", dest="exec_selection", action="store_true", help="Execute the selection.")
    execute.add_argument(
        "-w",
        "--exec-with",
        metavar="CMD",
        default=None,
        help="Execute the selection with the provided command.",
    )
    parser.add_argument("-t", "--transient", action="store_true", help="Exit the program if focus is lost.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument(
        "--strict-keys",
        action="store_true",
        help="Treat unhandled key events as errors (diagnostics).",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Write debug logs to this file.")
    return parser


def configure_logging(log_file: Path | None) -> None:
    """Send logs to ``log_file``; the terminal itself is never a log target."""
    if log_file is None:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, run one picker session, and submit the result.

    Configuration problems are reported before the terminal is touched.
    Errors raised inside the session leave the terminal restored and exit
    with the error message.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc
    theme = PLAIN_THEME if args.no_color else config.theme
    options = LoopOptions(exit_on_focus_loss=args.transient, strict_keys=args.strict_keys)

    try:
        with open_tty() as (stdin_fd, output):
            terminal = TerminalController(stdin_fd, output)
            events = EventSource(stdin_fd, terminal.size)
            with terminal.raw_mode():
                selection = run_picker(
                    config.pages,
                    config.keybinds,
                    theme,
                    events,
                    output,
                    terminal.size,
                    options,
                )
    except (PickerError, TransitionError) as exc:
        raise SystemExit(f"pagepick: {exc}") from exc
    except OSError as exc:
        raise SystemExit(f"pagepick: terminal error: {exc}") from exc

    if selection is None:
        return
    try:
        submit_selection(
            selection,
            sys.stdout,
            exec_selection=args.exec_selection,
            exec_with=args.exec_with,
        )
    except LaunchError as exc:
        raise SystemExit(f"pagepick: {exc}") from exc


if __name__ == "__main__":
    main()
