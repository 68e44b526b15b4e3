"""Hand the selected value to the outside world.

The value is printed to stdout by default, spawned detached with ``--exec``,
or appended as the final argument of an ``--exec-with`` command.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import TextIO

DETACH_COMMAND = ("nohup",)

logger = logging.getLogger(__name__)


class LaunchError(RuntimeError):
    """Raised when the selection cannot be executed."""


def launch_command(selection: str, *, exec_selection: bool = False, exec_with: str | None = None) -> list[str] | None:
    """Build the argv that runs ``selection``, or ``None`` to print it instead."""
    if exec_selection:
        return [*DETACH_COMMAND, selection]
    if exec_with is not None:
        cmd = shlex.split(exec_with)
        if not cmd:
            raise LaunchError("empty --exec-with command")
        return [*cmd, selection]
    return None


def submit_selection(
    selection: str,
    stdout: TextIO,
    *,
    exec_selection: bool = False,
    exec_with: str | None = None,
) -> None:
    """Print or spawn ``selection``; spawned processes get ``/dev/null`` stdio."""
    cmd = launch_command(selection, exec_selection=exec_selection, exec_with=exec_with)
    if cmd is None:
        stdout.write(f"{selection}\n")
        stdout.flush()
        return

    logger.info("launching %s", shlex.join(cmd))
    try:
        subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        raise LaunchError(f"failed to launch {cmd[0]!r}: {exc}") from exc
