from __future__ import annotations

import enum
from dataclasses import dataclass


class Action(enum.Enum):
    """Pending effect of a transition, consumed once by the loop."""

    NONE = "none"
    EXIT = "exit"
    CLEAR = "clear"
    SUBMIT = "submit"


@dataclass(frozen=True)
class InterfaceState:
    """Everything the picker knows about one frame.

    ``cursor`` counts code points into ``query``. ``result_count`` is the
    number of candidates the result cursor may visit and is recomputed by the
    loop on every cycle.
    """

    query: str = ""
    cursor: int = 0
    action: Action = Action.NONE
    result_cursor: bool = False
    result_index: int = 0
    result_count: int = 0
    page_index: int = 0
    page_count: int = 0
