"""pagepick: a multi-page fuzzy launcher for the terminal."""

from .config import Config, Entry, Page, load_config
from .fuzzy import Candidate, FuzzyMatch, fuzzy_match, rank
from .loop import LoopOptions, run_picker
from .state import Action, InterfaceState
from .transitions import transition

__all__ = [
    "Action",
    "Candidate",
    "Config",
    "Entry",
    "FuzzyMatch",
    "InterfaceState",
    "LoopOptions",
    "Page",
    "fuzzy_match",
    "load_config",
    "rank",
    "run_picker",
    "transition",
]
