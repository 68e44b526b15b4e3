"""Fuzzy matching and candidate ranking for one page of entries.

``fuzzy_match`` finds the best-scoring subsequence alignment of a query in an
entry name and reports which characters matched so the renderer can
highlight them. ``rank`` orders a page for display.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .config import Entry

SCORE_MATCH = 16
BONUS_FIRST_CHAR = 12
BONUS_BOUNDARY = 10
BONUS_CAMEL = 8
BONUS_CONSECUTIVE = 12
BONUS_CASE = 1
PENALTY_GAP = 2
PENALTY_LEADING = 1
MAX_LEADING_PENALTY = 6
WORD_SEPARATORS = frozenset("/_- .:\\")


@dataclass(frozen=True)
class FuzzyMatch:
    score: int
    positions: tuple[int, ...]


@dataclass(frozen=True)
class Candidate:
    """One entry annotated with its match against the current query."""

    match: FuzzyMatch | None
    name: str
    value: str


def _char_bonus(name: str, idx: int) -> int:
    if idx == 0:
        return BONUS_FIRST_CHAR
    prev = name[idx - 1]
    ch = name[idx]
    if prev in WORD_SEPARATORS and ch not in WORD_SEPARATORS:
        return BONUS_BOUNDARY
    if prev.islower() and ch.isupper():
        return BONUS_CAMEL
    if prev.isalpha() and ch.isdigit():
        return BONUS_CAMEL
    return 0


def _is_subsequence(query_folded: list[str], name_folded: list[str]) -> bool:
    it = iter(name_folded)
    return all(any(ch == needle for ch in it) for needle in query_folded)


def fuzzy_match(name: str, query: str) -> FuzzyMatch | None:
    """Match ``query`` against ``name`` case-insensitively.

    Returns ``None`` when ``query`` is not a subsequence of ``name``. The
    score rewards word starts, camelCase humps, consecutive runs, and
    matching case, and penalizes gaps and a late first match. When several
    alignments share the best score, the earliest one is reported.
    """
    if not query:
        return FuzzyMatch(0, ())

    query_folded = [ch.lower() for ch in query]
    name_folded = [ch.lower() for ch in name]
    n = len(query_folded)
    m = len(name_folded)
    if n > m or not _is_subsequence(query_folded, name_folded):
        return None

    bonuses = [_char_bonus(name, idx) for idx in range(m)]
    rows: list[list[int | None]] = []
    links: list[list[int]] = []
    prev_row: list[int | None] = []

    for i in range(n):
        row: list[int | None] = [None] * m
        link = [-1] * m
        # Best predecessor ending at least two columns back, gap penalty applied.
        gap_best: int | None = None
        gap_best_idx = -1
        for j in range(m):
            if i > 0 and j >= 2:
                if gap_best is not None:
                    gap_best -= PENALTY_GAP
                skipped = prev_row[j - 2]
                if skipped is not None and (gap_best is None or skipped - PENALTY_GAP > gap_best):
                    gap_best = skipped - PENALTY_GAP
                    gap_best_idx = j - 2
            if name_folded[j] != query_folded[i]:
                continue

            base = SCORE_MATCH + bonuses[j]
            if name[j] == query[i]:
                base += BONUS_CASE
            if i == 0:
                row[j] = base - min(j, MAX_LEADING_PENALTY) * PENALTY_LEADING
                continue

            if j >= 1 and prev_row[j - 1] is not None:
                row[j] = base + prev_row[j - 1] + BONUS_CONSECUTIVE
                link[j] = j - 1
            if gap_best is not None and (row[j] is None or base + gap_best > row[j]):
                row[j] = base + gap_best
                link[j] = gap_best_idx
        rows.append(row)
        links.append(link)
        prev_row = row

    best_end = -1
    best_score: int | None = None
    for j, score in enumerate(rows[-1]):
        if score is not None and (best_score is None or score > best_score):
            best_end, best_score = j, score
    if best_score is None:
        return None

    positions = [best_end]
    for i in range(n - 1, 0, -1):
        positions.append(links[i][positions[-1]])
    positions.reverse()
    return FuzzyMatch(best_score, tuple(positions))


def _rank_key(candidate: Candidate) -> tuple[int, int, tuple[int, ...], str]:
    if candidate.match is None:
        return (1, 0, (), candidate.name.casefold())
    return (0, -candidate.match.score, candidate.match.positions, candidate.name.casefold())


def rank(query: str, entries: Iterable[Entry]) -> list[Candidate]:
    """Annotate and order ``entries`` for ``query``.

    With an empty query every entry counts as matched and the list is
    alphabetical. Otherwise matches come first, best score first, followed by
    the non-matching entries alphabetically. Every entry appears exactly once.
    """
    if not query:
        candidates = [Candidate(FuzzyMatch(0, ()), entry.name, entry.value) for entry in entries]
        candidates.sort(key=lambda candidate: candidate.name.casefold())
        return candidates

    candidates = [Candidate(fuzzy_match(entry.name, query), entry.name, entry.value) for entry in entries]
    candidates.sort(key=_rank_key)
    return candidates


def matched_count(candidates: Iterable[Candidate]) -> int:
    return sum(1 for candidate in candidates if candidate.match is not None)
