"""Frame rendering tests.

Frames are rendered with a marker theme so assertions can read the style
switches directly from the emitted text.
"""

from __future__ import annotations

import io
import unittest
from dataclasses import replace

from pagepick.config import Entry, Page
from pagepick.fuzzy import Candidate, FuzzyMatch, rank
from pagepick.render import candidate_rows, render, visible_candidate_count
from pagepick.state import InterfaceState
from pagepick.theme import PLAIN_THEME

MARKER_THEME = replace(
    PLAIN_THEME,
    entry_name="<n>",
    entry_value="<v>",
    entry_match="<m>",
    entry_hidden="<h>",
    entry_cursor="<c>",
    entry_cursor_match="<cm>",
    menu_name="<tab>",
    menu_cursor="<active>",
    overflow="<o>",
)


class _CountingSink(io.StringIO):
    def __init__(self) -> None:
        super().__init__()
        self.writes = 0
        self.flushes = 0

    def write(self, data: str) -> int:
        self.writes += 1
        return super().write(data)

    def flush(self) -> None:
        self.flushes += 1


def _page(*names: str, prompt: str = "> ") -> Page:
    return Page(label="apps", prompt=prompt, entries=tuple(Entry(name, name.lower()) for name in names))


def _render(
    state: InterfaceState,
    pages: list[Page],
    candidates: list[Candidate],
    size: tuple[int, int] = (40, 10),
    **kwargs,
) -> str:
    sink = _CountingSink()
    render(sink, MARKER_THEME, state, pages, candidates, size, **kwargs)
    return sink.getvalue()


class CandidateBudgetTests(unittest.TestCase):
    def test_candidate_rows_reserve_header_and_guard_rows(self) -> None:
        self.assertEqual(candidate_rows(10), 5)
        self.assertEqual(candidate_rows(3), 0)

    def test_overflow_line_takes_one_candidate_row(self) -> None:
        self.assertEqual(visible_candidate_count(10, 5), 5)
        self.assertEqual(visible_candidate_count(10, 6), 4)
        self.assertEqual(visible_candidate_count(5, 3), 0)


class RenderFrameTests(unittest.TestCase):
    def test_frame_is_written_once_and_flushed(self) -> None:
        page = _page("Alpha")
        sink = _CountingSink()

        render(sink, MARKER_THEME, InterfaceState(page_count=1), [page], rank("", page.entries), (40, 10))

        self.assertEqual(sink.writes, 1)
        self.assertEqual(sink.flushes, 1)

    def test_clear_screen_erases_before_drawing(self) -> None:
        page = _page("Alpha")
        state = InterfaceState(page_count=1)

        self.assertTrue(_render(state, [page], rank("", page.entries), clear_screen=True).startswith("\x1b[2J"))
        self.assertNotIn("\x1b[2J", _render(state, [page], rank("", page.entries)))

    def test_menu_line_separates_labels_and_marks_active_page(self) -> None:
        pages = [Page("apps", "> ", ()), Page("web", "url: ", ())]
        frame = _render(InterfaceState(page_index=1, page_count=2), pages, [])

        self.assertIn("\x1b[1;1H\x1b[2K<tab>apps  <active>web", frame)

    def test_overflow_indicator_replaces_last_row(self) -> None:
        page = _page("a1", "a2", "a3", "a4", "a5", "a6")
        frame = _render(InterfaceState(page_count=1), [page], rank("", page.entries), size=(40, 10))

        for name in ("a1", "a2", "a3", "a4"):
            self.assertIn(name, frame)
        self.assertNotIn("a5", frame)
        self.assertIn("\x1b[9;1H\x1b[2K<o>+2 more", frame)

    def test_single_row_region_draws_nothing_when_list_overflows(self) -> None:
        page = _page("a1", "a2", "a3")
        frame = _render(InterfaceState(page_count=1), [page], rank("", page.entries), size=(40, 6))

        self.assertNotIn("more", frame)
        self.assertNotIn("a1", frame)
        self.assertIn("\x1b[5;1H\x1b[J", frame)

    def test_no_overflow_indicator_when_everything_fits(self) -> None:
        page = _page("a1", "a2", "a3", "a4", "a5")
        frame = _render(InterfaceState(page_count=1), [page], rank("", page.entries), size=(40, 10))

        self.assertIn("a5", frame)
        self.assertNotIn("more", frame)

    def test_value_is_right_aligned(self) -> None:
        candidate = Candidate(FuzzyMatch(0, ()), "vim", "nvim")
        frame = _render(InterfaceState(page_count=1), [_page()], [candidate], size=(20, 10))

        self.assertIn("\x1b[17G<v>nvim", frame)

    def test_long_value_is_truncated_with_marker(self) -> None:
        candidate = Candidate(FuzzyMatch(0, ()), "abcdefghij", "0123456789")
        frame = _render(InterfaceState(page_count=1), [_page()], [candidate], size=(20, 10))

        self.assertIn("\x1b[13G<v>0123456<o>+", frame)

    def test_value_is_omitted_when_too_little_space_remains(self) -> None:
        candidate = Candidate(FuzzyMatch(0, ()), "abcdefghijklmnop", "VALUE")
        frame = _render(InterfaceState(page_count=1), [_page()], [candidate], size=(20, 10))

        self.assertIn("abcdefghijklmnop", frame)
        self.assertNotIn("VALUE", frame)

    def test_matched_characters_switch_style(self) -> None:
        candidates = [
            Candidate(FuzzyMatch(30, (0,)), "ab", "x"),
            Candidate(None, "zz", "z1"),
        ]
        frame = _render(InterfaceState(query="a", cursor=1, page_count=1, result_count=1), [_page()], candidates)

        self.assertIn("<m>a<n>b", frame)
        self.assertIn("<h>zz", frame)
        self.assertIn("<h>z1", frame)

    def test_selected_row_uses_cursor_styles(self) -> None:
        candidates = [Candidate(FuzzyMatch(30, (0,)), "ab", "x")]
        state = InterfaceState(query="a", cursor=1, page_count=1, result_cursor=True, result_count=1)
        frame = _render(state, [_page()], candidates)

        self.assertIn("<cm>a<c>b", frame)

    def test_prompt_and_query_place_cursor_by_display_width(self) -> None:
        state = InterfaceState(query="漢é", cursor=1, page_count=1)
        frame = _render(state, [_page(prompt="> ")], [])

        self.assertIn("\x1b[3;1H\x1b[2K> \x1b7漢é\x1b8\x1b[2C\x1b[?25h", frame)
        self.assertTrue(frame.endswith("\x1b[?25h"))

    def test_cursor_at_query_start_adds_no_move(self) -> None:
        frame = _render(InterfaceState(query="abc", cursor=0, page_count=1), [_page(prompt="> ")], [])

        self.assertTrue(frame.endswith("\x1b8\x1b[?25h"))


if __name__ == "__main__":
    unittest.main()
