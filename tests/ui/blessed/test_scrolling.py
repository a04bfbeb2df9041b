"""Tests for selection and scrolling helpers."""

from shellbeats.ui.blessed.helpers.scrolling import (
    calculate_scroll_offset,
    clamp_selection,
    step_selection,
)
from shellbeats.ui.blessed.helpers.terminal import truncate
from shellbeats.ui.blessed.state import UIState, clamp_cursor, get_cursor, move_cursor


class TestScrollOffset:
    """Tests for calculate_scroll_offset."""

    def test_everything_fits(self) -> None:
        """Short lists never scroll."""
        assert calculate_scroll_offset(4, 3, 10, 5) == 0

    def test_scroll_down_to_selection(self) -> None:
        """Selecting below the viewport puts the row at the bottom."""
        assert calculate_scroll_offset(15, 0, 10, 20) == 6

    def test_scroll_up_to_selection(self) -> None:
        """Selecting above the viewport puts the row at the top."""
        assert calculate_scroll_offset(2, 10, 10, 20) == 2

    def test_visible_selection_keeps_scroll(self) -> None:
        """No scrolling while the selection is visible."""
        assert calculate_scroll_offset(5, 3, 10, 20) == 3

    def test_shrunk_list_pulls_scroll_back(self) -> None:
        """Scroll never leaves empty rows at the bottom."""
        assert calculate_scroll_offset(12, 8, 10, 15) == 5


class TestSelection:
    """Tests for selection stepping and clamping."""

    def test_step_stops_at_ends(self) -> None:
        """Selection does not wrap."""
        assert step_selection(0, -1, 5) == 0
        assert step_selection(4, 1, 5) == 4
        assert step_selection(1, 10, 5) == 4

    def test_empty_list(self) -> None:
        """An empty list always selects 0."""
        assert step_selection(3, 1, 0) == 0
        assert clamp_selection(3, 0) == 0

    def test_clamp(self) -> None:
        """Clamping pulls a stale selection inside the list."""
        assert clamp_selection(7, 3) == 2
        assert clamp_selection(-1, 3) == 0

    def test_cursor_after_list_shrinks(self) -> None:
        """clamp_cursor keeps the cursor and scroll valid."""
        state = UIState(list_height=3)
        state = move_cursor(state, 9, 10)
        assert get_cursor(state).selected == 9
        assert get_cursor(state).scroll == 7
        state = clamp_cursor(state, 4)
        assert get_cursor(state).selected == 3
        assert get_cursor(state).scroll == 1


class TestTruncate:
    """Tests for truncate."""

    def test_short_text_unchanged(self) -> None:
        """Text that fits is returned as-is."""
        assert truncate("abc", 5) == "abc"

    def test_long_text_gets_ellipsis(self) -> None:
        """Text that does not fit ends with an ellipsis."""
        assert truncate("abcdefghij", 6) == "abc..."

    def test_tiny_width(self) -> None:
        """Widths too small for an ellipsis just cut."""
        assert truncate("abcdef", 2) == "ab"
        assert truncate("abc", 0) == ""
