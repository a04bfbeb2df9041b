"""Pure helper functions for list selection and scrolling."""


def calculate_scroll_offset(
    selected: int,
    current_scroll: int,
    visible_items: int,
    total_items: int,
) -> int:
    """Scroll just enough to keep the selected row inside the viewport.

    Args:
        selected: Index of the selected row
        current_scroll: Index of the first visible row
        visible_items: Number of rows the viewport can show
        total_items: Number of rows in the list

    Returns:
        New index of the first visible row

    Examples:
        >>> calculate_scroll_offset(15, 0, 10, 20)
        6
        >>> calculate_scroll_offset(2, 10, 10, 20)
        2
    """
    if total_items <= visible_items:
        return 0
    if selected >= current_scroll + visible_items:
        scroll = selected - visible_items + 1
    elif selected < current_scroll:
        scroll = selected
    else:
        scroll = current_scroll
    return max(0, min(scroll, total_items - visible_items))


def step_selection(current: int, delta: int, total_items: int) -> int:
    """Move the selection by delta rows, stopping at either end of the list."""
    if total_items == 0:
        return 0
    return max(0, min(current + delta, total_items - 1))


def clamp_selection(selection: int, total_items: int) -> int:
    """Clamp a selection to [0, total_items - 1]; 0 for an empty list.

    Used after rows are removed under the cursor.
    """
    if total_items == 0:
        return 0
    return max(0, min(selection, total_items - 1))
