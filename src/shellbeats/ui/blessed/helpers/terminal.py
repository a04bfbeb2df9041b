"""Terminal output utilities."""

import sys

from blessed import Terminal

ELLIPSIS = "..."


def truncate(text: str, width: int) -> str:
    """Cut text to width columns, ending in an ellipsis when shortened."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width <= len(ELLIPSIS):
        return text[:width]
    return text[: width - len(ELLIPSIS)] + ELLIPSIS


def write_at(
    term: Terminal, x: int, y: int, content: str, *, clear: bool = True
) -> None:
    """Write content at a position, clearing the rest of the line by default.

    Clearing stops shorter text from leaving pieces of the previous frame.
    """
    if clear:
        sys.stdout.write(term.move_xy(x, y) + term.clear_eol + content)
    else:
        sys.stdout.write(term.move_xy(x, y) + content)
