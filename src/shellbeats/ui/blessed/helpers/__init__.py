"""Blessed UI helper functions."""

from .scrolling import calculate_scroll_offset, clamp_selection, step_selection
from .terminal import truncate, write_at

__all__ = [
    "calculate_scroll_offset",
    "clamp_selection",
    "step_selection",
    "truncate",
    "write_at",
]
