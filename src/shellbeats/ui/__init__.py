"""UI layer for shellbeats.

Contains:
- blessed: fullscreen terminal UI (screens, key bindings, rendering)
"""

__all__ = []
