"""Keyboard handling: keystroke parsing, key bindings and dispatch.

Key Functions:
    - parse_key: Keystroke to event dictionary
    - key_to_intent: Event to navigation intent for the current screen
    - handle_key: Main keyboard dispatcher
"""

from typing import Optional

from blessed.keyboard import Keystroke

from shellbeats.context import AppContext
from shellbeats.ui.blessed import navigation
from shellbeats.ui.blessed.state import (
    Intent,
    PromptKind,
    Screen,
    UIState,
    append_prompt_char,
    delete_prompt_char,
    hide_help,
)

# Named keys and characters valid on every screen
GLOBAL_BINDINGS: dict[str, Intent] = {
    "q": Intent.QUIT,
    " ": Intent.TOGGLE_PAUSE,
    "n": Intent.NEXT,
    "p": Intent.PREV,
    "h": Intent.HELP,
    "?": Intent.HELP,
    "escape": Intent.BACK,
}

LIST_BINDINGS: dict[str, Intent] = {
    "arrow_up": Intent.MOVE_UP,
    "k": Intent.MOVE_UP,
    "arrow_down": Intent.MOVE_DOWN,
    "j": Intent.MOVE_DOWN,
    "page_up": Intent.PAGE_UP,
    "page_down": Intent.PAGE_DOWN,
    "home": Intent.HOME,
    "g": Intent.HOME,
    "end": Intent.END,
    "G": Intent.END,
    "enter": Intent.ACTIVATE,
}

SCREEN_BINDINGS: dict[Screen, dict[str, Intent]] = {
    Screen.SEARCH: {
        "/": Intent.SEARCH,
        "s": Intent.SEARCH,
        "x": Intent.STOP,
        "f": Intent.OPEN_PLAYLISTS,
        "a": Intent.ADD_SELECTED,
        "c": Intent.CREATE_PLAYLIST,
    },
    Screen.PLAYLISTS: {
        "c": Intent.CREATE_PLAYLIST,
        "x": Intent.DELETE_PLAYLIST,
        "d": Intent.DELETE_PLAYLIST,
    },
    Screen.PLAYLIST_SONGS: {
        "d": Intent.REMOVE_SONG,
        "x": Intent.STOP,
    },
    Screen.ADD_TO_PLAYLIST: {
        "c": Intent.CREATE_PLAYLIST,
    },
}


def parse_key(key: Keystroke) -> dict:
    """
    Parse keystroke into event dictionary.

    Args:
        key: blessed Keystroke

    Returns:
        Event dictionary with ``type`` (named key, ``char`` or ``unknown``)
        and ``char`` for printable keys
    """
    event = {
        "type": "unknown",
        "key": key,
        "name": key.name if hasattr(key, "name") else None,
        "char": str(key) if key and key.isprintable() else None,
    }

    if key.name == "KEY_ENTER" or key in ("\n", "\r"):
        event["type"] = "enter"
    elif key.name == "KEY_ESCAPE" or key == "\x1b":
        event["type"] = "escape"
    elif key.name == "KEY_BACKSPACE" or key == "\x7f":
        event["type"] = "backspace"
    elif key.name == "KEY_UP":
        event["type"] = "arrow_up"
    elif key.name == "KEY_DOWN":
        event["type"] = "arrow_down"
    elif key.name == "KEY_PGUP":
        event["type"] = "page_up"
    elif key.name == "KEY_PGDOWN":
        event["type"] = "page_down"
    elif key.name == "KEY_HOME":
        event["type"] = "home"
    elif key.name == "KEY_END":
        event["type"] = "end"
    elif key == "\x03":  # Ctrl+C
        event["type"] = "ctrl_c"
    elif key and key.isprintable():
        event["type"] = "char"

    return event


def key_to_intent(event: dict, screen: Screen) -> Optional[Intent]:
    """Look up the intent bound to an event on the given screen."""
    binding = event["char"] if event["type"] == "char" else event["type"]
    if binding is None:
        return None
    return (
        GLOBAL_BINDINGS.get(binding)
        or SCREEN_BINDINGS[screen].get(binding)
        or LIST_BINDINGS.get(binding)
    )


def handle_prompt_key(
    state: UIState, ctx: AppContext, event: dict
) -> tuple[UIState, AppContext]:
    """Edit, submit or cancel the open prompt."""
    if event["type"] in ("escape", "ctrl_c"):
        return navigation.cancel_prompt(state, ctx)

    if state.prompt.kind is PromptKind.CONFIRM_DELETE:
        # Single keypress answers the question
        answer = event["char"] or ""
        return navigation.submit_prompt(state, ctx, answer)

    if event["type"] == "enter":
        return navigation.submit_prompt(state, ctx, state.prompt.text)
    if event["type"] == "backspace":
        return delete_prompt_char(state), ctx
    if event["type"] == "char":
        return append_prompt_char(state, event["char"]), ctx
    return state, ctx


def handle_key(
    state: UIState, ctx: AppContext, key: Keystroke
) -> tuple[UIState, AppContext]:
    """
    Handle keyboard input and return updated state and context.

    Priority order:
    1. Help screen (any key closes it)
    2. Open prompt
    3. Key bindings of the current screen

    Args:
        state: Current UI state
        ctx: Application context
        key: blessed Keystroke

    Returns:
        Tuple of (updated state, updated context)
    """
    event = parse_key(key)

    if state.help_visible:
        return hide_help(state), ctx

    if state.prompt is not None:
        return handle_prompt_key(state, ctx, event)

    if event["type"] == "ctrl_c":
        return navigation.handle_intent(state, ctx, Intent.QUIT)

    intent = key_to_intent(event, state.screen)
    if intent is None:
        return state, ctx
    return navigation.handle_intent(state, ctx, intent)
