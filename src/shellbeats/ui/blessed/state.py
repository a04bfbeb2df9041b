"""UI state management - immutable state updates."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from shellbeats.core.output import StatusLine, make_status
from shellbeats.domain.library.models import Song
from shellbeats.ui.blessed.helpers.scrolling import (
    calculate_scroll_offset,
    clamp_selection,
    step_selection,
)

WELCOME_STATUS = "Press / to search, f for playlists, h for help."


class Screen(Enum):
    SEARCH = "search"
    PLAYLISTS = "playlists"
    PLAYLIST_SONGS = "playlist_songs"
    ADD_TO_PLAYLIST = "add_to_playlist"


# Where Esc leads from each screen; SEARCH has no back target
BACK_TRANSITIONS: dict[Screen, Screen] = {
    Screen.PLAYLISTS: Screen.SEARCH,
    Screen.PLAYLIST_SONGS: Screen.PLAYLISTS,
    Screen.ADD_TO_PLAYLIST: Screen.SEARCH,
}


class Intent(Enum):
    """User actions the navigation controller understands."""

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    ACTIVATE = "activate"
    BACK = "back"
    TOGGLE_PAUSE = "toggle_pause"
    NEXT = "next"
    PREV = "prev"
    STOP = "stop"
    SEARCH = "search"
    OPEN_PLAYLISTS = "open_playlists"
    ADD_SELECTED = "add_selected"
    CREATE_PLAYLIST = "create_playlist"
    DELETE_PLAYLIST = "delete_playlist"
    REMOVE_SONG = "remove_song"
    HELP = "help"
    QUIT = "quit"


class PromptKind(Enum):
    SEARCH = "search"
    CREATE_PLAYLIST = "create_playlist"
    CONFIRM_DELETE = "confirm_delete"


@dataclass(frozen=True)
class ListCursor:
    """Selected row and first visible row of one screen's list."""

    selected: int = 0
    scroll: int = 0


@dataclass(frozen=True)
class Prompt:
    """Inline input shown on the bottom line.

    CONFIRM_DELETE prompts take a single y/n key instead of text.
    """

    kind: PromptKind
    label: str
    text: str = ""
    data: dict[str, Any] = field(default_factory=dict)


def _initial_cursors() -> dict[Screen, ListCursor]:
    return {screen: ListCursor() for screen in Screen}


@dataclass
class UIState:
    """
    All UI-only state. Updated by returning new instances via ``replace``.

    The playlist library and playback session live in AppContext; this
    state only refers to playlists by index.
    """

    screen: Screen = Screen.SEARCH
    cursors: dict[Screen, ListCursor] = field(default_factory=_initial_cursors)

    search_query: str = ""
    search_results: list[Song] = field(default_factory=list)
    pending_query: Optional[str] = None  # Set by the search prompt, run after a redraw

    open_playlist: int = -1  # Playlist index shown on PLAYLIST_SONGS
    song_to_add: Optional[Song] = None  # Copy captured when entering ADD_TO_PLAYLIST

    prompt: Optional[Prompt] = None
    help_visible: bool = False
    status: StatusLine = field(default_factory=lambda: StatusLine(WELCOME_STATUS))

    list_height: int = 10  # Rows available to lists, updated from terminal size
    should_quit: bool = False


def create_initial_state() -> UIState:
    return UIState()


# -- status ------------------------------------------------------------------


def set_status(state: UIState, text: str, level: str = "info") -> UIState:
    """Set the status line (also written to the log)."""
    return replace(state, status=make_status(text, level))


def clear_status(state: UIState) -> UIState:
    return replace(state, status=StatusLine())


# -- cursors -----------------------------------------------------------------


def get_cursor(state: UIState, screen: Optional[Screen] = None) -> ListCursor:
    return state.cursors[screen or state.screen]


def set_cursor(
    state: UIState, cursor: ListCursor, screen: Optional[Screen] = None
) -> UIState:
    cursors = dict(state.cursors)
    cursors[screen or state.screen] = cursor
    return replace(state, cursors=cursors)


def reset_cursor(state: UIState, screen: Screen) -> UIState:
    return set_cursor(state, ListCursor(), screen)


def select_row(
    state: UIState, index: int, total_items: int, screen: Optional[Screen] = None
) -> UIState:
    """Select a row and scroll it into view."""
    current = get_cursor(state, screen)
    selected = clamp_selection(index, total_items)
    scroll = calculate_scroll_offset(
        selected, current.scroll, state.list_height, total_items
    )
    return set_cursor(state, ListCursor(selected, scroll), screen)


def move_cursor(
    state: UIState, delta: int, total_items: int, screen: Optional[Screen] = None
) -> UIState:
    """Move the selection by delta rows without wrapping."""
    current = get_cursor(state, screen)
    target = step_selection(current.selected, delta, total_items)
    return select_row(state, target, total_items, screen)


def clamp_cursor(
    state: UIState, total_items: int, screen: Optional[Screen] = None
) -> UIState:
    """Pull the selection back inside a list that just shrank."""
    current = get_cursor(state, screen)
    return select_row(state, current.selected, total_items, screen)


# -- screens, prompts, help --------------------------------------------------


def back_target(state: UIState) -> Optional[Screen]:
    return BACK_TRANSITIONS.get(state.screen)


def show_prompt(
    state: UIState, kind: PromptKind, label: str, **data: Any
) -> UIState:
    return replace(state, prompt=Prompt(kind=kind, label=label, data=data))


def hide_prompt(state: UIState) -> UIState:
    return replace(state, prompt=None)


def append_prompt_char(state: UIState, char: str) -> UIState:
    if state.prompt is None:
        return state
    return replace(state, prompt=replace(state.prompt, text=state.prompt.text + char))


def delete_prompt_char(state: UIState) -> UIState:
    if state.prompt is None or not state.prompt.text:
        return state
    return replace(state, prompt=replace(state.prompt, text=state.prompt.text[:-1]))


def show_help(state: UIState) -> UIState:
    return replace(state, help_visible=True)


def hide_help(state: UIState) -> UIState:
    return replace(state, help_visible=False)
