"""
Navigation controller: turns intents into library and playback actions.

Every handler takes ``(UIState, AppContext)`` and returns an updated pair.
Library and player errors are caught here and turned into status text;
stale indices are no-ops with a status, never a crash.
"""

import time
from dataclasses import replace
from typing import Callable, Optional

from loguru import logger

from shellbeats.context import AppContext
from shellbeats.core.exceptions import (
    DuplicateNameError,
    InvalidNameError,
    OutOfRangeError,
    PersistenceError,
    ProtocolUnavailableError,
    SearchError,
)
from shellbeats.domain.library.models import Playlist
from shellbeats.domain.playback import session as playback
from shellbeats.domain.playback.session import PlaybackSource
from shellbeats.ui.blessed.state import (
    Intent,
    PromptKind,
    Screen,
    UIState,
    back_target,
    clamp_cursor,
    clear_status,
    get_cursor,
    hide_prompt,
    move_cursor,
    reset_cursor,
    select_row,
    set_status,
    show_help,
    show_prompt,
)

Result = tuple[UIState, AppContext]
Handler = Callable[[UIState, AppContext], Result]


# -- queries -----------------------------------------------------------------


def open_playlist(state: UIState, ctx: AppContext) -> Optional[Playlist]:
    """Playlist shown on the PLAYLIST_SONGS screen, if it still exists."""
    if 0 <= state.open_playlist < len(ctx.store):
        return ctx.store[state.open_playlist]
    return None


def list_size(state: UIState, ctx: AppContext, screen: Optional[Screen] = None) -> int:
    screen = screen or state.screen
    if screen is Screen.SEARCH:
        return len(state.search_results)
    if screen is Screen.PLAYLIST_SONGS:
        playlist = open_playlist(state, ctx)
        return len(playlist.songs) if playlist is not None else 0
    return len(ctx.store)


def _selected(state: UIState) -> int:
    return get_cursor(state).selected


def _follow_playback(state: UIState, ctx: AppContext) -> UIState:
    """Move the selection of the playing list onto the playing row."""
    session = ctx.session
    if playback.plays_from_results(session, state.search_results):
        return select_row(
            state, session.position, len(state.search_results), Screen.SEARCH
        )
    if (
        session.source is PlaybackSource.PLAYLIST
        and session.playlist is not None
        and open_playlist(state, ctx) is session.playlist
    ):
        return select_row(
            state, session.position, len(session.playlist.songs), Screen.PLAYLIST_SONGS
        )
    return state


def _now_playing_title(ctx: AppContext) -> str:
    song = playback.current_song(ctx.session)
    return song.title if song is not None else "?"


# -- playback ----------------------------------------------------------------


def _start_playback(
    state: UIState, ctx: AppContext, source: PlaybackSource, index: int
) -> Result:
    try:
        if source is PlaybackSource.SEARCH:
            session, started = playback.play_from_search(
                ctx.session, ctx.player, state.search_results, index
            )
        else:
            playlist = open_playlist(state, ctx)
            if playlist is None:
                return set_status(state, "Playlist no longer exists", "warning"), ctx
            session, started = playback.play_from_playlist(
                ctx.session, ctx.player, playlist, index
            )
    except ProtocolUnavailableError as e:
        return set_status(state, f"Player unavailable: {e}", "error"), ctx

    if not started:
        return set_status(state, "Nothing to play", "warning"), ctx

    ctx = ctx.with_session(session)
    return set_status(state, f"Playing: {_now_playing_title(ctx)}"), ctx


def _step(state: UIState, ctx: AppContext, direction: int) -> Result:
    if ctx.session.source is PlaybackSource.NONE:
        return set_status(state, "Nothing is playing"), ctx

    try:
        session, changed = playback.advance(ctx.session, ctx.player, direction)
    except ProtocolUnavailableError as e:
        return set_status(state, f"Player unavailable: {e}", "error"), ctx

    if not changed:
        edge = "last" if direction > 0 else "first"
        return set_status(state, f"Already at the {edge} track"), ctx

    ctx = ctx.with_session(session)
    state = _follow_playback(state, ctx)
    label = "Next" if direction > 0 else "Previous"
    return set_status(state, f"{label} track: {_now_playing_title(ctx)}"), ctx


def _next(state: UIState, ctx: AppContext) -> Result:
    return _step(state, ctx, 1)


def _prev(state: UIState, ctx: AppContext) -> Result:
    return _step(state, ctx, -1)


def _toggle_pause(state: UIState, ctx: AppContext) -> Result:
    session, changed = playback.toggle_pause(ctx.session, ctx.player)
    if not changed:
        return set_status(state, "Nothing is playing"), ctx
    ctx = ctx.with_session(session)
    return set_status(state, "Paused" if session.is_paused else "Playing"), ctx


def _stop(state: UIState, ctx: AppContext) -> Result:
    session, changed = playback.stop(ctx.session, ctx.player)
    if not changed:
        return set_status(state, "Nothing is playing"), ctx
    return set_status(state, "Playback stopped"), ctx.with_session(session)


def tick(state: UIState, ctx: AppContext, now: Optional[float] = None) -> Result:
    """Poll mpv once and auto-advance at most one track."""
    now = time.time() if now is None else now
    grace = ctx.config.player.grace_seconds
    if not playback.check_track_finished(ctx.session, ctx.player, now, grace):
        return state, ctx

    try:
        session, changed = playback.advance(ctx.session, ctx.player, 1, now)
    except ProtocolUnavailableError as e:
        ctx = ctx.with_session(playback.mark_finished(ctx.session))
        return set_status(state, f"Player unavailable: {e}", "error"), ctx

    if not changed:
        ctx = ctx.with_session(playback.mark_finished(ctx.session))
        return set_status(state, "Playback finished"), ctx

    ctx = ctx.with_session(session)
    state = _follow_playback(state, ctx)
    return set_status(state, f"Auto-playing: {_now_playing_title(ctx)}"), ctx


# -- list movement -----------------------------------------------------------


def _move_by(delta_rows: Callable[[UIState], int]) -> Handler:
    def handler(state: UIState, ctx: AppContext) -> Result:
        return move_cursor(state, delta_rows(state), list_size(state, ctx)), ctx

    return handler


def _home(state: UIState, ctx: AppContext) -> Result:
    return select_row(state, 0, list_size(state, ctx)), ctx


def _end(state: UIState, ctx: AppContext) -> Result:
    size = list_size(state, ctx)
    return select_row(state, size - 1, size), ctx


# -- screens -----------------------------------------------------------------


def go_back(state: UIState, ctx: AppContext) -> Result:
    """Follow BACK_TRANSITIONS; leaving ADD_TO_PLAYLIST drops the pending song."""
    target = back_target(state)
    if target is None:
        return state, ctx

    cancelled = state.screen is Screen.ADD_TO_PLAYLIST
    state = replace(state, screen=target)
    if cancelled:
        state = set_status(replace(state, song_to_add=None), "Cancelled")
    else:
        state = clear_status(state)
    return clamp_cursor(state, list_size(state, ctx)), ctx


def _open_playlists(state: UIState, ctx: AppContext) -> Result:
    state = reset_cursor(replace(state, screen=Screen.PLAYLISTS), Screen.PLAYLISTS)
    return set_status(state, "Playlists"), ctx


def _open_selected_playlist(state: UIState, ctx: AppContext) -> Result:
    if len(ctx.store) == 0:
        return set_status(state, "No playlists yet, press c to create one"), ctx

    index = _selected(state)
    try:
        playlist = ctx.store.load_songs(index)
    except OutOfRangeError:
        return set_status(state, "Playlist no longer exists", "warning"), ctx

    state = replace(state, screen=Screen.PLAYLIST_SONGS, open_playlist=index)
    state = reset_cursor(state, Screen.PLAYLIST_SONGS)
    return set_status(state, f"Opened: {playlist.name}"), ctx


def _begin_add(state: UIState, ctx: AppContext) -> Result:
    if not state.search_results:
        return set_status(state, "No song selected"), ctx

    song = state.search_results[_selected(state)]
    state = replace(
        state, screen=Screen.ADD_TO_PLAYLIST, song_to_add=replace(song)
    )
    state = reset_cursor(state, Screen.ADD_TO_PLAYLIST)
    return set_status(state, "Select playlist"), ctx


def _add_pending_song(
    state: UIState, ctx: AppContext, index: int, created: bool = False
) -> Result:
    song = state.song_to_add
    if song is None:
        return set_status(state, "No song selected"), ctx

    try:
        added = ctx.store.add_song(index, song)
    except OutOfRangeError:
        return set_status(state, "Playlist no longer exists", "warning"), ctx
    except PersistenceError as e:
        return set_status(state, f"Failed to add song: {e}", "error"), ctx

    name = ctx.store[index].name
    if created:
        text = f"Created '{name}' and added song"
    elif added:
        text = f"Added to: {name}"
    else:
        text = f"Already in playlist: {name}"

    state = replace(state, screen=Screen.SEARCH, song_to_add=None)
    return set_status(state, text), ctx


def _add_to_selected(state: UIState, ctx: AppContext) -> Result:
    if len(ctx.store) == 0:
        return set_status(state, "No playlists yet, press c to create one"), ctx
    return _add_pending_song(state, ctx, _selected(state))


def _create_playlist(state: UIState, ctx: AppContext, name: str) -> Result:
    try:
        index = ctx.store.create(name)
    except DuplicateNameError as e:
        return set_status(state, f"Playlist already exists: {e.name}", "warning"), ctx
    except InvalidNameError as e:
        return set_status(state, str(e), "warning"), ctx
    except PersistenceError as e:
        return set_status(state, f"Failed to create playlist: {e}", "error"), ctx

    if state.screen is Screen.ADD_TO_PLAYLIST and state.song_to_add is not None:
        return _add_pending_song(state, ctx, index, created=True)

    if state.screen is Screen.PLAYLISTS:
        state = select_row(state, index, len(ctx.store))
    return set_status(state, f"Created playlist: {ctx.store[index].name}"), ctx


def _delete_playlist(state: UIState, ctx: AppContext, index: int) -> Result:
    try:
        playlist = ctx.store.delete(index)
    except OutOfRangeError:
        return set_status(state, "Playlist no longer exists", "warning"), ctx
    except PersistenceError as e:
        return set_status(state, f"Failed to delete: {e}", "error"), ctx

    text = f"Deleted playlist: {playlist.name}"
    if ctx.session.playlist is playlist:
        session, _ = playback.stop(ctx.session, ctx.player)
        ctx = ctx.with_session(session)
        text += " (playback stopped)"

    if state.open_playlist == index:
        state = replace(state, open_playlist=-1)
    elif state.open_playlist > index:
        state = replace(state, open_playlist=state.open_playlist - 1)

    state = clamp_cursor(state, len(ctx.store), Screen.PLAYLISTS)
    state = clamp_cursor(state, len(ctx.store), Screen.ADD_TO_PLAYLIST)
    return set_status(state, text), ctx


def _remove_song(state: UIState, ctx: AppContext) -> Result:
    playlist = open_playlist(state, ctx)
    if playlist is None or not playlist.songs:
        return set_status(state, "Nothing to remove"), ctx

    song_index = _selected(state)
    if not 0 <= song_index < len(playlist.songs):
        return set_status(state, "Nothing to remove"), ctx
    title = playlist.songs[song_index].title

    try:
        removed = ctx.store.remove_song(state.open_playlist, song_index)
    except PersistenceError as e:
        return set_status(state, f"Failed to remove: {e}", "error"), ctx
    if not removed:
        return set_status(state, "Failed to remove", "warning"), ctx

    state = clamp_cursor(state, len(playlist.songs))
    session = ctx.session
    if session.playlist is not playlist:
        return set_status(state, f"Removed: {title}"), ctx

    if song_index < session.position:
        ctx = ctx.with_session(session._replace(position=session.position - 1))
    elif song_index == session.position:
        session, _ = playback.stop(session, ctx.player)
        ctx = ctx.with_session(session)
        return set_status(state, f"Removed: {title} (playback stopped)"), ctx
    return set_status(state, f"Removed: {title}"), ctx


# -- prompts -----------------------------------------------------------------


def _ask_search(state: UIState, ctx: AppContext) -> Result:
    return show_prompt(state, PromptKind.SEARCH, "Search: "), ctx


def _ask_create(state: UIState, ctx: AppContext) -> Result:
    return show_prompt(state, PromptKind.CREATE_PLAYLIST, "New playlist name: "), ctx


def _ask_delete(state: UIState, ctx: AppContext) -> Result:
    if len(ctx.store) == 0:
        return set_status(state, "No playlists to delete"), ctx
    index = _selected(state)
    name = ctx.store[index].name
    state = show_prompt(
        state, PromptKind.CONFIRM_DELETE, f"Delete '{name}'? (y/n): ", index=index
    )
    return state, ctx


def submit_prompt(state: UIState, ctx: AppContext, text: str) -> Result:
    """Act on the text entered at the open prompt."""
    prompt = state.prompt
    if prompt is None:
        return state, ctx
    state = hide_prompt(state)

    if prompt.kind is PromptKind.SEARCH:
        query = text.strip()
        if not query:
            return set_status(state, "Search cancelled"), ctx
        state = replace(state, search_query=query, pending_query=query)
        return set_status(state, f"Searching: {query} ..."), ctx

    if prompt.kind is PromptKind.CREATE_PLAYLIST:
        name = text.strip()
        if not name:
            return set_status(state, "Cancelled"), ctx
        return _create_playlist(state, ctx, name)

    if text[:1] in ("y", "Y"):
        return _delete_playlist(state, ctx, prompt.data["index"])
    return set_status(state, "Cancelled"), ctx


def cancel_prompt(state: UIState, ctx: AppContext) -> Result:
    prompt = state.prompt
    if prompt is None:
        return state, ctx
    text = "Search cancelled" if prompt.kind is PromptKind.SEARCH else "Cancelled"
    return set_status(hide_prompt(state), text), ctx


def run_pending_search(state: UIState, ctx: AppContext) -> Result:
    """Run the search queued by the search prompt (blocks until yt-dlp returns)."""
    query = state.pending_query
    if query is None:
        return state, ctx
    state = replace(state, pending_query=None)

    try:
        results = ctx.search(query, ctx.config.search.max_results)
    except SearchError as e:
        logger.warning(f"Search failed for {query!r}: {e}")
        return set_status(state, f"Search error: {e}", "error"), ctx

    state = replace(state, screen=Screen.SEARCH, search_results=results)
    state = reset_cursor(state, Screen.SEARCH)
    ctx = ctx.with_session(playback.rebind_results(ctx.session, results))
    if not results:
        return set_status(state, f"No results for: {query}"), ctx
    return set_status(state, f"Found {len(results)} results for: {query}"), ctx


# -- dispatch ----------------------------------------------------------------


def _activate_search(state: UIState, ctx: AppContext) -> Result:
    if not state.search_results:
        return set_status(state, "No results, press / to search"), ctx
    return _start_playback(state, ctx, PlaybackSource.SEARCH, _selected(state))


def _activate_song(state: UIState, ctx: AppContext) -> Result:
    return _start_playback(state, ctx, PlaybackSource.PLAYLIST, _selected(state))


def _quit(state: UIState, ctx: AppContext) -> Result:
    return replace(state, should_quit=True), ctx


def _help(state: UIState, ctx: AppContext) -> Result:
    return show_help(state), ctx


# Run before the per-screen handlers, on every screen
GLOBAL_HANDLERS: dict[Intent, Handler] = {
    Intent.QUIT: _quit,
    Intent.HELP: _help,
    Intent.TOGGLE_PAUSE: _toggle_pause,
    Intent.NEXT: _next,
    Intent.PREV: _prev,
    Intent.BACK: go_back,
}

LIST_HANDLERS: dict[Intent, Handler] = {
    Intent.MOVE_UP: _move_by(lambda state: -1),
    Intent.MOVE_DOWN: _move_by(lambda state: 1),
    Intent.PAGE_UP: _move_by(lambda state: -state.list_height),
    Intent.PAGE_DOWN: _move_by(lambda state: state.list_height),
    Intent.HOME: _home,
    Intent.END: _end,
}

SCREEN_HANDLERS: dict[Screen, dict[Intent, Handler]] = {
    Screen.SEARCH: {
        Intent.ACTIVATE: _activate_search,
        Intent.SEARCH: _ask_search,
        Intent.STOP: _stop,
        Intent.OPEN_PLAYLISTS: _open_playlists,
        Intent.ADD_SELECTED: _begin_add,
        Intent.CREATE_PLAYLIST: _ask_create,
    },
    Screen.PLAYLISTS: {
        Intent.ACTIVATE: _open_selected_playlist,
        Intent.CREATE_PLAYLIST: _ask_create,
        Intent.DELETE_PLAYLIST: _ask_delete,
    },
    Screen.PLAYLIST_SONGS: {
        Intent.ACTIVATE: _activate_song,
        Intent.REMOVE_SONG: _remove_song,
        Intent.STOP: _stop,
    },
    Screen.ADD_TO_PLAYLIST: {
        Intent.ACTIVATE: _add_to_selected,
        Intent.CREATE_PLAYLIST: _ask_create,
    },
}


def handle_intent(state: UIState, ctx: AppContext, intent: Intent) -> Result:
    """Dispatch one intent; intents the current screen does not support are ignored."""
    handler = (
        GLOBAL_HANDLERS.get(intent)
        or SCREEN_HANDLERS[state.screen].get(intent)
        or LIST_HANDLERS.get(intent)
    )
    if handler is None:
        return state, ctx
    return handler(state, ctx)
