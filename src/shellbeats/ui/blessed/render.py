"""
Frame rendering for the blessed UI.

Layout (rows):
    0            title and key hints for the current screen
    1            separator
    2            screen info (query, playlist name)
    3            status line
    4            separator
    5..h-3       list
    h-2          separator
    h-1          now playing, or the open prompt
"""

import sys
from typing import Optional

from blessed import Terminal

from shellbeats import __version__
from shellbeats.context import AppContext
from shellbeats.domain.library.models import Song
from shellbeats.domain.playback import session as playback
from shellbeats.domain.playback.session import PlaybackSource
from shellbeats.ui.blessed.helpers.scrolling import calculate_scroll_offset
from shellbeats.ui.blessed.helpers.terminal import truncate, write_at
from shellbeats.ui.blessed.navigation import list_size, open_playlist
from shellbeats.ui.blessed.state import Screen, UIState, get_cursor

LIST_TOP = 5
# Rows used by everything except the list
CHROME_HEIGHT = 7

SCREEN_HINTS = {
    Screen.SEARCH: "/: search | Enter: play | Space: pause | n/p: next/prev | f: playlists | a: add | q: quit",
    Screen.PLAYLISTS: "Enter: open | c: create | x: delete | Esc: back | q: quit",
    Screen.PLAYLIST_SONGS: "Enter: play | d: remove song | Esc: back | q: quit",
    Screen.ADD_TO_PLAYLIST: "Enter: add to playlist | c: create new | Esc: cancel",
}

HELP_SECTIONS = [
    (
        "GLOBAL CONTROLS:",
        [
            ("/", "Search YouTube"),
            ("Enter", "Play selected / Open playlist"),
            ("Space", "Pause/Resume playback"),
            ("n", "Next track"),
            ("p", "Previous track"),
            ("x", "Stop playback"),
            ("Up/Down/j/k", "Navigate list"),
            ("PgUp/PgDn", "Page up/down"),
            ("g/G", "Go to start/end"),
            ("h or ?", "Show this help"),
            ("q", "Quit"),
        ],
    ),
    (
        "PLAYLIST CONTROLS:",
        [
            ("f", "Open playlists menu"),
            ("a", "Add song to playlist"),
            ("c", "Create new playlist"),
            ("d", "Remove song from playlist"),
            ("x", "Delete playlist"),
            ("Esc", "Go back"),
        ],
    ),
]


def format_duration(seconds: int) -> str:
    """Format a duration as MM:SS, or H:MM:SS from one hour; unknown is --:--."""
    if not seconds or seconds <= 0:
        return "--:--"
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def compute_list_height(term_height: int) -> int:
    return max(1, term_height - CHROME_HEIGHT)


def playing_mark(state: UIState, ctx: AppContext, screen: Screen, row: int) -> str:
    """``>`` for the playing row, ``|`` when paused, blank otherwise."""
    session = ctx.session
    if not playback.is_playing(session) or row != session.position:
        return " "
    if screen is Screen.SEARCH and playback.plays_from_results(
        session, state.search_results
    ):
        return "|" if session.is_paused else ">"
    if (
        screen is Screen.PLAYLIST_SONGS
        and session.source is PlaybackSource.PLAYLIST
        and open_playlist(state, ctx) is session.playlist
    ):
        return "|" if session.is_paused else ">"
    return " "


def _row_labels(state: UIState, ctx: AppContext, width: int) -> list[str]:
    """Text of every row in the current screen's list."""
    if state.screen is Screen.SEARCH:
        return [_song_row(song, width) for song in state.search_results]
    if state.screen is Screen.PLAYLIST_SONGS:
        playlist = open_playlist(state, ctx)
        songs = playlist.songs if playlist is not None else []
        return [_song_row(song, width) for song in songs]

    rows = []
    for playlist in ctx.store.playlists:
        count = f"({len(playlist.songs)} songs)" if playlist.loaded else ""
        rows.append(f"{truncate(playlist.name, width - 16)} {count}".rstrip())
    return rows


def _song_row(song: Song, width: int) -> str:
    duration = format_duration(song.duration)
    title_width = max(20, width - len(duration) - 8)
    return f"{truncate(song.title, title_width):<{title_width}}  {duration}"


def render_header(term: Terminal, state: UIState) -> None:
    title = term.bold(f" ShellBeats v{__version__} ")
    write_at(term, 0, 0, title + "| " + truncate(SCREEN_HINTS[state.screen], term.width - 20))
    write_at(term, 0, 1, "─" * term.width)


def render_info(term: Terminal, state: UIState, ctx: AppContext) -> None:
    if state.screen is Screen.SEARCH:
        query = state.search_query or "(none)"
        info = "Query: " + term.bold(truncate(query, term.width - 30))
        count = f"Results: {len(state.search_results)}"
        write_at(term, 0, 2, info)
        write_at(term, max(0, term.width - 20), 2, count, clear=False)
    elif state.screen is Screen.PLAYLISTS:
        write_at(term, 0, 2, f"Playlists: {len(ctx.store)}")
    elif state.screen is Screen.PLAYLIST_SONGS:
        playlist = open_playlist(state, ctx)
        name = playlist.name if playlist is not None else "?"
        write_at(term, 0, 2, "Playlist: " + term.bold(truncate(name, term.width - 20)))
    else:
        title = state.song_to_add.title if state.song_to_add else "?"
        write_at(term, 0, 2, "Add: " + term.bold(truncate(title, term.width - 10)))

    status = state.status
    if status.text:
        line = truncate(f">>> {status.text}", term.width)
        write_at(term, 0, 3, term.red(line) if status.is_error else line)
    else:
        write_at(term, 0, 3, "")
    write_at(term, 0, 4, "─" * term.width)


def render_list(term: Terminal, state: UIState, ctx: AppContext) -> None:
    labels = _row_labels(state, ctx, term.width - 4)
    cursor = get_cursor(state)
    total = list_size(state, ctx)
    scroll = calculate_scroll_offset(
        cursor.selected, cursor.scroll, state.list_height, total
    )

    for i in range(state.list_height):
        y = LIST_TOP + i
        row = scroll + i
        if row >= len(labels):
            write_at(term, 0, y, "")
            continue
        mark = playing_mark(state, ctx, state.screen, row)
        line = f" {mark} {labels[row]}"
        if mark != " ":
            line = term.bold(line)
        if row == cursor.selected:
            line = term.reverse(line)
        write_at(term, 0, y, line)


def render_footer(term: Terminal, state: UIState, ctx: AppContext) -> None:
    y = term.height - 1
    write_at(term, 0, y - 1, "─" * term.width)

    if state.prompt is not None:
        prompt = state.prompt
        text = truncate(prompt.text, term.width - len(prompt.label) - 2)
        write_at(term, 0, y, term.bold(prompt.label) + text + term.bold_white("█"))
        return

    song: Optional[Song] = playback.current_song(ctx.session)
    if song is None or not playback.is_playing(ctx.session):
        write_at(term, 0, y, "")
        return

    paused = " [PAUSED]" if ctx.session.is_paused else ""
    title = truncate(song.title, term.width - 20 - len(paused))
    write_at(term, 0, y, " Now playing: " + term.bold(title) + paused)


def render_help(term: Terminal) -> None:
    sys.stdout.write(term.home + term.clear)
    y = 2
    write_at(term, 2, y, term.bold(f"ShellBeats v{__version__} | Help"))
    y += 2
    for heading, rows in HELP_SECTIONS:
        write_at(term, 4, y, heading)
        y += 1
        for keys, description in rows:
            write_at(term, 6, y, f"{keys:<12}{description}")
            y += 1
        y += 1
    write_at(term, 4, y, "Requirements: yt-dlp, mpv")
    write_at(term, 2, term.height - 2, term.reverse(" Press any key to continue... "))


def render_frame(term: Terminal, state: UIState, ctx: AppContext) -> None:
    """Draw the whole screen for the current state."""
    if state.help_visible:
        render_help(term)
    else:
        render_header(term, state)
        render_info(term, state, ctx)
        render_list(term, state, ctx)
        render_footer(term, state, ctx)
    sys.stdout.flush()
