"""
Playback session: what is playing, from which list, at which position.

Functional approach with explicit state: every transition takes the current
PlaybackSession and returns ``(new_session, changed)``. The session is never
persisted.
"""

import time
from enum import Enum
from typing import NamedTuple, Optional, Sequence

from loguru import logger

from shellbeats.core.exceptions import ProtocolUnavailableError
from shellbeats.domain.library.models import Playlist, Song

from . import ipc

# Minimum playback time before an end-of-file event is trusted (seconds)
MIN_PLAYBACK_TIME = 3.0


class PlaybackSource(Enum):
    NONE = "none"
    SEARCH = "search"
    PLAYLIST = "playlist"


class PlaybackSession(NamedTuple):
    """Immutable playback session.

    ``playlist`` is the playlist object itself, so deleting or creating other
    playlists never changes what is playing. Likewise ``results`` is the
    search-result list playback started from; a later search replaces the
    screen's list, not this one. ``finished`` marks a source that ran out of
    songs; source and position are kept for display.
    """

    source: PlaybackSource = PlaybackSource.NONE
    position: int = -1
    playlist: Optional[Playlist] = None
    results: Sequence[Song] = ()
    is_paused: bool = False
    started_at: Optional[float] = None
    finished: bool = False


def _songs_for(session: PlaybackSession) -> Sequence[Song]:
    if session.source is PlaybackSource.SEARCH:
        return session.results
    if session.source is PlaybackSource.PLAYLIST and session.playlist is not None:
        return session.playlist.songs
    return ()


def _start(
    session: PlaybackSession,
    conn: ipc.PlayerConnection,
    source: PlaybackSource,
    songs: Sequence[Song],
    index: int,
    playlist: Optional[Playlist],
    now: Optional[float],
) -> tuple[PlaybackSession, bool]:
    if not 0 <= index < len(songs):
        return session, False

    if not ipc.ensure_player_running(conn):
        raise ProtocolUnavailableError("mpv is not running and could not be started")

    song = songs[index]
    if not ipc.load_url(conn, song.url):
        raise ProtocolUnavailableError(f"Could not send '{song.title}' to mpv")

    logger.info(f"Playing [{source.value} #{index}] {song.title}")
    return (
        PlaybackSession(
            source=source,
            position=index,
            playlist=playlist,
            results=songs if source is PlaybackSource.SEARCH else (),
            is_paused=False,
            started_at=time.time() if now is None else now,
            finished=False,
        ),
        True,
    )


def play_from_search(
    session: PlaybackSession,
    conn: ipc.PlayerConnection,
    results: Sequence[Song],
    index: int,
    now: Optional[float] = None,
) -> tuple[PlaybackSession, bool]:
    """Play search result ``index``; out of range returns the session unchanged.

    Raises:
        ProtocolUnavailableError: If mpv cannot be started or reached
    """
    return _start(session, conn, PlaybackSource.SEARCH, results, index, None, now)


def play_from_playlist(
    session: PlaybackSession,
    conn: ipc.PlayerConnection,
    playlist: Playlist,
    index: int,
    now: Optional[float] = None,
) -> tuple[PlaybackSession, bool]:
    """Play song ``index`` of a loaded playlist.

    Raises:
        ProtocolUnavailableError: If mpv cannot be started or reached
    """
    return _start(
        session, conn, PlaybackSource.PLAYLIST, playlist.songs, index, playlist, now
    )


def toggle_pause(
    session: PlaybackSession, conn: ipc.PlayerConnection
) -> tuple[PlaybackSession, bool]:
    """Toggle pause; the flag flips as soon as the command is sent."""
    if session.source is PlaybackSource.NONE or session.finished:
        return session, False
    if not ipc.toggle_pause(conn):
        return session, False
    return session._replace(is_paused=not session.is_paused), True


def advance(
    session: PlaybackSession,
    conn: ipc.PlayerConnection,
    direction: int,
    now: Optional[float] = None,
) -> tuple[PlaybackSession, bool]:
    """Move to the next (+1) or previous (-1) song of the current source.

    Stepping past either end is a no-op that returns the same session.
    """
    if session.source is PlaybackSource.NONE:
        return session, False

    songs = _songs_for(session)
    target = session.position + direction
    if not 0 <= target < len(songs):
        return session, False

    return _start(
        session, conn, session.source, songs, target, session.playlist, now
    )


def stop(
    session: PlaybackSession, conn: ipc.PlayerConnection
) -> tuple[PlaybackSession, bool]:
    """Stop playback and reset to an idle session."""
    if session.source is PlaybackSource.NONE:
        return session, False
    ipc.stop_playback(conn)
    return PlaybackSession(), True


def mark_finished(session: PlaybackSession) -> PlaybackSession:
    """The last song of the source ended; keep source and position for display."""
    return session._replace(is_paused=False, finished=True)


def check_track_finished(
    session: PlaybackSession,
    conn: ipc.PlayerConnection,
    now: Optional[float] = None,
    grace: float = MIN_PLAYBACK_TIME,
) -> bool:
    """Poll mpv for a natural end of the current track.

    Events received within ``grace`` seconds of starting a track are
    discarded, since loading a new file can report the previous one ending.
    """
    if session.source is PlaybackSource.NONE or session.finished:
        return False
    if not ipc.reconnect(conn):
        return False

    now = time.time() if now is None else now
    if session.started_at is not None and now - session.started_at < grace:
        ipc.drain_events(conn)
        return False

    return ipc.poll_track_end(conn)


def current_song(session: PlaybackSession) -> Optional[Song]:
    songs = _songs_for(session)
    if 0 <= session.position < len(songs):
        return songs[session.position]
    return None


def rebind_results(
    session: PlaybackSession, results: Sequence[Song]
) -> PlaybackSession:
    """Move search playback onto a new result list if it contains the playing song.

    Otherwise the session keeps the list it started from.
    """
    song = current_song(session)
    if session.source is not PlaybackSource.SEARCH or song is None:
        return session
    for index, candidate in enumerate(results):
        if candidate.source_id == song.source_id:
            return session._replace(results=results, position=index)
    return session


def plays_from_results(session: PlaybackSession, results: Sequence[Song]) -> bool:
    return session.source is PlaybackSource.SEARCH and session.results is results


def is_playing(session: PlaybackSession) -> bool:
    """True while a track is loaded and not finished (paused counts)."""
    return session.source is not PlaybackSource.NONE and not session.finished


def state(session: PlaybackSession) -> str:
    """``idle``, ``playing`` or ``paused``."""
    if not is_playing(session):
        return "idle"
    return "paused" if session.is_paused else "playing"
