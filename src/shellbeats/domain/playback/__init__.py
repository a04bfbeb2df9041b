"""Playback domain - mpv integration and session state.

This domain handles:
- mpv process and JSON IPC connection
- End-of-track detection with a grace period after each load
- Playback session transitions (play, pause, next/prev, stop)
"""

# mpv integration
from .ipc import (
    PlayerConnection,
    check_mpv_available,
    drain_events,
    ensure_player_running,
    load_url,
    poll_track_end,
    quit_player,
    send_command,
    stop_playback,
)

# Session management
from .session import (
    MIN_PLAYBACK_TIME,
    PlaybackSession,
    PlaybackSource,
    advance,
    check_track_finished,
    current_song,
    is_playing,
    mark_finished,
    play_from_playlist,
    play_from_search,
    state,
    stop,
    toggle_pause,
)

__all__ = [
    # IPC
    "PlayerConnection",
    "check_mpv_available",
    "drain_events",
    "ensure_player_running",
    "load_url",
    "poll_track_end",
    "quit_player",
    "send_command",
    "stop_playback",
    # Session
    "MIN_PLAYBACK_TIME",
    "PlaybackSession",
    "PlaybackSource",
    "advance",
    "check_track_finished",
    "current_song",
    "is_playing",
    "mark_finished",
    "play_from_playlist",
    "play_from_search",
    "state",
    "stop",
    "toggle_pause",
]
