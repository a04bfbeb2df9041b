"""Tests for playback session transitions."""

import pytest

from shellbeats.core.exceptions import ProtocolUnavailableError
from shellbeats.domain.library.models import Playlist
from shellbeats.domain.playback import ipc, session as playback
from shellbeats.domain.playback.ipc import PlayerConnection
from shellbeats.domain.playback.session import PlaybackSession, PlaybackSource


def _loaded_urls(player) -> list[str]:
    return [cmd[1] for cmd in player.commands if cmd[0] == "loadfile"]


class TestPlay:
    """Tests for starting playback."""

    def test_play_from_search(self, player, songs) -> None:
        """Playing a search result loads its URL and records the position."""
        session, changed = playback.play_from_search(PlaybackSession(), player, songs, 2, now=10.0)

        assert changed is True
        assert session.source is PlaybackSource.SEARCH
        assert session.position == 2
        assert session.started_at == 10.0
        assert session.is_paused is False
        assert _loaded_urls(player) == ["https://www.youtube.com/watch?v=vid00002"]

    def test_play_out_of_range_is_noop(self, player, songs) -> None:
        """An invalid index leaves the session unchanged and sends nothing."""
        start = PlaybackSession()
        session, changed = playback.play_from_search(start, player, songs, 9)
        assert changed is False
        assert session is start
        assert player.commands == []

    def test_play_from_playlist(self, player, songs) -> None:
        """Playlist playback keeps a reference to the playlist."""
        playlist = Playlist("Mix", "mix.json", songs=songs[:2], loaded=True)
        session, changed = playback.play_from_playlist(PlaybackSession(), player, playlist, 1)
        assert changed is True
        assert session.source is PlaybackSource.PLAYLIST
        assert session.playlist is playlist
        assert playback.current_song(session) is songs[1]

    def test_player_unavailable_raises(self, player, songs) -> None:
        """When mpv cannot be started, ProtocolUnavailableError is raised."""
        player.connected = False
        with pytest.raises(ProtocolUnavailableError):
            playback.play_from_search(PlaybackSession(), player, songs, 0)

    def test_new_track_clears_finished_and_pause(self, player, songs) -> None:
        """Starting a track resets the paused and finished flags."""
        start = PlaybackSession(PlaybackSource.SEARCH, 4, finished=True, is_paused=True)
        session, _ = playback.play_from_search(start, player, songs, 0)
        assert session.finished is False
        assert session.is_paused is False


class TestAdvance:
    """Tests for next/previous."""

    def test_auto_advance_through_end(self, player, songs) -> None:
        """Playing 2 then advancing reaches 3, 4, then stops moving."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 2)
        session, changed = playback.advance(session, player, +1)
        assert (changed, session.position) == (True, 3)
        session, changed = playback.advance(session, player, +1)
        assert (changed, session.position) == (True, 4)

        end, changed = playback.advance(session, player, +1)
        assert changed is False
        assert end is session
        assert len(_loaded_urls(player)) == 3

    def test_prev_at_first_is_noop(self, player, songs) -> None:
        """Previous at position 0 does nothing."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 0)
        same, changed = playback.advance(session, player, -1)
        assert changed is False
        assert same.position == 0

    def test_prev_moves_back(self, player, songs) -> None:
        """Previous loads the song before the current one."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 3)
        session, _ = playback.advance(session, player, -1)
        assert session.position == 2
        assert _loaded_urls(player)[-1].endswith("vid00002")

    def test_idle_session_does_not_advance(self, player, songs) -> None:
        """Next without anything playing is a no-op."""
        session, changed = playback.advance(PlaybackSession(), player, +1)
        assert changed is False
        assert player.commands == []

    def test_playlist_source_uses_playlist_songs(self, player, songs) -> None:
        """Advancing in a playlist ignores the search results."""
        playlist = Playlist("Mix", "mix.json", songs=songs[3:], loaded=True)
        session, _ = playback.play_from_playlist(PlaybackSession(), player, playlist, 0)
        session, changed = playback.advance(session, player, +1)
        assert changed is True
        assert playback.current_song(session) is songs[4]

    def test_prev_after_finished(self, player, songs) -> None:
        """A finished source still allows stepping back."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 4)
        session = playback.mark_finished(session)
        assert playback.advance(session, player, +1)[1] is False
        session, changed = playback.advance(session, player, -1)
        assert changed is True
        assert session.position == 3
        assert session.finished is False


class TestPauseStop:
    """Tests for pause and stop."""

    def test_toggle_pause_flips_flag(self, player, songs) -> None:
        """Toggling twice returns to playing."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 0)
        session, _ = playback.toggle_pause(session, player)
        assert playback.state(session) == "paused"
        session, _ = playback.toggle_pause(session, player)
        assert playback.state(session) == "playing"
        assert player.commands[-1] == ["cycle", "pause"]

    def test_toggle_pause_when_idle(self, player) -> None:
        """Pause with nothing playing sends nothing."""
        session, changed = playback.toggle_pause(PlaybackSession(), player)
        assert changed is False
        assert player.commands == []

    def test_toggle_pause_send_failure(self, player, songs) -> None:
        """The flag does not flip when the command cannot be sent."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 0)
        player.connected = False
        same, changed = playback.toggle_pause(session, player)
        assert changed is False
        assert same.is_paused is False

    def test_stop_resets_session(self, player, songs) -> None:
        """Stop sends the stop command and returns an idle session."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 1)
        session, changed = playback.stop(session, player)
        assert changed is True
        assert session == PlaybackSession()
        assert player.commands[-1] == ["stop"]
        assert playback.state(session) == "idle"

    def test_stop_when_idle(self, player) -> None:
        """Stop with nothing playing is a no-op."""
        assert playback.stop(PlaybackSession(), player)[1] is False

    def test_mark_finished(self, songs, player) -> None:
        """A finished session keeps its position but is no longer playing."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 4)
        session = playback.mark_finished(session)
        assert session.position == 4
        assert session.source is PlaybackSource.SEARCH
        assert playback.is_playing(session) is False
        assert playback.state(session) == "idle"


class TestResultList:
    """Tests for the search-result list owned by the session."""

    def test_session_keeps_its_results(self, player, songs) -> None:
        """Advancing uses the list playback started from."""
        results = list(songs)
        session, _ = playback.play_from_search(PlaybackSession(), player, results, 3)
        results.clear()
        assert playback.plays_from_results(session, results)
        session, changed = playback.advance(session, player, +1)
        assert changed is False

    def test_rebind_finds_playing_song(self, player, songs) -> None:
        """A new list containing the playing song takes over at its new row."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 3)
        fresh = [songs[0], songs[3]]
        rebound = playback.rebind_results(session, fresh)
        assert rebound.position == 1
        assert playback.plays_from_results(rebound, fresh)
        assert playback.current_song(rebound) is songs[3]

    def test_rebind_without_playing_song(self, player, songs) -> None:
        """A new list without the playing song leaves the session alone."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 4)
        fresh = songs[:2]
        assert playback.rebind_results(session, fresh) is session
        assert playback.plays_from_results(session, fresh) is False
        assert playback.current_song(session) is songs[4]

    def test_rebind_ignores_playlist_playback(self, player, songs) -> None:
        """Playlist playback is not affected by searches."""
        playlist = Playlist("Mix", "mix.json", songs=songs[:2], loaded=True)
        session, _ = playback.play_from_playlist(PlaybackSession(), player, playlist, 0)
        assert playback.rebind_results(session, songs) is session


class TestTrackFinished:
    """Tests for end-of-track polling."""

    def test_events_inside_grace_period_are_drained(
        self, player, songs, monkeypatch
    ) -> None:
        """End events right after a load are discarded."""
        drained = []
        monkeypatch.setattr(ipc, "drain_events", lambda conn: drained.append(conn))
        monkeypatch.setattr(ipc, "poll_track_end", lambda conn: True)
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 0, now=100.0)

        assert playback.check_track_finished(session, player, now=101.0) is False
        assert drained == [player]
        assert playback.check_track_finished(session, player, now=103.5) is True

    def test_idle_or_finished_never_polls(self, player, songs, monkeypatch) -> None:
        """Nothing is polled unless a track is playing."""
        monkeypatch.setattr(ipc, "poll_track_end", lambda conn: True)
        assert playback.check_track_finished(PlaybackSession(), player) is False
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 0, now=0.0)
        finished = playback.mark_finished(session)
        assert playback.check_track_finished(finished, player, now=10.0) is False

    def test_disconnected_player(self, player, songs) -> None:
        """A dropped connection is not mistaken for a finished track."""
        session, _ = playback.play_from_search(PlaybackSession(), player, songs, 0, now=0.0)
        player.connected = False
        assert playback.check_track_finished(session, player, now=10.0) is False

    def test_real_socket_eof(self, socket_pair, songs) -> None:
        """An eof event on the socket ends the track after the grace period."""
        client, server = socket_pair
        conn = PlayerConnection(socket_path="/unused")
        conn.attach(client)
        session = PlaybackSession(PlaybackSource.SEARCH, 0, started_at=0.0)

        server.sendall(b'{"event": "end-file", "reason": "eof"}\n')
        assert playback.check_track_finished(session, conn, now=1.0) is False

        server.sendall(b'{"event": "end-file", "reason": "eof"}\n')
        assert playback.check_track_finished(session, conn, now=5.0) is True
