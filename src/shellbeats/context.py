"""Application context for explicit state passing.

The playlist library and the mpv connection are long-lived resources shared
by reference; the playback session is an immutable value replaced on every
transition via ``with_session``.
"""

from dataclasses import dataclass, field, replace
from typing import Callable

from shellbeats.core.config import Config
from shellbeats.domain.library.models import Song
from shellbeats.domain.library.store import LibraryStore
from shellbeats.domain.playback.ipc import PlayerConnection
from shellbeats.domain.playback.session import PlaybackSession
from shellbeats.domain.search import search

SearchFunc = Callable[[str, int], list[Song]]


@dataclass(frozen=True)
class AppContext:
    """Application resources and playback session passed to UI handlers.

    Attributes:
        config: Application configuration
        store: Playlist library
        player: mpv connection
        session: Current playback session
        search: Search function (query, max_results) -> songs
    """

    config: Config
    store: LibraryStore
    player: PlayerConnection
    session: PlaybackSession = field(default_factory=PlaybackSession)
    search: SearchFunc = search

    @classmethod
    def create(cls, config: Config) -> "AppContext":
        """Create the initial context from configuration."""
        return cls(
            config=config,
            store=LibraryStore(config.library_dir),
            player=PlayerConnection.from_config(config.player),
        )

    def with_session(self, session: PlaybackSession) -> "AppContext":
        """Return new context with an updated playback session."""
        return replace(self, session=session)
