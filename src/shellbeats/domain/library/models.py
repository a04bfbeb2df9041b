"""Song and playlist data model."""

from dataclasses import dataclass, field

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="

# Title used when a song arrives without one
UNKNOWN_TITLE = "Unknown"


def url_for(source_id: str) -> str:
    """Build the playback URL for a YouTube video id."""
    return f"{YOUTUBE_WATCH_URL}{source_id}"


@dataclass
class Song:
    """A remote track identified by its YouTube video id.

    ``duration`` is best-effort metadata in seconds; 0 means unknown.
    """

    title: str
    source_id: str
    duration: int = 0

    def __post_init__(self) -> None:
        if not self.title:
            self.title = UNKNOWN_TITLE
        if self.duration is None or self.duration < 0:
            self.duration = 0

    @property
    def url(self) -> str:
        return url_for(self.source_id)


@dataclass
class Playlist:
    """A named, ordered list of songs stored in its own file.

    ``songs`` is empty until the playlist file has been read; check
    ``loaded`` rather than ``len(songs)`` to tell the two apart.
    """

    name: str
    storage_key: str
    songs: list[Song] = field(default_factory=list)
    loaded: bool = False

    def contains(self, source_id: str) -> bool:
        return any(song.source_id == source_id for song in self.songs)
