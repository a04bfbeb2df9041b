"""
Playlist library: in-memory catalog backed by an index file and one file
per playlist.

Every mutation writes the affected file before returning. When the write
fails, the in-memory change is rolled back and PersistenceError is raised.
"""

from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from shellbeats.core.exceptions import (
    DuplicateNameError,
    InvalidNameError,
    LibraryInitError,
    OutOfRangeError,
    PersistenceError,
)

from .codec import (
    MAX_RECORD_BYTES,
    IndexEntry,
    decode_index,
    decode_playlist,
    encode_index,
    encode_playlist,
)
from .models import UNKNOWN_TITLE, Playlist, Song

INDEX_FILENAME = "playlists.json"
PLAYLISTS_DIRNAME = "playlists"
STORAGE_SUFFIX = ".json"


def storage_key_for(name: str) -> str:
    """Derive a playlist file name from its display name.

    Lowercases letters, keeps ASCII letters/digits/``-``/``_``, turns spaces
    into underscores and drops everything else.

    Example:
        "Road Trip!" -> "road_trip.json"
    """
    kept = []
    for ch in name:
        if ch.isascii() and (ch.isalnum() or ch in "-_"):
            kept.append(ch.lower())
        elif ch == " ":
            kept.append("_")
    return "".join(kept) + STORAGE_SUFFIX


def _read_text(path: Path) -> str:
    """Read a library file, returning "" if it is missing, oversized or unreadable."""
    try:
        if path.stat().st_size > MAX_RECORD_BYTES:
            logger.warning(f"Ignoring oversized library file: {path}")
            return ""
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return ""
    except OSError as e:
        logger.warning(f"Failed to read {path}: {e}")
        return ""


class LibraryStore:
    """Owns the ordered list of playlists and keeps it in sync with disk."""

    def __init__(self, root_dir: Path):
        self.root_dir = Path(root_dir)
        self.index_path = self.root_dir / INDEX_FILENAME
        self.playlists_dir = self.root_dir / PLAYLISTS_DIRNAME
        self.playlists: list[Playlist] = []

    def __len__(self) -> int:
        return len(self.playlists)

    def __getitem__(self, index: int) -> Playlist:
        return self.playlist_at(index)

    # -- setup ---------------------------------------------------------------

    def ensure_layout(self) -> None:
        """Create the library directories and an empty index if missing.

        Raises:
            LibraryInitError: If the directories cannot be created
        """
        try:
            self.playlists_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LibraryInitError(
                f"Failed to initialize library directory {self.root_dir}: {e}"
            ) from e

        if not self.index_path.exists():
            try:
                self.index_path.write_text(encode_index([]), encoding="utf-8")
            except OSError as e:
                logger.warning(f"Could not create empty index {self.index_path}: {e}")

    def load(self) -> None:
        """Load playlist names from the index; songs are read on demand."""
        entries = decode_index(_read_text(self.index_path))
        self.playlists = [
            Playlist(name=entry.name, storage_key=entry.storage_key)
            for entry in entries
        ]
        logger.info(f"Loaded {len(self.playlists)} playlists from {self.index_path}")

    def load_songs(self, playlist: Union[int, Playlist]) -> Playlist:
        """Read a playlist's songs unless they are already in memory."""
        if isinstance(playlist, int):
            playlist = self.playlist_at(playlist)
        if playlist.loaded:
            return playlist

        record = decode_playlist(_read_text(self._playlist_path(playlist)))
        playlist.songs = record.songs
        playlist.loaded = True
        logger.debug(f"Loaded {len(playlist.songs)} songs for '{playlist.name}'")
        return playlist

    # -- queries -------------------------------------------------------------

    def playlist_at(self, index: int) -> Playlist:
        if not 0 <= index < len(self.playlists):
            raise OutOfRangeError(index, len(self.playlists))
        return self.playlists[index]

    def find(self, name: str) -> Optional[int]:
        """Index of the playlist named ``name`` (case-insensitive), or None."""
        wanted = name.strip().casefold()
        for i, playlist in enumerate(self.playlists):
            if playlist.name.casefold() == wanted:
                return i
        return None

    def index_of(self, playlist: Playlist) -> Optional[int]:
        """Current index of a playlist object, or None once it is deleted."""
        for i, candidate in enumerate(self.playlists):
            if candidate is playlist:
                return i
        return None

    # -- mutations -----------------------------------------------------------

    def create(self, name: str) -> int:
        """Create an empty playlist and return its index.

        Raises:
            InvalidNameError: If the name is blank
            DuplicateNameError: If a playlist with that name exists (any case)
            PersistenceError: If the index or playlist file cannot be written
        """
        name = name.strip()
        if not name:
            raise InvalidNameError("Playlist name cannot be empty")
        if self.find(name) is not None:
            raise DuplicateNameError(name)

        playlist = Playlist(
            name=name,
            storage_key=self._unique_storage_key(name),
            loaded=True,
        )
        self.playlists.append(playlist)
        index = len(self.playlists) - 1

        try:
            self._write_index()
            self._write_playlist(playlist)
        except PersistenceError:
            self.playlists.pop(index)
            self._rewrite_index_quietly()
            raise

        logger.info(f"Created playlist '{name}' ({playlist.storage_key})")
        return index

    def delete(self, index: int) -> Playlist:
        """Delete a playlist and its file; later playlists shift down by one."""
        playlist = self.playlist_at(index)

        self.playlists.pop(index)
        try:
            self._write_index()
        except PersistenceError:
            self.playlists.insert(index, playlist)
            raise

        path = self._playlist_path(playlist)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Could not remove playlist file {path}, left orphaned: {e}")

        logger.info(f"Deleted playlist '{playlist.name}'")
        return playlist

    def add_song(self, playlist_index: int, song: Song) -> bool:
        """Append a song unless a song with the same source id is present.

        Returns:
            True if the song was added, False if it was a duplicate or had
            no source id
        """
        playlist = self.load_songs(playlist_index)

        if not song.source_id or playlist.contains(song.source_id):
            return False

        playlist.songs.append(replace(song, title=song.title or UNKNOWN_TITLE))
        try:
            self._write_playlist(playlist)
        except PersistenceError:
            playlist.songs.pop()
            raise

        logger.info(f"Added '{song.title}' to '{playlist.name}'")
        return True

    def remove_song(self, playlist_index: int, song_index: int) -> bool:
        """Remove the song at song_index; False if either index is invalid."""
        if not 0 <= playlist_index < len(self.playlists):
            return False
        playlist = self.load_songs(playlist_index)
        if not 0 <= song_index < len(playlist.songs):
            return False

        removed = playlist.songs.pop(song_index)
        try:
            self._write_playlist(playlist)
        except PersistenceError:
            playlist.songs.insert(song_index, removed)
            raise

        logger.info(f"Removed '{removed.title}' from '{playlist.name}'")
        return True

    # -- persistence ---------------------------------------------------------

    def _playlist_path(self, playlist: Playlist) -> Path:
        return self.playlists_dir / playlist.storage_key

    def _unique_storage_key(self, name: str) -> str:
        key = storage_key_for(name)
        taken = {playlist.storage_key for playlist in self.playlists}
        ordinal = len(self.playlists)
        while key in taken:
            key = f"{ordinal}_{key}"
        return key

    def _write_index(self) -> None:
        entries = [IndexEntry(p.name, p.storage_key) for p in self.playlists]
        self._write(self.index_path, encode_index(entries))

    def _write_playlist(self, playlist: Playlist) -> None:
        self._write(self._playlist_path(playlist), encode_playlist(playlist.name, playlist.songs))

    def _write(self, path: Path, content: str) -> None:
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise PersistenceError(f"Failed to write {path.name}: {e}") from e

    def _rewrite_index_quietly(self) -> None:
        try:
            self._write_index()
        except PersistenceError:
            pass
