"""Library domain - playlists, songs and their on-disk files.

This domain handles:
- Song and playlist data model
- Reading and writing the playlist index and playlist files
- Playlist CRUD with rollback on failed writes
"""

from .codec import (
    MAX_RECORD_BYTES,
    IndexEntry,
    PlaylistRecord,
    decode_index,
    decode_playlist,
    encode_index,
    encode_playlist,
    escape_string,
    unescape_string,
)
from .models import UNKNOWN_TITLE, Playlist, Song, url_for
from .store import LibraryStore, storage_key_for

__all__ = [
    # Models
    "Song",
    "Playlist",
    "UNKNOWN_TITLE",
    "url_for",
    # Codec
    "MAX_RECORD_BYTES",
    "IndexEntry",
    "PlaylistRecord",
    "encode_index",
    "encode_playlist",
    "decode_index",
    "decode_playlist",
    "escape_string",
    "unescape_string",
    # Store
    "LibraryStore",
    "storage_key_for",
]
