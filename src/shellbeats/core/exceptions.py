"""Exceptions shared by the library, playback and search layers."""


class ShellbeatsError(Exception):
    """Base exception for shellbeats."""

    pass


class LibraryError(ShellbeatsError):
    """Base exception for playlist library operations."""

    pass


class LibraryInitError(LibraryError):
    """Raised when the config directory tree cannot be created."""

    pass


class InvalidNameError(LibraryError):
    """Raised when a playlist name is empty after trimming."""

    pass


class DuplicateNameError(LibraryError):
    """Raised when a playlist with the same name (any case) exists."""

    def __init__(self, name: str, message: str = None):
        self.name = name
        super().__init__(message or f"Playlist already exists: {name}")


class OutOfRangeError(LibraryError):
    """Raised when an index no longer points at a valid entry."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Index {index} out of range (size {size})")


class PersistenceError(LibraryError):
    """Raised when writing library state to disk fails."""

    pass


class PlayerError(ShellbeatsError):
    """Base exception for mpv control errors."""

    pass


class ProtocolUnavailableError(PlayerError):
    """Raised when the mpv IPC socket cannot be reached."""

    pass


class SearchError(ShellbeatsError):
    """Raised when the yt-dlp search fails."""

    pass
