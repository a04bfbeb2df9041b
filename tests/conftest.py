"""Shared fixtures: temporary library, fake mpv connection, sample songs."""

import shutil
import socket
import tempfile
from pathlib import Path

import pytest

from shellbeats.context import AppContext
from shellbeats.core.config import Config, LibraryConfig
from shellbeats.domain.library.models import Song
from shellbeats.domain.library.store import LibraryStore
from shellbeats.domain.playback.ipc import PlayerConnection


class FakePlayer(PlayerConnection):
    """PlayerConnection that records commands instead of talking to mpv."""

    def __init__(self) -> None:
        super().__init__(
            socket_path="/nonexistent/shellbeats-test.sock",
            mpv_binary="/nonexistent/mpv",
            launch_attempts=1,
            launch_interval=0.0,
            quit_grace=0.0,
        )
        self.commands: list[list] = []
        self.connected = True

    @property
    def is_connected(self) -> bool:
        return self.connected

    def send(self, args) -> bool:
        if not self.connected:
            return False
        self.commands.append(list(args))
        return True

    def connect(self) -> bool:
        return False


@pytest.fixture
def player() -> FakePlayer:
    """Connected fake player."""
    return FakePlayer()


@pytest.fixture
def songs() -> list[Song]:
    """Five search results with valid ids."""
    return [Song(title=f"Song {i}", source_id=f"vid{i:05d}", duration=60 * i) for i in range(5)]


@pytest.fixture
def store(tmp_path: Path) -> LibraryStore:
    """Empty library in a temporary directory."""
    library = LibraryStore(tmp_path / "library")
    library.ensure_layout()
    library.load()
    return library


@pytest.fixture
def ctx(tmp_path: Path, store: LibraryStore, player: FakePlayer) -> AppContext:
    """Application context backed by the temporary library and fake player."""
    config = Config(library=LibraryConfig(root_dir=str(tmp_path / "library")))
    return AppContext(config=config, store=store, player=player)


@pytest.fixture
def socket_dir():
    """Short temporary directory for Unix socket paths (path length is limited)."""
    path = tempfile.mkdtemp(prefix="sb", dir="/tmp")
    yield Path(path)
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def socket_pair():
    """Connected Unix socket pair: (client side, mpv side)."""
    client, server = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
    yield client, server
    client.close()
    server.close()
