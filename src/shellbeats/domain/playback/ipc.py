"""
mpv integration over its JSON IPC socket.

One long-lived connection is kept open in non-blocking mode so the UI loop
can poll for end-of-track events without stalling. Commands are
fire-and-forget: mpv's replies arrive on the same stream and are skipped by
the event reader.
"""

import json
import os
import socket
import subprocess
import time
from typing import Any, Optional, Sequence

from loguru import logger

from shellbeats.core.config import PlayerConfig

RECV_CHUNK = 4096
ONE_SHOT_TIMEOUT = 2.0
TERMINATE_TIMEOUT = 1.0

EOF_OBSERVER_ID = 1


def encode_command(args: Sequence[Any]) -> bytes:
    """Serialize one IPC command as a newline-terminated JSON line."""
    return (json.dumps({"command": list(args)}) + "\n").encode("utf-8")


class PlayerConnection:
    """Socket, process and read buffer for one mpv instance."""

    def __init__(
        self,
        socket_path: str,
        mpv_binary: str = "mpv",
        extra_args: Sequence[str] = (),
        launch_attempts: int = 100,
        launch_interval: float = 0.05,
        quit_grace: float = 0.1,
    ):
        self.socket_path = socket_path
        self.mpv_binary = mpv_binary
        self.extra_args = list(extra_args)
        self.launch_attempts = launch_attempts
        self.launch_interval = launch_interval
        self.quit_grace = quit_grace
        self.process: Optional[subprocess.Popen] = None
        self.sock: Optional[socket.socket] = None
        self.buffer = b""

    @classmethod
    def from_config(cls, config: PlayerConfig) -> "PlayerConnection":
        return cls(
            socket_path=config.socket_path,
            mpv_binary=config.mpv_binary,
            extra_args=config.extra_args,
            launch_attempts=config.launch_attempts,
            launch_interval=config.launch_interval,
            quit_grace=config.quit_grace,
        )

    @property
    def is_connected(self) -> bool:
        return self.sock is not None

    def connect(self) -> bool:
        """Connect to the socket path and subscribe to end-of-file changes."""
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(self.socket_path)
        except OSError as e:
            sock.close()
            logger.debug(f"Could not connect to mpv socket {self.socket_path}: {e}")
            return False
        self.attach(sock)
        return True

    def attach(self, sock: socket.socket) -> None:
        """Adopt an already connected socket."""
        self.disconnect()
        sock.setblocking(False)
        self.sock = sock
        self.buffer = b""
        self.send(["observe_property", EOF_OBSERVER_ID, "eof-reached"])

    def send(self, args: Sequence[Any]) -> bool:
        if self.sock is None:
            return False
        try:
            self.sock.sendall(encode_command(args))
            return True
        except OSError as e:
            logger.warning(f"mpv connection lost while sending {args[0]}: {e}")
            self.disconnect()
            return False

    def disconnect(self) -> None:
        if self.sock is not None:
            try:
                self.sock.close()
            except OSError:
                pass
        self.sock = None
        self.buffer = b""

    def teardown(self) -> None:
        """Disconnect, stop a process this connection launched and remove the socket file."""
        self.disconnect()

        if self.process is not None:
            try:
                self.process.terminate()
                self.process.wait(timeout=TERMINATE_TIMEOUT)
            except subprocess.TimeoutExpired:
                self.process.kill()
                self.process.wait()
            except OSError:
                pass
            self.process = None

        _remove_socket_file(self.socket_path)


def _remove_socket_file(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove mpv socket {path}: {e}")


def check_mpv_available(mpv_binary: str = "mpv") -> bool:
    """Check if mpv is available on the system."""
    try:
        result = subprocess.run(
            [mpv_binary, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def build_launch_command(conn: PlayerConnection) -> list[str]:
    return [
        conn.mpv_binary,
        "--no-video",
        "--idle=yes",
        "--force-window=no",
        "--really-quiet",
        f"--input-ipc-server={conn.socket_path}",
        *conn.extra_args,
    ]


def ensure_player_running(conn: PlayerConnection) -> bool:
    """Make sure an mpv instance is listening and connected.

    Reuses an existing endpoint when one answers; otherwise removes a stale
    socket file, launches mpv and waits for the socket to appear.

    Returns:
        True once connected, False if mpv could not be started or reached
    """
    if conn.is_connected:
        return True

    if os.path.exists(conn.socket_path):
        if conn.connect():
            logger.info(f"Connected to running mpv at {conn.socket_path}")
            return True
        logger.debug(f"Removing stale socket: {conn.socket_path}")
        _remove_socket_file(conn.socket_path)

    cmd = build_launch_command(conn)
    logger.info(f"Starting mpv with socket: {conn.socket_path}")
    try:
        conn.process = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )
    except (subprocess.SubprocessError, OSError) as e:
        logger.error(f"Failed to start mpv: {e}")
        return False

    for _ in range(conn.launch_attempts):
        if os.path.exists(conn.socket_path):
            break
        time.sleep(conn.launch_interval)
    else:
        logger.error(
            f"mpv socket did not appear after "
            f"{conn.launch_attempts * conn.launch_interval:.1f}s"
        )
        conn.teardown()
        return False

    if not conn.connect():
        logger.error("mpv socket connection failed")
        conn.teardown()
        return False

    logger.info("mpv started successfully")
    return True


def reconnect(conn: PlayerConnection) -> bool:
    """Reopen a dropped connection if the socket file is still there."""
    if conn.is_connected:
        return True
    if not os.path.exists(conn.socket_path) or not conn.connect():
        return False
    logger.info(f"Reconnected to mpv at {conn.socket_path}")
    return True


def send_command(conn: PlayerConnection, args: Sequence[Any]) -> bool:
    """Send a command, reconnecting first; fall back to a one-shot socket."""
    if reconnect(conn):
        return conn.send(args)

    if not os.path.exists(conn.socket_path):
        return False

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(ONE_SHOT_TIMEOUT)
            sock.connect(conn.socket_path)
            sock.sendall(encode_command(args))
        return True
    except OSError as e:
        logger.debug(f"One-shot mpv command {args[0]} failed: {e}")
        return False


def load_url(conn: PlayerConnection, url: str) -> bool:
    return send_command(conn, ["loadfile", url, "replace"])


def toggle_pause(conn: PlayerConnection) -> bool:
    return send_command(conn, ["cycle", "pause"])


def stop_playback(conn: PlayerConnection) -> bool:
    return send_command(conn, ["stop"])


def _read_available(conn: PlayerConnection) -> bytes:
    """Read everything currently buffered on the socket without blocking."""
    chunks = []
    while conn.sock is not None:
        try:
            chunk = conn.sock.recv(RECV_CHUNK)
        except (BlockingIOError, InterruptedError):
            break
        except OSError as e:
            logger.warning(f"mpv connection error: {e}")
            conn.disconnect()
            break
        if not chunk:
            logger.info("mpv closed the IPC connection")
            conn.disconnect()
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _is_eof_event(line: bytes) -> bool:
    try:
        message = json.loads(line)
    except (ValueError, UnicodeDecodeError):
        return False
    return (
        isinstance(message, dict)
        and message.get("event") == "end-file"
        and message.get("reason") == "eof"
    )


def poll_track_end(conn: PlayerConnection) -> bool:
    """Check pending events for a natural end of the current track.

    Only ``end-file`` with reason ``eof`` counts; stops, errors and
    replacements caused by loading another file do not.
    """
    if not reconnect(conn):
        return False

    data = conn.buffer + _read_available(conn)
    *lines, remainder = data.split(b"\n")
    if conn.is_connected:
        conn.buffer = remainder

    return any(_is_eof_event(line) for line in lines if line.strip())


def drain_events(conn: PlayerConnection) -> None:
    """Discard everything pending on the socket."""
    if not reconnect(conn):
        return
    _read_available(conn)
    conn.buffer = b""


def quit_player(conn: PlayerConnection) -> None:
    """Ask mpv to quit, then make sure the process and socket are gone."""
    if send_command(conn, ["quit"]):
        time.sleep(conn.quit_grace)
    conn.teardown()
    logger.info("mpv stopped")
