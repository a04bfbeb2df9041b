"""
Configuration management for shellbeats
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger


@dataclass
class LibraryConfig:
    """Configuration for playlist storage."""

    # Directory holding playlists.json and playlists/ (default: data dir)
    root_dir: Optional[str] = None


@dataclass
class PlayerConfig:
    """Configuration for the mpv process and its IPC socket."""

    mpv_binary: str = "mpv"
    socket_path: str = "/tmp/shellbeats_mpv.sock"
    extra_args: List[str] = field(default_factory=list)
    grace_seconds: float = 3.0  # Ignore end-of-file events while a track loads
    launch_attempts: int = 100
    launch_interval: float = 0.05
    quit_grace: float = 0.1


@dataclass
class SearchConfig:
    """Configuration for yt-dlp searches."""

    max_results: int = 50


@dataclass
class UIConfig:
    """Configuration for the terminal interface."""

    poll_timeout: float = 0.1  # Seconds to wait for a key before polling mpv


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: <data dir>/shellbeats.log
    rotation: str = "10 MB"
    retention: int = 5


@dataclass
class Config:
    """Main configuration object."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def library_dir(self) -> Path:
        """Directory holding the playlist index and playlist files."""
        if self.library.root_dir:
            return Path(self.library.root_dir).expanduser()
        return get_data_dir()

    @property
    def log_path(self) -> Path:
        if self.logging.log_file:
            return Path(self.logging.log_file).expanduser()
        return get_data_dir() / "shellbeats.log"


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "shellbeats"
    return Path.home() / ".config" / "shellbeats"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "shellbeats"
    return Path.home() / ".local" / "share" / "shellbeats"


def get_config_path() -> Path:
    """Get the main configuration file path."""
    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# shellbeats configuration

[library]
# Directory for playlists.json and the playlists/ folder
# root_dir = "~/.shellbeats"

[player]
# mpv executable and the IPC socket it should listen on
mpv_binary = "mpv"
socket_path = "/tmp/shellbeats_mpv.sock"

# Extra command line flags passed to mpv
extra_args = []

# Seconds after starting a track during which end-of-file events are ignored
grace_seconds = 3.0

# How long to wait for mpv to create its socket (attempts x interval seconds)
launch_attempts = 100
launch_interval = 0.05

# Seconds to wait after asking mpv to quit before stopping it
quit_grace = 0.1

[search]
# Number of results requested from yt-dlp
max_results = 50

[ui]
# Seconds to wait for a keypress before polling mpv again
poll_timeout = 0.1

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/shellbeats/shellbeats.log)
# log_file = "/path/to/shellbeats.log"

rotation = "10 MB"
retention = 5
""".strip()


def _section(toml_data: dict, name: str) -> dict:
    value = toml_data.get(name, {})
    return value if isinstance(value, dict) else {}


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, falling back to defaults.

    Args:
        config_path: Explicit config file (default: XDG config dir)

    Returns:
        Parsed configuration. Defaults are returned when the file is missing
        or cannot be parsed. A missing default config file is created from
        the template.
    """
    path = config_path or get_config_path()

    if not path.exists():
        if config_path is None:
            # First run: leave a commented template for the user to edit
            write_default_config(path)
        else:
            logger.info(f"No config file at {path}, using defaults")
        return Config()

    try:
        with open(path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading configuration from {path}: {e}")
        return Config()

    try:
        config = _parse_config(toml_data)
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid configuration in {path}: {e}")
        return Config()

    logger.info(f"Loaded configuration from {path}")
    return config


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, keeping defaults for missing keys."""
    config = Config()

    library_data = _section(toml_data, "library")
    config.library = LibraryConfig(
        root_dir=library_data.get("root_dir", config.library.root_dir),
    )

    player_data = _section(toml_data, "player")
    config.player = PlayerConfig(
        mpv_binary=player_data.get("mpv_binary", config.player.mpv_binary),
        socket_path=str(
            Path(player_data.get("socket_path", config.player.socket_path)).expanduser()
        ),
        extra_args=list(player_data.get("extra_args", config.player.extra_args)),
        grace_seconds=float(
            player_data.get("grace_seconds", config.player.grace_seconds)
        ),
        launch_attempts=int(
            player_data.get("launch_attempts", config.player.launch_attempts)
        ),
        launch_interval=float(
            player_data.get("launch_interval", config.player.launch_interval)
        ),
        quit_grace=float(player_data.get("quit_grace", config.player.quit_grace)),
    )

    search_data = _section(toml_data, "search")
    config.search = SearchConfig(
        max_results=max(1, int(search_data.get("max_results", config.search.max_results))),
    )

    ui_data = _section(toml_data, "ui")
    config.ui = UIConfig(
        poll_timeout=float(ui_data.get("poll_timeout", config.ui.poll_timeout)),
    )

    logging_data = _section(toml_data, "logging")
    config.logging = LoggingConfig(
        level=str(logging_data.get("level", config.logging.level)).upper(),
        log_file=logging_data.get("log_file"),
        rotation=str(logging_data.get("rotation", config.logging.rotation)),
        retention=int(logging_data.get("retention", config.logging.retention)),
    )

    return config


def write_default_config(config_path: Optional[Path] = None) -> bool:
    """Write the default config file if none exists yet."""
    path = config_path or get_config_path()
    if path.exists():
        return False

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(create_default_config() + "\n", encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to write default config to {path}: {e}")
        return False

    logger.info(f"Created default configuration at: {path}")
    return True
