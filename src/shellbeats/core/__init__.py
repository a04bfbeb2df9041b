"""Core infrastructure layer - no domain dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging and the UI status line (Loguru)
- Console output outside the fullscreen UI (Rich)
"""

from .config import (
    Config,
    create_default_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
    write_default_config,
)
from .console import get_console, print_error, print_missing_dependencies
from .output import StatusLine, make_status, setup_loguru

__all__ = [
    # Config
    "Config",
    "create_default_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    "write_default_config",
    # Output
    "StatusLine",
    "make_status",
    "setup_loguru",
    # Console
    "get_console",
    "print_error",
    "print_missing_dependencies",
]
