"""
shellbeats - entry point

Loads configuration, prepares the playlist library, checks for the external
tools and runs the fullscreen UI. mpv is shut down on the way out.
"""

import argparse
import shutil
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from shellbeats import __version__
from shellbeats.context import AppContext
from shellbeats.core.config import Config, load_config
from shellbeats.core.console import print_error, print_missing_dependencies
from shellbeats.core.exceptions import LibraryInitError
from shellbeats.core.output import setup_loguru
from shellbeats.domain.playback.ipc import check_mpv_available, quit_player

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shellbeats",
        description="shellbeats - search YouTube and play music from the terminal",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml (default: $XDG_CONFIG_HOME/shellbeats/config.toml)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Override the configured log level",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def missing_dependencies(config: Config) -> list[str]:
    """Names of required executables that cannot be run."""
    missing = []
    if shutil.which(config.player.mpv_binary) is None or not check_mpv_available(
        config.player.mpv_binary
    ):
        missing.append(config.player.mpv_binary)
    return missing


def run(config: Config) -> int:
    """Run shellbeats with a loaded configuration and return the exit code."""
    from shellbeats.ui.blessed.app import run_interactive_ui

    missing = missing_dependencies(config)
    if missing:
        names = ", ".join(missing)
        logger.error(f"Missing dependencies: {names}")
        print_missing_dependencies(missing)
        return 1

    ctx = AppContext.create(config)
    try:
        ctx.store.ensure_layout()
    except LibraryInitError as e:
        logger.error(str(e))
        print_error(str(e))
        return 1
    ctx.store.load()

    try:
        ctx = run_interactive_ui(ctx)
    finally:
        quit_player(ctx.player)

    logger.info("shellbeats exited")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the shellbeats command."""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    if args.log_level:
        config.logging.level = args.log_level

    setup_loguru(
        config.log_path,
        level=config.logging.level,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
    )

    sys.exit(run(config))


if __name__ == "__main__":
    main()
