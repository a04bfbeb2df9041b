"""
Loguru setup and the transient status line shown by the blessed UI.
"""

from dataclasses import dataclass
from pathlib import Path

from loguru import logger


def setup_loguru(
    log_file: Path,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: int = 5,
) -> None:
    """
    Configure loguru for file-only logging (blessed UI owns the terminal).

    Args:
        log_file: Path to log file
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        rotation: Size or interval at which the log file rotates
        retention: Number of rotated files to keep
    """
    # Remove default stderr handler
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation=rotation,
        retention=retention,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,  # Synchronous writes from the single UI thread
    )

    logger.info(f"Loguru initialized: {log_file} (level={level})")


@dataclass(frozen=True)
class StatusLine:
    """One-line message rendered under the screen header."""

    text: str = ""
    level: str = "info"

    @property
    def is_error(self) -> bool:
        return self.level in ("warning", "error")


def make_status(text: str, level: str = "info") -> StatusLine:
    """Build a status line and mirror it to the log file."""
    getattr(logger, level)(f"status: {text}")
    return StatusLine(text=text, level=level)
