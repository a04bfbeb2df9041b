"""
YouTube search through yt-dlp.

Results are flat entries (no per-video extraction), so a search of 50
results costs one request.
"""

from typing import Optional

import yt_dlp
from loguru import logger

from shellbeats.core.exceptions import SearchError
from shellbeats.domain.library.models import UNKNOWN_TITLE, Song

MIN_ID_LENGTH = 5
MAX_ID_LENGTH = 20


def is_valid_source_id(source_id: str) -> bool:
    return MIN_ID_LENGTH <= len(source_id) <= MAX_ID_LENGTH


def _entry_to_song(entry: dict) -> Optional[Song]:
    source_id = str(entry.get("id") or "")
    if not is_valid_source_id(source_id):
        return None

    duration = entry.get("duration")
    try:
        duration = int(duration or 0)
    except (TypeError, ValueError):
        duration = 0

    return Song(
        title=entry.get("title") or UNKNOWN_TITLE,
        source_id=source_id,
        duration=duration,
    )


def search(query: str, max_results: int = 50) -> list[Song]:
    """Search YouTube and return up to ``max_results`` songs.

    Args:
        query: Free-text search query
        max_results: Number of results to request

    Returns:
        Songs in result order; entries without a usable id are skipped

    Raises:
        SearchError: If the query is empty or yt-dlp fails
    """
    query = query.strip()
    if not query:
        raise SearchError("Search query cannot be empty")

    ydl_opts = {
        "quiet": True,
        "no_warnings": True,
        "extract_flat": True,  # Don't resolve each video, just list them
        "skip_download": True,
    }

    logger.info(f"Searching YouTube: {query!r} (max {max_results})")
    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(f"ytsearch{max_results}:{query}", download=False)
    except yt_dlp.utils.DownloadError as e:
        raise SearchError(f"Search failed: {e}") from e
    except Exception as e:
        logger.exception("Unexpected error during search")
        raise SearchError(f"Unexpected error: {e}") from e

    if not info:
        return []

    songs = []
    for entry in info.get("entries") or []:
        if not entry:
            continue
        song = _entry_to_song(entry)
        if song is not None:
            songs.append(song)

    logger.info(f"Search returned {len(songs)} results")
    return songs
