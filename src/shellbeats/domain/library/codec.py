"""
Reader and writer for the playlist index and playlist files.

The files look like JSON and a general-purpose JSON encoder can produce
files this module reads, but the reader is a restricted scanner, not a
JSON parser. Decoding walks the text with a small tokenizer: locate the
array label, walk each ``{...}`` object in it, pick the first string value
for each expected field label and ignore everything else. Unknown fields,
non-string values and trailing garbage are skipped instead of rejected, so a
damaged file loses only the entries that are actually broken.

Field labels match the files written by earlier shellbeats versions:
``playlists``/``name``/``filename`` in the index and
``name``/``songs``/``title``/``video_id`` in a playlist file.
"""

from typing import Iterator, NamedTuple, Optional

from .models import UNKNOWN_TITLE, Song

# Larger inputs decode to an empty result
MAX_RECORD_BYTES = 1024 * 1024

_WHITESPACE = " \t\r\n"

_ESCAPE_OUT = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_ESCAPE_IN = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
}


class IndexEntry(NamedTuple):
    """One playlist as listed in the index file."""

    name: str
    storage_key: str


class PlaylistRecord(NamedTuple):
    """Decoded content of a playlist file."""

    name: str
    songs: list[Song]


def escape_string(value: str) -> str:
    """Escape quote, backslash, newline, carriage return and tab."""
    return "".join(_ESCAPE_OUT.get(ch, ch) for ch in value)


def unescape_string(value: str) -> str:
    """Reverse escape_string; any other escaped character stands for itself."""
    decoded, _ = _read_string(f'"{value}"', 0)
    return decoded if decoded is not None else value


def is_too_large(text: str) -> bool:
    return len(text) > MAX_RECORD_BYTES or len(text.encode("utf-8")) > MAX_RECORD_BYTES


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _quote(value: str) -> str:
    return f'"{escape_string(value)}"'


def _encode_array(label: str, rows: list[str]) -> str:
    lines = [f'  "{label}": [']
    for i, row in enumerate(rows):
        separator = "," if i < len(rows) - 1 else ""
        lines.append(f"    {row}{separator}")
    lines.append("  ]")
    return "\n".join(lines)


def encode_index(entries: list[IndexEntry]) -> str:
    """Render the playlist index file."""
    rows = [
        f'{{"name": {_quote(entry.name)}, "filename": {_quote(entry.storage_key)}}}'
        for entry in entries
    ]
    return "{\n" + _encode_array("playlists", rows) + "\n}\n"


def encode_playlist(name: str, songs: list[Song]) -> str:
    """Render one playlist file."""
    rows = [
        f'{{"title": {_quote(song.title)}, "video_id": {_quote(song.source_id)}}}'
        for song in songs
    ]
    return (
        "{\n"
        + f'  "name": {_quote(name)},\n'
        + _encode_array("songs", rows)
        + "\n}\n"
    )


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _read_unicode_escape(text: str, pos: int) -> tuple[Optional[str], int]:
    """Decode ``XXXX`` (and a following low surrogate) starting at pos."""
    digits = text[pos : pos + 4]
    if len(digits) < 4:
        return None, pos
    try:
        code = int(digits, 16)
    except ValueError:
        return None, pos
    end = pos + 4
    if 0xD800 <= code <= 0xDBFF and text[end : end + 2] == "\\u":
        try:
            low = int(text[end + 2 : end + 6], 16)
        except ValueError:
            low = 0
        if 0xDC00 <= low <= 0xDFFF:
            code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
            end += 6
    try:
        return chr(code), end
    except ValueError:
        return None, pos


def _read_string(text: str, pos: int) -> tuple[Optional[str], int]:
    """Read the quoted string opening at ``text[pos]``.

    Returns:
        Tuple of (decoded value, index after the closing quote). The value
        is None when the string is not terminated.
    """
    chars: list[str] = []
    i = pos + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n:
            escaped = text[i + 1]
            if escaped == "u":
                decoded, end = _read_unicode_escape(text, i + 2)
                if decoded is not None:
                    chars.append(decoded)
                    i = end
                    continue
            chars.append(_ESCAPE_IN.get(escaped, escaped))
            i += 2
            continue
        if ch == '"':
            return "".join(chars), i + 1
        chars.append(ch)
        i += 1
    return None, n


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in _WHITESPACE:
        pos += 1
    return pos


def _top_level_strings(text: str) -> dict[str, str]:
    """Collect ``"label": "value"`` pairs of the outermost object.

    Only the first value seen for a label is kept. Values that are not
    strings and fields of nested objects are skipped.
    """
    fields: dict[str, str] = {}
    pending_label: Optional[str] = None
    depth = 0
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if ch == '"':
            value, i = _read_string(text, i)
            if value is None:
                break
            if depth != 1:
                pending_label = None
                continue
            if pending_label is not None:
                fields.setdefault(pending_label, value)
                pending_label = None
                continue
            j = _skip_whitespace(text, i)
            if j < n and text[j] == ":":
                pending_label = value
                i = j + 1
            continue

        if ch in "{[":
            depth += 1
            pending_label = None
        elif ch in "}]":
            depth -= 1
            pending_label = None
            if depth <= 0:
                break
        elif ch not in _WHITESPACE:
            pending_label = None
        i += 1

    return fields


def _array_start(text: str, label: str) -> int:
    """Index of the ``[`` opening the outermost object's ``label`` array, or -1."""
    depth = 0
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if ch == '"':
            value, i = _read_string(text, i)
            if value is None:
                return -1
            if depth == 1 and value == label:
                j = _skip_whitespace(text, i)
                if j < n and text[j] == ":":
                    j = _skip_whitespace(text, j + 1)
                    if j < n and text[j] == "[":
                        return j
            continue
        if ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
        i += 1

    return -1


def _iter_objects(text: str, start: int) -> Iterator[str]:
    """Yield each complete ``{...}`` element of the array opening at start."""
    depth = 0
    obj_start = -1
    i = start + 1
    n = len(text)

    while i < n:
        ch = text[i]
        if ch == '"':
            value, i = _read_string(text, i)
            if value is None:
                return
            continue
        if ch == "{":
            if depth == 0:
                obj_start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                yield text[obj_start : i + 1]
        elif ch == "]" and depth == 0:
            return
        i += 1


def decode_index(text: str) -> list[IndexEntry]:
    """Read playlist names and storage keys from index file text.

    Entries missing a name or filename are dropped. Text without a
    ``playlists`` array, or larger than MAX_RECORD_BYTES, yields [].
    """
    if not text or is_too_large(text):
        return []

    start = _array_start(text, "playlists")
    if start < 0:
        return []

    entries = []
    for obj in _iter_objects(text, start):
        fields = _top_level_strings(obj)
        name = fields.get("name", "")
        storage_key = fields.get("filename", "")
        if name and storage_key:
            entries.append(IndexEntry(name, storage_key))
    return entries


def decode_playlist(text: str) -> PlaylistRecord:
    """Read a playlist file.

    Songs with an empty or missing ``video_id`` are dropped; a missing
    title becomes UNKNOWN_TITLE.
    """
    if not text or is_too_large(text):
        return PlaylistRecord("", [])

    name = _top_level_strings(text).get("name", "")

    start = _array_start(text, "songs")
    if start < 0:
        return PlaylistRecord(name, [])

    songs = []
    for obj in _iter_objects(text, start):
        fields = _top_level_strings(obj)
        source_id = fields.get("video_id", "")
        if not source_id:
            continue
        songs.append(Song(title=fields.get("title") or UNKNOWN_TITLE, source_id=source_id))
    return PlaylistRecord(name, songs)
