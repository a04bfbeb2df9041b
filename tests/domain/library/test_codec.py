"""Tests for the playlist file reader and writer."""

import json

from shellbeats.domain.library.codec import (
    MAX_RECORD_BYTES,
    IndexEntry,
    decode_index,
    decode_playlist,
    encode_index,
    encode_playlist,
    escape_string,
    unescape_string,
)
from shellbeats.domain.library.models import Song


class TestEscaping:
    """Tests for string escaping."""

    def test_escapes_special_characters(self) -> None:
        """Quote, backslash, newline, carriage return and tab are escaped."""
        assert escape_string('a"b\\c\nd\re\tf') == 'a\\"b\\\\c\\nd\\re\\tf'

    def test_plain_text_unchanged(self) -> None:
        """Text without special characters passes through."""
        assert escape_string("Road Trip") == "Road Trip"

    def test_unescape_reverses_escape(self) -> None:
        """unescape_string undoes escape_string."""
        original = 'say "hi"\\\n\tend'
        assert unescape_string(escape_string(original)) == original

    def test_unknown_escape_is_literal(self) -> None:
        """Any other escaped character stands for itself."""
        assert unescape_string("a\\qb") == "aqb"


class TestEncode:
    """Tests for the on-disk layout."""

    def test_empty_index(self) -> None:
        """Empty index still has the playlists array."""
        assert encode_index([]) == '{\n  "playlists": [\n  ]\n}\n'

    def test_index_entries_one_per_line(self) -> None:
        """Each playlist is written on its own line with name and filename."""
        text = encode_index([IndexEntry("A", "a.json"), IndexEntry("B", "b.json")])
        assert text == (
            "{\n"
            '  "playlists": [\n'
            '    {"name": "A", "filename": "a.json"},\n'
            '    {"name": "B", "filename": "b.json"}\n'
            "  ]\n"
            "}\n"
        )

    def test_playlist_name_is_escaped(self) -> None:
        """A quote in the playlist name does not break the file."""
        text = encode_playlist('My "Best"', [])
        assert '"name": "My \\"Best\\""' in text

    def test_output_is_valid_json(self) -> None:
        """Files written here can be read by a standard JSON parser."""
        songs = [Song('Tab\there "q"', "abc123"), Song("Back\\slash", "def456")]
        data = json.loads(encode_playlist("Mix", songs))
        assert data == {
            "name": "Mix",
            "songs": [
                {"title": 'Tab\there "q"', "video_id": "abc123"},
                {"title": "Back\\slash", "video_id": "def456"},
            ],
        }


class TestDecodeIndex:
    """Tests for reading the playlist index."""

    def test_round_trip(self) -> None:
        """Encoded entries decode to the same entries."""
        entries = [
            IndexEntry('Quote "x"', "quote_x.json"),
            IndexEntry("Line\nBreak", "line_break.json"),
            IndexEntry("Back\\slash", "backslash.json"),
        ]
        assert decode_index(encode_index(entries)) == entries

    def test_drops_incomplete_entries(self) -> None:
        """Entries without a name or filename are skipped."""
        text = (
            '{"playlists": ['
            '{"name": "Keep", "filename": "keep.json"},'
            '{"name": "NoFile"},'
            '{"filename": "noname.json"},'
            '{"name": "", "filename": "empty.json"}'
            "]}"
        )
        assert decode_index(text) == [IndexEntry("Keep", "keep.json")]

    def test_ignores_unknown_fields_and_values(self) -> None:
        """Extra fields, numbers and nested objects are skipped."""
        text = (
            '{"version": 2, "playlists": [{"id": 7, "meta": {"name": "inner"},'
            ' "name": "Outer", "tags": ["a", "b"], "filename": "outer.json"}]}'
        )
        assert decode_index(text) == [IndexEntry("Outer", "outer.json")]

    def test_reads_json_unicode_escapes(self) -> None:
        """\\uXXXX escapes from a JSON encoder decode, including surrogate pairs."""
        text = json.dumps(
            {"playlists": [{"name": "Café 🎵", "filename": "caf_.json"}]}
        )
        assert decode_index(text) == [IndexEntry("Café 🎵", "caf_.json")]

    def test_empty_and_garbage_inputs(self) -> None:
        """Empty, non-JSON and array-less text decode to an empty index."""
        assert decode_index("") == []
        assert decode_index("not json at all") == []
        assert decode_index('{"other": []}') == []
        assert decode_index('{"playlists": "oops"}') == []

    def test_truncated_file_keeps_complete_entries(self) -> None:
        """Entries before the truncation point survive."""
        full = encode_index([IndexEntry("A", "a.json"), IndexEntry("B", "b.json")])
        truncated = full[: full.index('"B"') + 5]
        assert decode_index(truncated) == [IndexEntry("A", "a.json")]

    def test_label_text_inside_values_is_ignored(self) -> None:
        """A value equal to the array label does not confuse the reader."""
        text = '{"comment": "playlists", "playlists": [{"name": "A", "filename": "a.json"}]}'
        assert decode_index(text) == [IndexEntry("A", "a.json")]

    def test_oversized_input_is_empty(self) -> None:
        """Inputs above MAX_RECORD_BYTES are rejected."""
        padding = " " * (MAX_RECORD_BYTES + 1)
        text = '{"playlists": [{"name": "A", "filename": "a.json"}]}' + padding
        assert decode_index(text) == []


class TestDecodePlaylist:
    """Tests for reading a playlist file."""

    def test_round_trip(self) -> None:
        """Name and songs survive an encode/decode cycle."""
        songs = [Song('He said "go"', "abc123"), Song("Two\nLines", "xyz789")]
        record = decode_playlist(encode_playlist("Road Trip", songs))
        assert record.name == "Road Trip"
        assert [(s.title, s.source_id) for s in record.songs] == [
            ('He said "go"', "abc123"),
            ("Two\nLines", "xyz789"),
        ]

    def test_missing_title_becomes_unknown(self) -> None:
        """A song without a title gets the placeholder title."""
        record = decode_playlist('{"name": "P", "songs": [{"video_id": "abc123"}]}')
        assert record.songs[0].title == "Unknown"

    def test_song_without_id_is_dropped(self) -> None:
        """Songs with a missing or empty video_id are skipped."""
        text = (
            '{"name": "P", "songs": ['
            '{"title": "no id"}, {"title": "empty", "video_id": ""},'
            ' {"title": "ok", "video_id": "abc123"}]}'
        )
        record = decode_playlist(text)
        assert [s.source_id for s in record.songs] == ["abc123"]

    def test_name_after_songs(self) -> None:
        """The playlist name is read from the outer object only."""
        text = '{"songs": [{"name": "inner", "video_id": "abc123"}], "name": "outer"}'
        assert decode_playlist(text).name == "outer"

    def test_corrupt_input_is_empty(self) -> None:
        """Garbage decodes to an empty record instead of raising."""
        record = decode_playlist('{"name": "Broken", "songs": [{"title": "x", "video_')
        assert record.name == "Broken"
        assert record.songs == []
        assert decode_playlist("\x00\x01garbage").songs == []
