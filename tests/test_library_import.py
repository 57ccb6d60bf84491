"""Tests for scanning the music directory into song records."""

from types import SimpleNamespace
from unittest import mock

from database import store
from database.index import extract_metadata, import_library, normalize_string


def fake_audio(length=200.456, tags=None):
    return SimpleNamespace(info=SimpleNamespace(length=length), tags=tags or {})


def test_normalize_string():
    assert normalize_string("  Kind   of\tBlue ") == "Kind of Blue"
    assert normalize_string("   ") is None
    assert normalize_string(None) is None


def test_extract_metadata_reads_tags(tmp_path):
    path = tmp_path / "so-what.mp3"
    path.write_bytes(b"")
    tags = {"TIT2": ["So What"], "TPE1": ["Miles  Davis"], "TALB": ["Kind of Blue"]}
    with mock.patch("database.index.MutagenFile", return_value=fake_audio(tags=tags)):
        metadata = extract_metadata(path)
    assert metadata == {
        "title": "So What",
        "artist": "Miles Davis",
        "album": "Kind of Blue",
        "duration": 200.46,
    }


def test_extract_metadata_falls_back_to_file_name(tmp_path):
    path = tmp_path / "untagged.wav"
    path.write_bytes(b"")
    with mock.patch("database.index.MutagenFile", return_value=None):
        metadata = extract_metadata(path)
    assert metadata["title"] == "untagged"
    assert metadata["duration"] is None


def test_import_library_creates_new_songs_once(app, music_dir):
    (music_dir / "album").mkdir()
    (music_dir / "album" / "track1.mp3").write_bytes(b"a")
    (music_dir / "track2.flac").write_bytes(b"b")
    (music_dir / "cover.jpg").write_bytes(b"c")

    with app.app_context(), mock.patch("database.index.MutagenFile", return_value=fake_audio()):
        created = import_library(music_dir)
        assert sorted(song.file_name for song in created) == ["album/track1.mp3", "track2.flac"]
        assert import_library(music_dir) == []
        assert len(store.list_songs()) == 2


def test_import_library_missing_directory(app, tmp_path):
    with app.app_context():
        assert import_library(tmp_path / "nope") == []
