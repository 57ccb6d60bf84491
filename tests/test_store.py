"""Tests for record operations and error mapping."""

from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from app import create_app
from database import store
from errors import NotFoundError, StorageError, ValidationError
from index import db


def test_validate_id():
    record_id = uuid4().hex
    assert store.validate_id(record_id) == record_id
    for bad in ["", "abc", record_id.upper(), None, 42]:
        with pytest.raises(ValidationError):
            store.validate_id(bad)


def test_get_song_not_found(app):
    with app.app_context():
        with pytest.raises(NotFoundError, match="Song not found"):
            store.get_song(uuid4().hex)


def test_replace_playlist_applies_patch(app):
    with app.app_context():
        playlist = store.create_playlist("Road Trip", ["s1", "s2"])
        updated = store.replace_playlist(playlist.id, store.PlaylistPatch(songs=["s2"]))
        assert updated.name == "Road Trip"
        assert updated.songs == ["s2"]


def test_create_song_requires_title_and_file(app):
    with app.app_context():
        with pytest.raises(ValidationError):
            store.create_song({"title": "No file"})


def test_database_failure_becomes_storage_error(app, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    with app.app_context():
        monkeypatch.setattr(db.session, "execute", broken)
        with pytest.raises(StorageError):
            store.list_songs()


def test_storage_error_is_generic_500(client, monkeypatch):
    def broken():
        raise StorageError()

    monkeypatch.setattr(store, "list_playlists", broken)
    response = client.get("/api/playlists")
    assert response.status_code == 500
    assert response.get_json() == {"message": "Server error"}


def test_unknown_route_is_json_404(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert "message" in response.get_json()


def test_unreachable_database_does_not_stop_startup(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path}/missing-dir/music.db",
        "MUSIC_DIR": str(tmp_path),
    })
    client = app.test_client()
    assert client.post("/api/playback/pause").status_code == 200
    assert client.get("/api/songs").status_code == 500
