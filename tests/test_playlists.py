"""Tests for playlist CRUD routes and the playlist patch."""

from uuid import uuid4

import pytest

from database.store import PlaylistPatch
from errors import ValidationError
from models.music import Playlist


def create(client, name="Road Trip", songs=("s1", "s2")):
    response = client.post("/api/playlists", json={"name": name, "songs": list(songs)})
    assert response.status_code == 200
    return response.get_json()


def test_create_and_fetch_playlist(client):
    created = create(client)
    assert created["name"] == "Road Trip"
    assert created["songs"] == ["s1", "s2"]
    assert len(created["id"]) == 32

    fetched = client.get(f"/api/playlists/{created['id']}").get_json()
    assert fetched["id"] == created["id"]
    assert fetched["name"] == "Road Trip"
    assert fetched["songs"] == ["s1", "s2"]


def test_duplicate_and_unknown_song_ids_are_kept(client):
    created = create(client, songs=["ghost", "ghost", "s9"])
    assert created["songs"] == ["ghost", "ghost", "s9"]


def test_list_playlists(client):
    create(client, name="One")
    create(client, name="Two")
    names = sorted(p["name"] for p in client.get("/api/playlists").get_json())
    assert names == ["One", "Two"]


def test_create_without_songs_defaults_to_empty(client):
    response = client.post("/api/playlists", json={"name": "Empty"})
    assert response.status_code == 200
    assert response.get_json()["songs"] == []


def test_create_without_name_is_a_server_error(client):
    response = client.post("/api/playlists", json={"songs": ["s1"]})
    assert response.status_code == 500
    assert response.get_json() == {"message": "Server error"}


def test_update_replaces_only_sent_fields(client):
    created = create(client)
    response = client.put(f"/api/playlists/{created['id']}", json={"name": "Night Drive"})
    assert response.status_code == 200
    body = response.get_json()
    assert body["name"] == "Night Drive"
    assert body["songs"] == ["s1", "s2"]

    body = client.put(f"/api/playlists/{created['id']}", json={"songs": ["s3"]}).get_json()
    assert body["name"] == "Night Drive"
    assert body["songs"] == ["s3"]


def test_update_ignores_unknown_fields(client):
    created = create(client)
    body = client.put(
        f"/api/playlists/{created['id']}", json={"id": "hijack", "owner": "x"}
    ).get_json()
    assert body["id"] == created["id"]
    assert body["songs"] == ["s1", "s2"]


def test_update_missing_playlist_is_not_found(client):
    response = client.put(f"/api/playlists/{uuid4().hex}", json={"name": "x"})
    assert response.status_code == 404
    assert response.get_json() == {"message": "Playlist not found"}


def test_delete_playlist(client, app):
    created = create(client)
    response = client.delete(f"/api/playlists/{created['id']}")
    assert response.status_code == 200
    assert response.get_json() == {"message": "Playlist deleted successfully"}
    with app.app_context():
        from index import db
        assert db.session.get(Playlist, created["id"]) is None


def test_delete_missing_playlist_is_not_found(client):
    response = client.delete(f"/api/playlists/{uuid4().hex}")
    assert response.status_code == 404
    assert response.get_json() == {"message": "Playlist not found"}


def test_malformed_id_is_a_generic_server_error(client):
    response = client.get("/api/playlists/not-an-id")
    assert response.status_code == 500
    assert response.get_json() == {"message": "Server error"}


def test_patch_from_body_validates_types():
    assert PlaylistPatch.from_body({}) == PlaylistPatch()
    assert PlaylistPatch.from_body({"name": " Mix "}).name == "Mix"
    with pytest.raises(ValidationError):
        PlaylistPatch.from_body({"songs": "s1"})
    with pytest.raises(ValidationError):
        PlaylistPatch.from_body({"name": ""})


def test_form_encoded_playlist(client):
    response = client.post("/api/playlists", data={"name": "Mix", "songs": ["a", "b"]})
    assert response.status_code == 200
    created = response.get_json()
    assert created["songs"] == ["a", "b"]

    body = client.put(f"/api/playlists/{created['id']}", data={"name": "Remix"}).get_json()
    assert body["name"] == "Remix"
    assert body["songs"] == ["a", "b"]
