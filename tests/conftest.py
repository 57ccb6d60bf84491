"""Shared fixtures: an app on in-memory SQLite with a temporary music directory."""

import pytest

from app import create_app
from auth import LocalStrategy
from database import store
from models.music import Role


@pytest.fixture
def music_dir(tmp_path):
    path = tmp_path / "music"
    path.mkdir()
    return path


@pytest.fixture
def app(music_dir):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SECRET_KEY": "test-secret",
        "MUSIC_DIR": str(music_dir),
        "CLIENT_URL": None,
        "BCRYPT_LOG_ROUNDS": 4,
        "TOKEN_MAX_AGE": 3600,
        "SPOTIFY_CLIENT_ID": "spotify-client",
        "SPOTIFY_CLIENT_SECRET": "spotify-secret",
        "SPOTIFY_REDIRECT_URI": "http://localhost/api/users/auth/spotify/callback",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_song(app):
    """Create a song record and return its id."""
    def _make_song(**fields):
        values = {
            "title": "Hey Jude",
            "artist": "The Beatles",
            "album": "Hey Jude",
            "duration": 431,
            "coverArt": "/covers/hey-jude.jpg",
            "fileName": "hey-jude.mp3",
        }
        values.update(fields)
        with app.app_context():
            return store.create_song(values).id
    return _make_song


@pytest.fixture
def consumer(app):
    with app.app_context():
        user = LocalStrategy().register("listener", "listener@example.com", "consumerpass")
        return {"id": user.id, "email": "listener@example.com", "password": "consumerpass"}


@pytest.fixture
def technician(app):
    with app.app_context():
        user = store.create_user(
            username="admin",
            email="admin@example.com",
            password_hash=LocalStrategy().hash_password("techpass"),
            role=Role.TECHNICIAN,
        )
        return {"id": user.id, "email": "admin@example.com", "password": "techpass"}


def login(client, account):
    response = client.post(
        "/api/users/login",
        json={"email": account["email"], "password": account["password"]},
    )
    assert response.status_code == 200
    return response.get_json()
