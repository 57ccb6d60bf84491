"""
Record-level operations over songs, playlists, users and login sessions.

Every write commits on its own; a failing statement rolls the session back
and surfaces as StorageError. Nothing here checks that song ids referenced by
a playlist actually exist.
"""
import logging
import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import NotFoundError, StorageError, ValidationError
from index import db
from models.music import Playlist, Role, Song, User, UserSession

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

SONG_FIELDS = {
    'title': 'title',
    'artist': 'artist',
    'album': 'album',
    'duration': 'duration',
    'coverArt': 'cover_art',
    'fileName': 'file_name',
}


def validate_id(record_id: str) -> str:
    if not isinstance(record_id, str) or not _ID_PATTERN.match(record_id):
        raise ValidationError(f"Malformed identifier: {record_id!r}")
    return record_id


def _commit() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Commit failed: %s", exc)
        raise StorageError() from exc


def _get(model, record_id: str, label: str):
    validate_id(record_id)
    try:
        record = db.session.get(model, record_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc
    if record is None:
        raise NotFoundError(f"{label} not found")
    return record


def _all(model) -> list:
    try:
        return db.session.execute(db.select(model)).scalars().all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc


def _song_ids(value: Any) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError("songs must be a list of song ids")
    return list(value)


# Songs

def list_songs() -> Sequence[Song]:
    return _all(Song)


def get_song(song_id: str) -> Song:
    return _get(Song, song_id, "Song")


def find_song_by_file(file_name: str) -> Optional[Song]:
    try:
        return db.session.execute(
            db.select(Song).filter_by(file_name=file_name)
        ).scalar_one_or_none()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc


def create_song(fields: Dict[str, Any]) -> Song:
    values = {column: fields[key] for key, column in SONG_FIELDS.items() if key in fields}
    if not values.get('title') or not values.get('file_name'):
        raise ValidationError("title and fileName are required")
    duration = values.get('duration')
    if duration is not None and (isinstance(duration, bool) or not isinstance(duration, (int, float))):
        raise ValidationError("duration must be a number of seconds")

    song = Song(**values)
    db.session.add(song)
    try:
        _commit()
    except IntegrityError as exc:
        raise ValidationError("A song with that fileName already exists") from exc
    return song


def delete_song(song_id: str) -> None:
    song = get_song(song_id)
    db.session.delete(song)
    _commit()


# Playlists

@dataclass
class PlaylistPatch:
    """Updatable playlist fields; None means the field was not sent."""

    name: Optional[str] = None
    songs: Optional[List[str]] = field(default=None)

    @classmethod
    def from_body(cls, body: Dict[str, Any]) -> "PlaylistPatch":
        patch = cls()
        if 'name' in body:
            if not isinstance(body['name'], str) or not body['name'].strip():
                raise ValidationError("name must be a non-empty string")
            patch.name = body['name'].strip()
        if 'songs' in body:
            patch.songs = _song_ids(body['songs'])
        return patch

    def apply(self, playlist: Playlist) -> None:
        if self.name is not None:
            playlist.name = self.name
        if self.songs is not None:
            playlist.songs = list(self.songs)


def list_playlists() -> Sequence[Playlist]:
    return _all(Playlist)


def get_playlist(playlist_id: str) -> Playlist:
    return _get(Playlist, playlist_id, "Playlist")


def create_playlist(name: Any, songs: Any = None) -> Playlist:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Playlist name is required")
    playlist = Playlist(name=name.strip(), songs=_song_ids(songs if songs is not None else []))
    db.session.add(playlist)
    _commit()
    return playlist


def replace_playlist(playlist_id: str, patch: PlaylistPatch) -> Playlist:
    playlist = get_playlist(playlist_id)
    patch.apply(playlist)
    _commit()
    return playlist


def delete_playlist(playlist_id: str) -> None:
    playlist = get_playlist(playlist_id)
    db.session.delete(playlist)
    _commit()


# Users

def get_user(user_id: str) -> Optional[User]:
    if not isinstance(user_id, str) or not _ID_PATTERN.match(user_id):
        return None
    try:
        return db.session.get(User, user_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc


def find_user_by_email(email: str) -> Optional[User]:
    try:
        return db.session.execute(db.select(User).filter_by(email=email)).scalar_one_or_none()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc


def create_user(*, username: str, email: str, password_hash: str, role: Role = Role.CONSUMER) -> User:
    user = User(username=username, email=email, password_hash=password_hash, role=role)
    db.session.add(user)
    try:
        _commit()
    except IntegrityError as exc:
        raise ValidationError("Email or username already registered") from exc
    return user


def find_or_create_spotify_user(profile: Dict[str, Any]) -> User:
    """Return the local account linked to a Spotify profile, creating it on first login."""
    spotify_id = profile.get('id')
    if not spotify_id:
        raise ValidationError("Spotify profile has no id")
    try:
        user = db.session.execute(
            db.select(User).filter_by(spotify_id=spotify_id)
        ).scalar_one_or_none()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc
    if user is not None:
        return user

    email = profile.get('email')
    if email and find_user_by_email(email) is not None:
        # Accounts are never merged on email alone.
        email = None

    user = User(
        username=f"spotify:{spotify_id}",
        email=email,
        spotify_id=spotify_id,
        display_name=profile.get('display_name'),
        role=Role.CONSUMER,
    )
    db.session.add(user)
    try:
        _commit()
    except IntegrityError as exc:
        raise StorageError() from exc
    logger.info("Created account for Spotify user %s", spotify_id)
    return user


# Sessions

def _naive_utcnow() -> datetime:
    # Stored without tzinfo so SQLite and PostgreSQL compare the same way.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_session(user: User, lifetime: timedelta) -> str:
    now = _naive_utcnow()
    record = UserSession(
        id=secrets.token_urlsafe(32),
        user_id=user.id,
        created_at=now,
        expires_at=now + lifetime,
    )
    db.session.add(record)
    _commit()
    return record.id


def get_session_user(session_id: Any) -> Optional[User]:
    """User behind a live session id; expired records are removed on sight."""
    if not isinstance(session_id, str) or not session_id:
        return None
    try:
        record = db.session.get(UserSession, session_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc
    if record is None:
        return None
    if record.expires_at <= _naive_utcnow():
        db.session.delete(record)
        _commit()
        return None
    return record.user


def delete_session(session_id: Any) -> None:
    if not isinstance(session_id, str) or not session_id:
        return
    try:
        db.session.execute(db.delete(UserSession).filter_by(id=session_id))
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc
    _commit()
