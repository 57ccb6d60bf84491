from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from index import db


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(Enum):
    CONSUMER = "consumer"
    TECHNICIAN = "technician"


class Song(db.Model):
    __tablename__ = 'songs'

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    title = db.Column(db.String(200), nullable=False)
    artist = db.Column(db.String(200))
    album = db.Column(db.String(200))
    duration = db.Column(db.Float)  # in seconds
    cover_art = db.Column(db.String(500))
    file_name = db.Column(db.String(500), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=_utcnow)

    def __repr__(self):
        return f'<Song {self.title} by {self.artist or "Unknown"}>'

    def to_metadata(self):
        return {
            'title': self.title,
            'artist': self.artist,
            'album': self.album,
            'duration': self.duration,
            'coverArt': self.cover_art,
        }

    def to_dict(self):
        return {
            'id': self.id,
            **self.to_metadata(),
            'fileName': self.file_name,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


class Playlist(db.Model):
    __tablename__ = 'playlists'

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    name = db.Column(db.String(200), nullable=False)
    # Song ids in play order; not checked against the songs table.
    songs = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f'<Playlist {self.name} ({len(self.songs or [])} songs)>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'songs': list(self.songs or []),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True)
    password_hash = db.Column(db.String(255))  # empty for Spotify-only accounts
    spotify_id = db.Column(db.String(120), unique=True)
    display_name = db.Column(db.String(120))
    role = db.Column(db.Enum(Role), default=Role.CONSUMER, nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role.value})>"

    def to_dict(self) -> dict[str, str | bool | None]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "displayName": self.display_name,
            "role": self.role.value,
            "spotifyLinked": self.spotify_id is not None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class UserSession(db.Model):
    __tablename__ = 'user_sessions'

    # The cookie only carries this random id; everything else stays server-side.
    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.String(32), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)

    user = db.relationship('User', backref=db.backref('sessions', cascade='all, delete-orphan', passive_deletes=True))

    def __repr__(self):
        return f'<UserSession user={self.user_id} expires={self.expires_at}>'
