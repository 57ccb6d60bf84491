"""
Authentication: local passwords, Spotify login, session cookies and bearer tokens.

Two independent authenticators (session and token) sit behind one
AuthenticationService, which the routes reach through ``get_auth()``.
"""
import logging
import secrets
from datetime import timedelta
from functools import wraps
from typing import Any, Dict, Optional

import requests
import spotipy
from flask import Flask, current_app, g, request, session
from flask_bcrypt import Bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from database import store
from errors import AuthError, StorageError, ValidationError
from models.music import User

logger = logging.getLogger(__name__)

bcrypt = Bcrypt()

INVALID_CREDENTIALS = "Invalid credentials"
MIN_PASSWORD_LENGTH = 6


class SessionKeys:
    SESSION_ID = "sid"
    OAUTH_STATE = "oauth_state"


class LocalStrategy:
    """Email + password accounts stored with bcrypt hashes."""

    def hash_password(self, password: str) -> str:
        return bcrypt.generate_password_hash(password).decode("utf-8")

    def register(self, username: Any, email: Any, password: Any) -> User:
        if not all(isinstance(value, str) and value.strip() for value in (username, email, password)):
            raise ValidationError("username, email and password are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return store.create_user(
            username=username.strip(),
            email=email.strip().lower(),
            password_hash=self.hash_password(password),
        )

    def authenticate(self, email: Any, password: Any) -> User:
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthError(INVALID_CREDENTIALS)
        user = store.find_user_by_email(email.strip().lower())
        if user is None or not user.password_hash:
            raise AuthError(INVALID_CREDENTIALS)
        if not bcrypt.check_password_hash(user.password_hash, password):
            raise AuthError(INVALID_CREDENTIALS)
        return user


class SpotifyStrategy:
    """Delegates identity proof to Spotify's OAuth authorization-code flow."""

    SCOPE = "user-read-email user-read-private"

    def __init__(self, client_id: Optional[str], client_secret: Optional[str], redirect_uri: Optional[str]):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)

    def _oauth(self, state: Optional[str] = None) -> SpotifyOAuth:
        if not self.configured:
            raise AuthError("Spotify login is not available")
        return SpotifyOAuth(
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.redirect_uri,
            scope=self.SCOPE,
            state=state,
            cache_handler=MemoryCacheHandler(),
            open_browser=False,
        )

    def authorize_url(self, state: str) -> str:
        return self._oauth(state).get_authorize_url(state=state)

    def fetch_profile(self, code: str) -> Dict[str, Any]:
        try:
            access_token = self._oauth().get_access_token(code, as_dict=False, check_cache=False)
            return spotipy.Spotify(auth=access_token).current_user()
        except (SpotifyOauthError, spotipy.SpotifyException, requests.RequestException) as exc:
            logger.warning("Spotify login failed: %s", exc)
            raise AuthError("Spotify login failed") from exc


class SessionAuthenticator:
    """Server-side sessions; the signed cookie holds only a random session id."""

    def __init__(self, lifetime: timedelta):
        self.lifetime = lifetime

    def login(self, user: User) -> None:
        self.logout()
        session[SessionKeys.SESSION_ID] = store.create_session(user, self.lifetime)
        session.permanent = True

    def logout(self) -> None:
        session_id = session.get(SessionKeys.SESSION_ID)
        session.clear()
        store.delete_session(session_id)

    def restore(self) -> Optional[User]:
        session_id = session.get(SessionKeys.SESSION_ID)
        if session_id is None:
            return None
        user = store.get_session_user(session_id)
        if user is None:
            # Revoked, expired or unknown session.
            session.pop(SessionKeys.SESSION_ID, None)
        return user


class TokenAuthenticator:
    """Signed, time-bound bearer tokens carrying the user id."""

    SALT = "access-token"

    def __init__(self, secret_key: str, max_age: int):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt=self.SALT)

    def issue(self, user: User) -> str:
        return self._serializer.dumps({"uid": user.id})

    def verify(self, token: str) -> User:
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as exc:
            raise AuthError("Token expired") from exc
        except BadSignature as exc:
            raise AuthError("Invalid token") from exc
        user = store.get_user(payload.get("uid")) if isinstance(payload, dict) else None
        if user is None:
            raise AuthError("Invalid token")
        return user


class AuthenticationService:
    def __init__(
        self,
        sessions: SessionAuthenticator,
        tokens: TokenAuthenticator,
        local: LocalStrategy,
        spotify: SpotifyStrategy,
    ):
        self.sessions = sessions
        self.tokens = tokens
        self.local = local
        self.spotify = spotify

    def register(self, username: Any, email: Any, password: Any) -> User:
        user = self.local.register(username, email, password)
        logger.info("Registered user %s", user.username)
        return user

    def login(self, email: Any, password: Any) -> tuple[User, str]:
        user = self.local.authenticate(email, password)
        self.sessions.login(user)
        return user, self.tokens.issue(user)

    def logout(self) -> None:
        self.sessions.logout()

    def begin_spotify_login(self) -> str:
        state = secrets.token_urlsafe(16)
        url = self.spotify.authorize_url(state)
        session[SessionKeys.OAUTH_STATE] = state
        return url

    def complete_spotify_login(self, state: Optional[str], code: Optional[str]) -> User:
        expected = session.pop(SessionKeys.OAUTH_STATE, None)
        if not code or not expected or not secrets.compare_digest(expected, state or ""):
            raise AuthError("Spotify login failed")
        profile = self.spotify.fetch_profile(code)
        user = store.find_or_create_spotify_user(profile)
        self.sessions.login(user)
        return user

    def current_user(self) -> Optional[User]:
        """Session identity first, then an ``Authorization: Bearer`` token."""
        user = g.get("user")
        if user is not None:
            return user
        header = request.headers.get("Authorization", "")
        if header.startswith("Bearer "):
            user = self.tokens.verify(header[len("Bearer "):].strip())
            g.user = user
        return user


def get_auth() -> AuthenticationService:
    return current_app.extensions["auth"]


def current_user() -> Optional[User]:
    return get_auth().current_user()


def login_required(f):
    """Decorator to require an authenticated user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_user() is None:
            raise AuthError("Authentication required")
        return f(*args, **kwargs)
    return decorated_function


def role_required(*roles):
    """Decorator to require specific roles for routes"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = current_user()
            if user is None:
                raise AuthError("Authentication required")
            if user.role.value not in roles:
                raise AuthError("Not permitted")
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def init_auth(app: Flask) -> AuthenticationService:
    bcrypt.init_app(app)
    service = AuthenticationService(
        sessions=SessionAuthenticator(app.permanent_session_lifetime),
        tokens=TokenAuthenticator(app.config["SECRET_KEY"], app.config["TOKEN_MAX_AGE"]),
        local=LocalStrategy(),
        spotify=SpotifyStrategy(
            app.config.get("SPOTIFY_CLIENT_ID"),
            app.config.get("SPOTIFY_CLIENT_SECRET"),
            app.config.get("SPOTIFY_REDIRECT_URI"),
        ),
    )
    app.extensions["auth"] = service

    @app.before_request
    def restore_session_user():
        try:
            g.user = service.sessions.restore()
        except StorageError:
            # Routes that never touch the database still work while it is down.
            current_app.logger.warning("Session lookup failed; continuing unauthenticated")
            g.user = None

    return service
