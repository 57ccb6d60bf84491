import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Settings read from the environment (or a local .env file)."""

    PORT = int(os.getenv("PORT", "5000"))
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///music.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CLIENT_URL = os.getenv("CLIENT_URL")
    SECRET_KEY = os.getenv("SESSION_SECRET", "change-me-in-production")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    PERMANENT_SESSION_LIFETIME = timedelta(seconds=int(os.getenv("SESSION_LIFETIME", "86400")))
    MUSIC_DIR = os.getenv("MUSIC_DIR", os.path.join(os.getcwd(), "music"))
    TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", "3600"))
    SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID")
    SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET")
    SPOTIFY_REDIRECT_URI = os.getenv(
        "SPOTIFY_REDIRECT_URI", "http://localhost:5000/api/users/auth/spotify/callback"
    )
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
