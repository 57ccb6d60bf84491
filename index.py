import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

db = SQLAlchemy()

logger = logging.getLogger(__name__)


def init_db(app: Flask):
    import models.music  # noqa: F401 registers the tables

    db.init_app(app)
    with app.app_context():
        try:
            db.create_all()
        except SQLAlchemyError as exc:
            # Keep serving; requests fail with StorageError until the database is back.
            logger.error("Database unavailable at startup: %s", exc)
    return db
