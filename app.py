import logging
from typing import Any, Mapping

from flask import Flask
from flask_cors import CORS

from auth import init_auth
from config import Config
from errors import register_error_handlers
from index import init_db
from playback import PlaybackController
from routes.playback import playback_bp
from routes.playlists import playlists_bp
from routes.songs import songs_bp
from routes.users import users_bp


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Logging configuration
    logging.basicConfig(level=app.config['LOG_LEVEL'])

    CORS(app, origins=app.config['CLIENT_URL'] or '*', supports_credentials=bool(app.config['CLIENT_URL']))

    init_db(app)
    init_auth(app)
    app.extensions['playback'] = PlaybackController()

    app.register_blueprint(users_bp)
    app.register_blueprint(songs_bp)
    app.register_blueprint(playlists_bp)
    app.register_blueprint(playback_bp)
    register_error_handlers(app)

    app.logger.info('Music directory: %s', app.config['MUSIC_DIR'])
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=app.config['PORT'], threaded=True)
