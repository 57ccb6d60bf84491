from flask import Blueprint, current_app, jsonify, request

from playback import PlaybackController

playback_bp = Blueprint('playback', __name__, url_prefix='/api/playback')


def get_player() -> PlaybackController:
    return current_app.extensions['playback']


def _song_id():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    return data.get('songId')


def _respond(message: str, state: dict):
    return jsonify({'message': message, 'playbackState': state})


@playback_bp.route('', methods=['GET'])
def playback_state():
    return jsonify({'playbackState': get_player().snapshot()})


@playback_bp.route('/play', methods=['POST'])
def play():
    return _respond('Playback started', get_player().play(_song_id()))


@playback_bp.route('/pause', methods=['POST'])
def pause():
    return _respond('Playback paused', get_player().pause())


@playback_bp.route('/skip', methods=['POST'])
def skip():
    return _respond('Song skipped', get_player().skip())


@playback_bp.route('/shuffle', methods=['POST'])
def shuffle():
    return _respond('Shuffle activated', get_player().shuffle())


@playback_bp.route('/repeat', methods=['POST'])
def repeat():
    return _respond('Repeat mode toggled', get_player().repeat())


@playback_bp.route('/queue', methods=['POST'])
def enqueue():
    return _respond('Song added to queue', get_player().enqueue(_song_id()))
