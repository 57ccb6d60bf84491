from pathlib import Path

from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context
from werkzeug.security import safe_join

from auth import role_required
from database import store
from errors import NotFoundError

songs_bp = Blueprint('songs', __name__, url_prefix='/api/songs')

STREAM_CHUNK_SIZE = 64 * 1024


def resolve_audio_path(file_name: str) -> Path:
    """Map a song's fileName to a file inside MUSIC_DIR, or raise NotFoundError."""
    joined = safe_join(current_app.config['MUSIC_DIR'], file_name) if file_name else None
    if joined is None or not Path(joined).is_file():
        raise NotFoundError('File not found')
    return Path(joined)


def _read_chunks(file_path: Path, chunk_size: int = STREAM_CHUNK_SIZE):
    with file_path.open('rb') as handle:
        while True:
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            yield chunk


@songs_bp.route('', methods=['GET'])
def list_songs():
    return jsonify([song.to_dict() for song in store.list_songs()])


@songs_bp.route('/<song_id>', methods=['GET'])
def get_song(song_id):
    return jsonify(store.get_song(song_id).to_dict())


@songs_bp.route('', methods=['POST'])
@role_required('technician')
def create_song():
    data = request.get_json(silent=True)
    song = store.create_song(data if isinstance(data, dict) else {})
    current_app.logger.info('Added song id=%s title="%s"', song.id, song.title)
    return jsonify(song.to_dict()), 201


@songs_bp.route('/<song_id>', methods=['DELETE'])
@role_required('technician')
def delete_song(song_id):
    store.delete_song(song_id)
    current_app.logger.info('Deleted song id=%s', song_id)
    return jsonify({'message': 'Song deleted successfully'})


@songs_bp.route('/metadata/<song_id>', methods=['GET'])
def song_metadata(song_id):
    return jsonify(store.get_song(song_id).to_metadata())


@songs_bp.route('/stream/<song_id>', methods=['GET'])
def stream_song(song_id):
    """Send the whole audio file; range requests are not supported."""
    song = store.get_song(song_id)
    file_path = resolve_audio_path(song.file_name)
    headers = {'Content-Length': str(file_path.stat().st_size)}
    return Response(
        stream_with_context(_read_chunks(file_path)),
        mimetype='audio/mpeg',
        headers=headers,
    )
