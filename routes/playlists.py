from flask import Blueprint, current_app, jsonify, request

from database import store
from database.store import PlaylistPatch

playlists_bp = Blueprint('playlists', __name__, url_prefix='/api/playlists')


def _body() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    data = request.form.to_dict()
    if 'songs' in request.form:
        data['songs'] = request.form.getlist('songs')
    return data


@playlists_bp.route('', methods=['GET'])
def list_playlists():
    return jsonify([playlist.to_dict() for playlist in store.list_playlists()])


@playlists_bp.route('/<playlist_id>', methods=['GET'])
def get_playlist(playlist_id):
    return jsonify(store.get_playlist(playlist_id).to_dict())


@playlists_bp.route('', methods=['POST'])
def create_playlist():
    """Create a playlist from {name, songs}"""
    data = _body()
    playlist = store.create_playlist(data.get('name'), data.get('songs'))
    current_app.logger.info('Created playlist id=%s name="%s"', playlist.id, playlist.name)
    return jsonify(playlist.to_dict())


@playlists_bp.route('/<playlist_id>', methods=['PUT'])
def update_playlist(playlist_id):
    """Replace the fields present in the body; absent fields are left as they are."""
    patch = PlaylistPatch.from_body(_body())
    playlist = store.replace_playlist(playlist_id, patch)
    return jsonify(playlist.to_dict())


@playlists_bp.route('/<playlist_id>', methods=['DELETE'])
def delete_playlist(playlist_id):
    store.delete_playlist(playlist_id)
    current_app.logger.info('Deleted playlist id=%s', playlist_id)
    return jsonify({'message': 'Playlist deleted successfully'})
