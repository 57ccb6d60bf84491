from flask import Blueprint, current_app, jsonify, redirect, request

from auth import current_user, get_auth, login_required

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


def _body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form.to_dict()
    return data


@users_bp.route('/register', methods=['POST'])
def register():
    """User registration"""
    data = _body()
    user = get_auth().register(data.get('username'), data.get('email'), data.get('password'))
    return jsonify({'message': 'Account created successfully', 'user': user.to_dict()}), 201


@users_bp.route('/login', methods=['POST'])
def login():
    """Password login; sets the session cookie and also returns a bearer token."""
    data = _body()
    user, token = get_auth().login(data.get('email'), data.get('password'))
    current_app.logger.info('User %s logged in', user.username)
    return jsonify({
        'message': f'Welcome back, {user.username}!',
        'user': user.to_dict(),
        'token': token,
    })


@users_bp.route('/logout', methods=['POST'])
def logout():
    get_auth().logout()
    return jsonify({'message': 'You have been logged out.'})


@users_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(current_user().to_dict())


@users_bp.route('/token', methods=['POST'])
@login_required
def issue_token():
    auth = get_auth()
    return jsonify({'token': auth.tokens.issue(current_user()), 'expiresIn': auth.tokens.max_age})


@users_bp.route('/auth/spotify', methods=['GET'])
def spotify_login():
    return redirect(get_auth().begin_spotify_login())


@users_bp.route('/auth/spotify/callback', methods=['GET'])
def spotify_callback():
    user = get_auth().complete_spotify_login(request.args.get('state'), request.args.get('code'))
    current_app.logger.info('User %s logged in with Spotify', user.username)
    client_url = current_app.config.get('CLIENT_URL')
    if client_url:
        return redirect(client_url)
    return jsonify({'message': f'Welcome, {user.display_name or user.username}!', 'user': user.to_dict()})
