from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from groupplay.errors import ValidationError
from groupplay.services.users import find_by_username, upsert_user

main = Blueprint('main', __name__)

# camelCase request keys accepted for profile updates
_PROFILE_KEYS = {
    'username': 'username',
    'email': 'email',
    'firstName': 'first_name',
    'lastName': 'last_name',
    'profileImageUrl': 'profile_image_url',
}


def _profile_from(data):
    profile = {}
    for key, field in _PROFILE_KEYS.items():
        if key in data:
            profile[field] = data[key]
    return profile


@main.route('/health')
def health():
    return jsonify({'status': 'ok'})


@main.route('/auth/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not username or not password:
        raise ValidationError('Missing username or password')
    if find_by_username(username):
        raise ValidationError('Username already exists')

    user = upsert_user(None, password=password, **_profile_from(data))
    login_user(user, remember=True)
    return jsonify(user.to_dict()), 201


@main.route('/auth/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = find_by_username(data.get('username'))
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify(user.to_dict())
    return jsonify({'message': 'Invalid username or password'}), 401


@main.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})


@main.route('/auth/user', methods=['GET'])
@login_required
def get_current_user():
    return jsonify(current_user.to_dict())


@main.route('/auth/user', methods=['PATCH'])
@login_required
def update_current_user():
    """Overwrite the caller's mutable profile fields."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Expected a JSON object')
    user = upsert_user(current_user.id, **_profile_from(data))
    return jsonify(user.to_dict())
