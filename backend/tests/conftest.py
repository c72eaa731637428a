import os
import sys
import pytest

# Ensure the backend root (containing the `groupplay` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from groupplay import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = 'http://localhost:5173'
    MAX_GROUP_MEMBERS = 3
    INVITE_CODE_LENGTH = 8
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    # No app context is held while tests run: each request and socket event
    # gets its own, so Flask-Login never reuses another user's `g`.
    application = create_app(TestConfig)
    with application.app_context():
        import groupplay.models  # noqa: F401
        db.create_all()
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_user(flask_app):
    """Factory: register a user and return (logged-in client, user dict)."""
    def _make(username):
        user_client = flask_app.test_client()
        res = user_client.post('/api/auth/register', json={'username': username, 'password': 'password'})
        assert res.status_code == 201, res.get_json()
        return user_client, res.get_json()
    return _make


@pytest.fixture()
def sio_factory(flask_app):
    """Factory: Socket.IO test client sharing a logged-in HTTP client's cookies."""
    created = []

    def _make(http_client):
        sio = socketio.test_client(flask_app, flask_test_client=http_client, namespace='/ws')
        created.append(sio)
        return sio

    yield _make
    for sio in created:
        if sio.is_connected('/ws'):
            sio.disconnect(namespace='/ws')


def create_group(user_client, name='Game Night'):
    res = user_client.post('/api/groups', json={'name': name})
    assert res.status_code == 201, res.get_json()
    return res.get_json()


def join_group(user_client, invite_code):
    return user_client.post(f'/api/groups/join/{invite_code}')


def create_game(user_client, group_id, game_type='tic-tac-toe'):
    return user_client.post('/api/games', json={'groupId': group_id, 'gameType': game_type})


def move(user_client, game_id, payload):
    return user_client.post(f'/api/games/{game_id}/move', json={'move': payload})
