import os
import sys
import pytest

# Ensure the backend root (containing the `partyroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from flask import g

from partyroom import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = '*'
    ANSWER_GRACE_SEC = 0
    QUESTION_COUNTDOWN_SEC = 60
    MAX_ROUNDS = 10
    QUESTIONS_PER_TURN = 3
    MIN_PLAYERS = 2
    MAX_PLAYERS_LIMIT = 20
    DEFAULT_MAX_PLAYERS = 10
    ROOM_LOCK_TIMEOUT_SEC = 2.0
    TOKEN_MAX_AGE_SEC = 3600


@pytest.fixture()
def flask_app():
    from partyroom.services.live.registry import registry
    from partyroom.services.rooms.locks import coordinator

    application = create_app(TestConfig)

    # Requests share the fixture's app context, so drop the user Flask-Login cached on g
    @application.before_request
    def _forget_cached_user():
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import partyroom.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    coordinator.reset()
    registry.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def game(flask_app):
    from partyroom.models import Game
    from partyroom.services.catalog.catalog import seed_default_games

    seed_default_games()
    return Game.query.filter_by(name='Never Have I Ever').first()


@pytest.fixture()
def make_user(flask_app):
    from partyroom.services.accounts.profiles import register_user

    def _make(name):
        return register_user(f'{name.lower()}@example.com', 'password', name)
    return _make


@pytest.fixture()
def auth_headers(flask_app):
    from partyroom.services.accounts.identity import issue_token

    def _headers(user):
        return {'Authorization': f'Bearer {issue_token(user)}'}
    return _headers


@pytest.fixture()
def make_room(game):
    """Create a room hosted by ``host`` and join ``guests`` in order, without starting it."""
    from partyroom.services.rooms import lifecycle

    def _make(host, *guests, max_players=None):
        room = lifecycle.create_room(host, game.id, max_players=max_players, name='Test room')
        for guest in guests:
            lifecycle.join_room(room.code, guest)
        return fresh(room.id)
    return _make


@pytest.fixture()
def sio_factory(flask_app):
    from partyroom.services.accounts.identity import issue_token

    clients = []

    def _connect(user=None, token=None):
        if user is not None:
            token = issue_token(user)
        test_client = socketio.test_client(flask_app, namespace='/ws', auth={'token': token} if token else None)
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        if test_client.is_connected('/ws'):
            test_client.disconnect(namespace='/ws')


def payloads(received, name):
    """Payloads of every packet in ``received`` named ``name``."""
    return [pkt['args'][0] for pkt in received if pkt['name'] == name]


def fresh(room_id):
    from partyroom.services.rooms import store

    db.session.expire_all()
    return store.require_room(room_id)
