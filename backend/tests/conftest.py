import os
import sys
import pytest

# Ensure the backend root (containing the `scorekeeper` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from scorekeeper import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = 'DEBUG'
    BCRYPT_LOG_ROUNDS = 4
    DEFAULT_RUMMY_MAX_POINTS = 120
    LEADERBOARD_SIZE = 5
    RECENT_GAMES_LIMIT = 10
    INITIAL_ADMIN_USERNAME = 'admin'
    INITIAL_ADMIN_PASSWORD = 'admin-pass'
    INITIAL_ADMIN_NAME = 'Admin'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    # The app context below stays open for the whole test, so requests share
    # its `g`. Drop Flask-Login's cached user so each request loads its own.
    @application.before_request
    def _forget_cached_login_user():
        from flask import g
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import scorekeeper.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin_client(flask_app):
    test_client = flask_app.test_client()
    res = test_client.post('/login', json={'username': 'admin', 'password': 'admin-pass'})
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def player_client(flask_app, admin_client):
    admin_client.post('/users/add', json={'username': 'pat', 'password': 'pat-pass', 'name': 'Pat'})
    test_client = flask_app.test_client()
    res = test_client.post('/login', json={'username': 'pat', 'password': 'pat-pass'})
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def make_players(flask_app):
    """Add roster players by name and return their ids in the same order."""
    from scorekeeper.services.roster import PlayerStore

    def _make(*names):
        store = PlayerStore(db.session)
        return [store.add_player(name, avatar='🎯').id for name in names]

    return _make


@pytest.fixture()
def ledger(flask_app):
    from scorekeeper.services.games import GameLedger
    from scorekeeper.services.games.storage import GameStore
    from scorekeeper.services.roster import PlayerStore

    return GameLedger(GameStore(db.session), PlayerStore(db.session))


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
