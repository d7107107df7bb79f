import os
import sys
import pytest
from flask import g

# Ensure the backend root (containing the `livetimer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from livetimer import create_app, db, socketio, CHANNELS_KEY, TICKER_KEY, WS_NAMESPACE


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = []
    SESSION_TOKEN_COOKIE = 'sessionId'
    SESSION_MAX_AGE_SEC = 0
    ENFORCE_TIMER_OWNERSHIP = False
    TICK_INTERVAL_MS = 1000
    TICKER_ENABLED = False


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    # The fixture holds one app context open for the whole test, and Flask
    # reuses it for every test-client request, so `g` (where Flask-Login
    # caches the current user) would leak between requests and clients.
    # Start each request with an empty `g`, as a fresh app context would.
    @application.before_request
    def _fresh_request_globals():
        for name in list(g):
            g.pop(name, None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import livetimer.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def ticker(flask_app):
    return flask_app.extensions[TICKER_KEY]


@pytest.fixture()
def channels(flask_app):
    return flask_app.extensions[CHANNELS_KEY]


@pytest.fixture()
def login_as(flask_app):
    """Sign up and log in a user on a fresh HTTP client carrying its cookie."""
    def _login(username, password='password'):
        http = flask_app.test_client()
        res = http.post('/signup', data={'username': username, 'password': password})
        assert res.status_code == 201
        res = http.post('/login', data={'username': username, 'password': password})
        assert res.status_code == 302
        return http
    return _login


@pytest.fixture()
def ws_connect(flask_app):
    """Open Socket.IO test clients that share an HTTP client's cookies."""
    opened = []

    def _connect(http_client=None):
        ws = socketio.test_client(
            flask_app,
            namespace=WS_NAMESPACE,
            flask_test_client=http_client,
        )
        opened.append(ws)
        return ws

    yield _connect
    for ws in opened:
        try:
            if ws.is_connected(WS_NAMESPACE):
                ws.disconnect(namespace=WS_NAMESPACE)
        except Exception:
            pass


def received(ws):
    """Drain a socket client's queue into {event name: [payload, ...]}."""
    by_name = {}
    for pkt in ws.get_received(WS_NAMESPACE):
        by_name.setdefault(pkt['name'], []).append(pkt['args'][0])
    return by_name


def freeze_clock(monkeypatch, ms):
    """Pin the epoch-ms clock used for timer start/end stamps."""
    monkeypatch.setattr('livetimer.models.now_ms', lambda: ms)
    monkeypatch.setattr('livetimer.api.timers.now_ms', lambda: ms)
