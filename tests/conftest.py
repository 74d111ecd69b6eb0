import os
import sys
import pytest

# Ensure the repository root (containing the `spotguess` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from spotguess import create_app, socketio
from spotguess.services.game import GameSession
from spotguess.services.game.scheduler import ManualScheduler


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    DEFAULT_IMAGE_URL = '/images/sample.jpg'
    DEFAULT_ROUND_DURATION_SEC = 15
    DEFAULT_RADIUS_PX = 45
    DEFAULT_TARGET_X = 100
    DEFAULT_TARGET_Y = 100
    AUTO_NEXT_DEFAULT_DELAY_MS = 3000
    SHOW_FULL_MAX_DELAY_MS = 5000
    REQUEST_NEXT_MIN_DELAY_MS = 1500
    REQUEST_NEXT_BUFFER_MS = 2000
    MAX_CONTENT_LENGTH = 25 * 1024 * 1024


@pytest.fixture()
def flask_app(tmp_path):
    config = type('Cfg', (TestConfig,), {'UPLOAD_FOLDER': str(tmp_path / 'uploads')})
    application = create_app(config)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def game_session(flask_app):
    return flask_app.extensions['game_session']


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield make
    for test_client in clients:
        try:
            test_client.disconnect(namespace='/ws')
        except Exception:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()


# ---- transport-free session fixtures ----

@pytest.fixture()
def published():
    return []


@pytest.fixture()
def session(published):
    """A bare GameSession with manual timers; fired notifications land in ``published``."""
    return GameSession(config={}, scheduler=ManualScheduler(), publish=published.extend)

