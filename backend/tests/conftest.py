import os
import sys
import pytest
import requests

# Ensure the backend root (containing the `jogo_empatia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from jogo_empatia import create_app, db, socketio


class FakeResponse:
    def __init__(self, status_code=200, text='{"ok": true}'):
        self.status_code = status_code
        self.text = text


class FakeSession:
    """Stands in for requests.Session; records every POST."""

    def __init__(self, status_code=200, error=None):
        self.status_code = status_code
        self.error = error
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status_code)


@pytest.fixture()
def http_session():
    return FakeSession()


@pytest.fixture()
def test_config(tmp_path, http_session):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
        SQLALCHEMY_DATABASE_URI = 'sqlite://'
        SQLALCHEMY_TRACK_MODIFICATIONS = False
        WORD_SCORES_DIR = str(tmp_path / 'WordScores')
        SERVER_CONFIG_PATH = str(tmp_path / 'serverconfig.json')
        DEFAULT_SERVER_IP = '10.0.0.5'
        DEFAULT_SERVER_PORT = '8080'
        GAME_ID = 4
        SUBMIT_HTTP_SESSION = http_session
        REQUIRE_MINIMUM_SELECTION = True
        HAS_SUMMARY_CONTINUE_STEP = True
        DEFAULT_LANGUAGE = 'pt'

    return TestConfig


@pytest.fixture()
def flask_app(test_config):
    application = create_app(test_config)
    with application.app_context():
        # Ensure models are imported so tables are created
        import jogo_empatia.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def kiosk(flask_app):
    from jogo_empatia.services.kiosk import EXTENSION_KEY
    return flask_app.extensions[EXTENSION_KEY]


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def network_down():
    return FakeSession(error=requests.ConnectionError('connection refused'))
