import json
import os
import sys
import pytest

# Ensure the backend root (containing the `gameshow` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gameshow import create_app, socketio
from gameshow.models import GameSettings
from gameshow.services.games.registry import SessionRegistry

NAMESPACE = '/ws'

SAMPLE_BANK = {
    'general': [
        {'question': 'Q1', 'choices': ['a', 'b'], 'answer': 1},
        {'question': 'Q2', 'choices': ['a', 'b'], 'answer': 0},
        {'question': 'Q3', 'choices': ['a', 'b'], 'answer': 1},
    ],
    'buzzer': [
        {'question': 'Largest ocean?', 'answer': 'Pacific'},
    ],
}


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = 'http://localhost:5173'
    SOCKETIO_NAMESPACE = NAMESPACE
    QUESTION_BANK_PATH = None


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingHub:
    """In-memory stand-in for the Socket.IO hub: records every emit."""

    def __init__(self):
        self.sent = []
        self.rooms = {}
        self.closed = []
        self.tasks = []

    def emit(self, event, data=None, to=None):
        self.sent.append((event, data, to))

    def emit_each(self, event, data, sids):
        for sid in list(sids):
            self.emit(event, data, to=sid)

    def enter_room(self, sid, room):
        self.rooms.setdefault(room, set()).add(sid)

    def leave_room(self, sid, room):
        self.rooms.get(room, set()).discard(sid)

    def close_room(self, room):
        self.closed.append(room)
        self.rooms.pop(room, None)

    def start_background_task(self, target, *args, **kwargs):
        self.tasks.append((target, args, kwargs))

    def sleep(self, seconds):
        pass

    def events(self, name, to=None):
        return [data for event, data, dest in self.sent if event == name and (to is None or dest == to)]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def bank_path(tmp_path):
    path = tmp_path / 'questions.json'
    path.write_text(json.dumps(SAMPLE_BANK), encoding='utf-8')
    return str(path)


@pytest.fixture()
def flask_app(bank_path):
    class Config(TestConfig):
        QUESTION_BANK_PATH = bank_path

    application = create_app(Config)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def hub():
    return RecordingHub()


@pytest.fixture()
def registry(hub, clock):
    return SessionRegistry(hub, GameSettings(ticker_autostart=False), clock=clock)


@pytest.fixture()
def show(registry):
    """A room hosted by 'host' with players 'ann' and 'bob'."""
    session = registry.create_session('host')
    registry.join_session(session.code, 'ann', 'Ann')
    registry.join_session(session.code, 'bob', 'Bob')
    return session
