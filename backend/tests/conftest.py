import os
import random
import sys
import pytest

# Ensure the backend root (containing the `brainbrawl` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from brainbrawl import create_app, socketio
from brainbrawl.services.games.broadcaster import Broadcaster
from brainbrawl.services.games.manager import GameManager
from brainbrawl.services.games.settings import GameSettings
from config import Config


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    # Keep background timers from firing while a socket test runs
    SPLASH_DURATION_SEC = 600
    LEADERBOARD_DURATION_SEC = 600
    DEFAULT_TIMER_SECONDS = 600
    FEATURE_CPU_TEAMS = False


class ManualScheduler:
    """Scheduler double: timers only fire when a test says so."""

    def __init__(self):
        self.pending = {}

    def schedule(self, key, delay, callback, *args):
        self.pending[key] = (delay, callback, args)
        return len(self.pending)

    def cancel(self, key):
        self.pending.pop(key, None)

    def cancel_all(self):
        self.pending.clear()

    def is_pending(self, key):
        return key in self.pending

    def delay_of(self, key):
        return self.pending[key][0]

    def keys(self, kind):
        return [k for k in self.pending if k == kind or (isinstance(k, tuple) and k[0] == kind)]

    def fire(self, key):
        delay, callback, args = self.pending.pop(key)
        callback(*args)

    def fire_all(self, kind):
        for key in self.keys(kind):
            if key in self.pending:
                self.fire(key)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingEmitter:
    def __init__(self):
        self.sent = []

    def __call__(self, event, payload, to):
        self.sent.append((event, payload, to))

    def named(self, event, to=None):
        return [p for e, p, t in self.sent if e == event and (to is None or t == to)]

    def last(self, event, to=None):
        matches = self.named(event, to)
        return matches[-1] if matches else None

    def clear(self):
        self.sent.clear()


DEFAULT_SETTINGS = dict(
    rounds_per_game=10,
    points_per_second=1,
    default_timer_seconds=30,
    players_per_team=4,
    feature_cpu_teams=False,
    trash_talk_phrases=tuple(Config.TRASH_TALK_PHRASES),
    cpu_player_names=tuple(Config.CPU_PLAYER_NAMES),
    cpu_team_names=tuple(Config.CPU_TEAM_NAMES),
)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def emitter():
    return RecordingEmitter()


@pytest.fixture()
def make_manager(clock, scheduler, emitter):
    def _make(**overrides):
        settings = GameSettings(**{**DEFAULT_SETTINGS, **overrides})
        return GameManager(settings, Broadcaster(emitter), scheduler, clock=clock, rng=random.Random(7))
    return _make


@pytest.fixture()
def manager(make_manager):
    return make_manager()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


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
