# tests/conftest.py

import datetime
import json
import pytest
from unittest.mock import MagicMock

from masjid_site import create_app
from masjid_site.extensions import redis_client
from masjid_site.models import AuthSession
from masjid_site.services.admin_sync import AdminSyncController, NoticeBoard
from masjid_site.services.content_api import ContentApiClient
from masjid_site.utils.constants import Roles
from masjid_site.utils.time_utils import TimeSource, get_venue_timezone

SAST = get_venue_timezone('Africa/Johannesburg')


class FakeRedis:
    """Dict-backed stand-in for the few Redis calls the app makes."""
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value.encode() if isinstance(value, str) else value
        return True


class FakeClock:
    """Manually advanced venue clock."""
    def __init__(self, start):
        self.current = start

    def __call__(self, tz=None):
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + datetime.timedelta(**kwargs)


def fake_response(status=200, body=None, invalid_json=False):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if invalid_json:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


def ok(data=None, **extra):
    body = {'ok': True, **extra}
    if data is not None:
        body['data'] = data
    return fake_response(200, body)


@pytest.fixture(scope='session')
def app():
    """Session-wide application for testing."""
    app = create_app('testing')
    return app


@pytest.fixture(autouse=True)
def fake_redis(mocker):
    """Replaces the Redis connection for every test."""
    fake = FakeRedis()
    mocker.patch.object(redis_client, 'redis_client', fake)
    return fake


@pytest.fixture(scope='function')
def clock():
    return FakeClock(datetime.datetime(2025, 3, 10, 13, 0, 0, tzinfo=SAST))


@pytest.fixture(scope='function')
def runtime(app, clock):
    """A fresh runtime per test, driven by the fake clock."""
    rt = app.extensions['masjid_site']
    rt.init_app(app)
    rt.time_source = TimeSource(SAST, clock=clock, sleep=lambda s: None)
    yield rt
    with app.app_context():
        rt.admin_sessions.close_all()


@pytest.fixture(scope='function')
def test_client(app, runtime):
    return app.test_client()


@pytest.fixture(scope='function')
def app_ctx(app):
    with app.app_context():
        yield


@pytest.fixture(scope='function')
def http():
    """The requests.Session behind a ContentApiClient."""
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture(scope='function')
def api_client(http):
    return ContentApiClient('https://content.test/api', timeout=5, token='tok-1', session=http)


def make_controller(store, http, clock, role=Roles.SUPER_ADMIN, user_id=7):
    session = AuthSession(token='tok-1', user={'id': user_id, 'email': 'admin@example.com', 'role': role})
    client = ContentApiClient('https://content.test/api', timeout=5, token=session.token, session=http)
    return AdminSyncController(session=session, client=client, store=store, notices=NoticeBoard(2.5, clock))


def cached_site(fake_redis, key='site_config_cache'):
    raw = fake_redis.data.get(key)
    return json.loads(raw) if raw is not None else None
