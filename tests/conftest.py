"""Shared fixtures for the Lake Henry test suite."""

from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from lakehenry import create_app
from lakehenry.config import Config
from lakehenry.extensions import db

ORIGIN = {'Origin': 'http://localhost'}
JSON = {'Accept': 'application/json'}
ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'correct horse battery'


class ConfigForTests(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    KV_URL = 'memory://'
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'
    ADMIN_USERNAME = ADMIN_USERNAME
    ADMIN_PASSWORD = ADMIN_PASSWORD
    TURNSTILE_SECRET = 'turnstile-test-secret'
    RESEND_API_KEY = 're_test_key'
    FROM_EMAIL = 'website@friendsoflakehenry.com'
    TO_EMAIL = 'board@friendsoflakehenry.com'
    SITE_URL = 'https://friendsoflakehenry.com'
    FACEBOOK_PAGE_ID = '61552199315213'


@pytest.fixture
def app(tmp_path):
    """Create and configure a test application instance."""
    app = create_app(ConfigForTests)
    app.config['OBJECT_STORE_ROOT'] = str(tmp_path / 'objects')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create a test client for the app."""
    return app.test_client()


def login(client, username=ADMIN_USERNAME, password=ADMIN_PASSWORD, next_path='/admin', **headers):
    return client.post(
        '/api/admin/login',
        data={'username': username, 'password': password, 'next': next_path},
        headers={**ORIGIN, **headers},
    )


@pytest.fixture
def admin_client(client):
    """Test client holding a live admin session cookie."""
    response = login(client)
    assert response.status_code == 303
    assert client.get_cookie('admin_session') is not None
    return client


def location(response):
    """Split a redirect into its path and single-valued query params."""
    parts = urlsplit(response.headers['Location'])
    return parts.path, {key: values[0] for key, values in parse_qs(parts.query).items()}


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError('no body')
        return self._payload


class Outbound:
    """Records outbound HTTP calls and answers them by URL substring."""

    def __init__(self):
        self.calls = []
        self.routes = {
            'turnstile': FakeResponse(200, {'success': True}),
            'resend': FakeResponse(200, {'id': 'email-1'}),
        }

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        for fragment, response in self.routes.items():
            if fragment in url:
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f'Unexpected outbound call to {url}')

    def calls_to(self, fragment):
        return [kwargs for url, kwargs in self.calls if fragment in url]


@pytest.fixture
def outbound(monkeypatch):
    """Replace requests.post for the CAPTCHA verifier and email API."""
    fake = Outbound()
    monkeypatch.setattr(requests, 'post', fake)
    return fake
