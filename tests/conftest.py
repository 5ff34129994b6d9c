"""
Pytest configuration and fixtures for all tests.
"""

import json
import os
import sys

import pytest

# Service modules are flat files in ses-mock/
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../ses-mock'))

os.environ.setdefault('LOG_LEVEL', 'INFO')

from config import Config
from main import create_app
from store import EmailStore

AUTH_HEADERS = {
    'Authorization': 'AWS4-HMAC-SHA256 Credential=ANY_STRING/20240101/aws-ses-v2-local/ses/aws4_request',
}


class FakeClock:
    """Callable clock whose time the test sets explicitly."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def templates_dir(tmp_path):
    directory = tmp_path / 'email-templates'
    directory.mkdir()
    (directory / 'template.json').write_text(json.dumps({
        "Subject": {"Data": "This is the subject"},
        "Body": {"Text": {"Data": "This is the email contents"}},
    }))
    (directory / 'greeting.json').write_text(json.dumps({
        "Subject": {"Data": "Hi {{name}}"},
        "Body": {"Text": {"Data": "Bye {{name}}"}},
    }))
    (directory / 'welcome.json').write_text(json.dumps({
        "Subject": {"Data": "Welcome {{name}}"},
        "Body": {
            "Text": {"Data": "Hello {{name}}, visit {{url}}. {{name}} again."},
            "Html": {"Data": "<p>Hello {{name}}</p><a href=\"{{url}}\">{{missing}}</a>"},
        },
    }))
    return directory


@pytest.fixture
def config(templates_dir):
    return Config(templates_dir=str(templates_dir))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(config, clock):
    app = create_app(config)
    app.extensions['ses_store'] = EmailStore(clock=clock)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def email_store(app):
    return app.extensions['ses_store']


@pytest.fixture
def auth_headers():
    return dict(AUTH_HEADERS)
