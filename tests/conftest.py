# tests/conftest.py
import os
import sys
import pytest
from flask import g

# so that `from app import create_app` works when pytest runs from the repo root
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import mailer
from app import create_app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse"


@pytest.fixture()
def app():
    app = create_app({
        "TESTING": True,
        "PRODUCTION": False,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SECRET_KEY": "test-secret",
        "ADMIN_USERNAME": ADMIN_USERNAME,
        "ADMIN_PASSWORD": ADMIN_PASSWORD,
        "GMAIL_USER": None,
        "GMAIL_APP_PASSWORD": None,
        "APP_BASE_URL": "http://portfolio.test",
        "RESET_SWEEP_ENABLED": False,   # tests call registry.sweep() directly
    })

    @app.before_request
    def _forget_cached_user():
        # requests reuse the fixture's app context, and with it flask.g
        g.pop("_login_user", None)

    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def admin_client(client):
    """A client whose session is already the admin's."""
    with client.session_transaction() as session:
        session["_user_id"] = "admin"
        session["_fresh"] = True
        session["username"] = ADMIN_USERNAME
    return client


class FakeSMTP:
    """Records messages instead of talking to a server."""

    outbox = []
    fail = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        self.user = user

    def sendmail(self, from_addr, to_addrs, msg):
        if FakeSMTP.fail:
            raise OSError("connection refused")
        FakeSMTP.outbox.append({"from": from_addr, "to": to_addrs, "raw": msg})


@pytest.fixture()
def outbox(monkeypatch):
    FakeSMTP.outbox = []
    FakeSMTP.fail = False
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP.outbox


@pytest.fixture()
def failing_smtp(outbox):
    FakeSMTP.fail = True
    return outbox
