import atexit

import pytest

from app import create_app
from config import DEFAULT_SECRET_KEY
from errors import ConfigurationError

BASE = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "GMAIL_USER": None,
    "GMAIL_APP_PASSWORD": None,
    "RESET_SWEEP_ENABLED": False,
}


def test_production_refuses_default_secret_key():
    with pytest.raises(ConfigurationError, match="SECRET_KEY"):
        create_app({**BASE, "PRODUCTION": True, "SECRET_KEY": DEFAULT_SECRET_KEY,
                    "ADMIN_PASSWORD": "prod-password"})


def test_production_refuses_missing_admin_password():
    with pytest.raises(ConfigurationError, match="ADMIN_PASSWORD"):
        create_app({**BASE, "PRODUCTION": True, "SECRET_KEY": "a-long-random-secret",
                    "ADMIN_PASSWORD": None})


def test_production_starts_when_configured():
    app = create_app({**BASE, "PRODUCTION": True, "SECRET_KEY": "a-long-random-secret",
                      "ADMIN_PASSWORD": "prod-password"})
    assert app.config["PRODUCTION"] is True


def test_development_keeps_defaults():
    app = create_app({**BASE, "PRODUCTION": False, "SECRET_KEY": DEFAULT_SECRET_KEY,
                      "ALLOW_INSECURE_ADMIN_PASSWORD": True,
                      "ADMIN_PASSWORD": None})
    assert app.config["SECRET_KEY"] == DEFAULT_SECRET_KEY


def test_sweep_thread_is_stopped_at_exit(monkeypatch):
    registered = []
    monkeypatch.setattr(atexit, "register", registered.append)

    app = create_app({**BASE, "SECRET_KEY": "test-secret", "ADMIN_PASSWORD": "correct-horse",
                      "RESET_SWEEP_ENABLED": True})
    reset_tokens = app.extensions["reset_tokens"]
    try:
        assert registered == [reset_tokens.stop]
        assert reset_tokens._thread is not None
    finally:
        reset_tokens.stop()
    assert reset_tokens._thread is None
