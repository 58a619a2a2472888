import os
from datetime import timedelta


def _flag(name, default):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DEFAULT_SECRET_KEY = 'dev_secret_key'


class Config:
    # production refuses to start with the default key or without ADMIN_PASSWORD
    PRODUCTION = _flag('PRODUCTION', '0')

    SECRET_KEY = os.getenv('SECRET_KEY', DEFAULT_SECRET_KEY)
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URI', 'sqlite:///portfolio.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # session cookie
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Strict'
    SESSION_COOKIE_SECURE = _flag('SESSION_COOKIE_SECURE', '0')
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)

    # admin identity seed (the settings table wins once populated)
    ADMIN_USERNAME = os.getenv('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD') or None
    ALLOW_INSECURE_ADMIN_PASSWORD = _flag('ALLOW_INSECURE_ADMIN_PASSWORD', '1')

    # mail
    GMAIL_USER = os.getenv('GMAIL_USER') or None
    GMAIL_APP_PASSWORD = os.getenv('GMAIL_APP_PASSWORD') or None
    SMTP_HOST = os.getenv('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.getenv('SMTP_PORT', '587'))
    SMTP_TIMEOUT = int(os.getenv('SMTP_TIMEOUT', '20'))
    APP_BASE_URL = os.getenv('APP_BASE_URL') or None

    # password reset codes
    RESET_TOKEN_TTL_MINUTES = int(os.getenv('RESET_TOKEN_TTL_MINUTES', '15'))
    RESET_SWEEP_INTERVAL_SECONDS = int(os.getenv('RESET_SWEEP_INTERVAL_SECONDS', '900'))
    RESET_SWEEP_ENABLED = True
