"""Key/value settings: persistence and the exposure boundary.

One table backs both secrets (admin credentials, SMTP login) and public site
copy (hero text and the like). ``SensitiveKey`` lists the keys that must never
leave the server through the public read path.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from errors import Forbidden, StorageError, ValidationError
from extensions import db, logger


class SensitiveKey(str, Enum):
    ADMIN_PASSWORD_HASH = "admin_password_hash"
    ADMIN_USERNAME = "admin_username"
    SMTP_USER = "smtp_user"
    SMTP_APP_PASSWORD = "smtp_app_password"
    RECOVERY_EMAIL = "recovery_email"


SENSITIVE_KEYS = frozenset(key.value for key in SensitiveKey)

# Shown to the admin UI in place of a stored SMTP app password
SECRET_MASK = "••••••••••••••••"

DEFAULT_SETTINGS = [
    ("hero_name", "Bishwash"),
    ("hero_lastname", "Acharya"),
    ("hero_tagline", "Building clean, clear, and genuinely useful digital experiences."),
    ("hero_roles", "Designer, Developer, Data/Business Analyst, Content Creator"),
]


class Setting(db.Model):
    """A single configuration value."""

    __tablename__ = "settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Setting {self.key}>"


# ---------- Store ----------

def get_setting(key):
    """Value for ``key`` or ``None``. Enum members are accepted as keys."""
    key = getattr(key, "value", key)
    try:
        row = db.session.get(Setting, key)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Could not read setting %s", key)
        raise StorageError("Could not read settings") from exc
    return row.value if row is not None else None


def set_setting(key, value):
    """Insert ``key`` or update its value; ``updated_at`` is refreshed either way."""
    key = getattr(key, "value", key)
    try:
        row = db.session.get(Setting, key)
        if row is None:
            db.session.add(Setting(key=key, value=value, updated_at=datetime.utcnow()))
        else:
            row.value = value
            row.updated_at = datetime.utcnow()
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Could not save setting %s", key)
        raise StorageError("Could not save setting") from exc


def all_settings():
    try:
        return Setting.query.order_by(Setting.key).all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Could not list settings")
        raise StorageError("Could not read settings") from exc


def seed_default_settings():
    """Insert the default site copy for keys that do not exist yet."""
    existing = {row.key for row in all_settings()}
    missing = [(k, v) for k, v in DEFAULT_SETTINGS if k not in existing]
    if not missing:
        return 0
    for key, value in missing:
        set_setting(key, value)
    logger.info("Seeded %d default settings", len(missing))
    return len(missing)


# ---------- Exposure ----------

def public_settings():
    """Everything except the sensitive keys; safe for anonymous visitors."""
    return {row.key: row.value for row in all_settings() if row.key not in SENSITIVE_KEYS}


def admin_settings():
    """Everything except the password hash; the SMTP app password is masked."""
    result = {}
    for row in all_settings():
        if row.key == SensitiveKey.ADMIN_PASSWORD_HASH.value:
            continue
        if row.key == SensitiveKey.SMTP_APP_PASSWORD.value and row.value:
            result[row.key] = SECRET_MASK
        else:
            result[row.key] = row.value
    return result


def write_setting(key, value):
    """Generic admin write. The password hash only changes through the password flows."""
    if key == SensitiveKey.ADMIN_PASSWORD_HASH.value:
        raise Forbidden("Cannot modify password hash directly")
    if not key or len(key) > 100:
        raise ValidationError("key", "Setting key must be between 1 and 100 characters")
    if isinstance(value, bool) or not isinstance(value, (str, int, float, type(None))):
        raise ValidationError("value", "Setting value must be a string")
    if value is not None and not isinstance(value, str):
        value = str(value)
    set_setting(key, value)
