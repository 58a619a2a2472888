# -*- coding: utf-8 -*-
"""
Admin credentials.

Source of truth is the settings table:
- admin_password_hash — werkzeug hash of the admin password;
- admin_username      — login name (exact, case-sensitive match).

The environment (ADMIN_USERNAME / ADMIN_PASSWORD) only seeds those rows on
the first start. After that every restart takes the stored values, and
password/username changes made from the admin panel survive restarts.
"""

import hmac
import re
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from errors import AuthError, ConfigurationError, ValidationError
from extensions import logger
from modules.settings.models import SensitiveKey, get_setting, set_setting

# Used when nothing is configured at all. Startup logs a warning.
FALLBACK_PASSWORD = "changeme"

MIN_PASSWORD_LENGTH = 8
USERNAME_MIN, USERNAME_MAX = 3, 50
USERNAME_RE = re.compile(r"^[A-Za-z0-9._@-]+$")

# werkzeug formats: "scrypt:32768:8:1$salt$hex", "pbkdf2:sha256:600000$salt$hex"
_HASH_RE = re.compile(r"^(scrypt|pbkdf2):[^$]+\$[^$]+\$[0-9a-f]+$")


def looks_hashed(value: Optional[str]) -> bool:
    return bool(value and _HASH_RE.match(value))


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class CredentialResolver:
    """Resolves and updates the single admin identity."""

    def __init__(self, env_username: str = "admin", env_password: Optional[str] = None,
                 allow_insecure: bool = True) -> None:
        self.env_username = env_username
        self.env_password = env_password
        self.allow_insecure = allow_insecure
        self._password_hash: Optional[str] = None

    @classmethod
    def from_config(cls, config) -> "CredentialResolver":
        return cls(
            env_username=config.get("ADMIN_USERNAME") or "admin",
            env_password=config.get("ADMIN_PASSWORD"),
            allow_insecure=config.get("ALLOW_INSECURE_ADMIN_PASSWORD", True),
        )

    # ------ startup ------

    def initialize(self) -> None:
        """Adopt the stored hash, or seed it from the environment and persist it."""
        stored = get_setting(SensitiveKey.ADMIN_PASSWORD_HASH)
        if stored:
            self._password_hash = stored
            logger.info("Admin password loaded from database")
        else:
            if not self.env_password:
                if not self.allow_insecure:
                    raise ConfigurationError(
                        "ADMIN_PASSWORD is not set and ALLOW_INSECURE_ADMIN_PASSWORD is off"
                    )
                logger.warning(
                    "ADMIN_PASSWORD not set, using the insecure default password. "
                    "Change it before deploying!"
                )
                new_hash = generate_password_hash(FALLBACK_PASSWORD)
            elif looks_hashed(self.env_password):
                new_hash = self.env_password
            else:
                new_hash = generate_password_hash(self.env_password)
            set_setting(SensitiveKey.ADMIN_PASSWORD_HASH, new_hash)
            self._password_hash = new_hash
            logger.info("Initial admin password hash saved to database")

        if not get_setting(SensitiveKey.ADMIN_USERNAME):
            set_setting(SensitiveKey.ADMIN_USERNAME, self.env_username)

    # ------ reads ------

    def admin_username(self) -> str:
        """Re-read on every call so a username change applies without a restart."""
        return get_setting(SensitiveKey.ADMIN_USERNAME) or self.env_username

    @property
    def password_hash(self) -> Optional[str]:
        return get_setting(SensitiveKey.ADMIN_PASSWORD_HASH) or self._password_hash

    def verify_password(self, password) -> bool:
        current = self.password_hash
        if not isinstance(password, str) or not password or not current:
            return False
        return check_password_hash(current, password)

    # ------ operations ------

    def authenticate(self, username, password) -> str:
        """Return the admin username on success; raise ``AuthError`` otherwise."""
        if not isinstance(username, str) or not _same(username, self.admin_username()):
            raise AuthError("Invalid credentials")
        if not self.verify_password(password):
            raise AuthError("Invalid credentials")
        return username

    def set_password(self, new_password: str) -> None:
        new_hash = generate_password_hash(new_password)
        set_setting(SensitiveKey.ADMIN_PASSWORD_HASH, new_hash)
        self._password_hash = new_hash

    def change_password(self, current_password, new_password) -> None:
        if not current_password or not new_password:
            raise ValidationError(None, "Passwords are required")
        validate_new_password(new_password)
        if current_password == new_password:
            raise ValidationError("newPassword", "New password must be different from current password")
        if not self.verify_password(current_password):
            raise AuthError("Current password is incorrect")
        self.set_password(new_password)

    def change_username(self, current_password, new_username) -> str:
        if not current_password or not new_username or not isinstance(new_username, str):
            raise ValidationError(None, "Current password and new username are required")
        trimmed = validate_username(new_username)
        if not self.verify_password(current_password):
            raise AuthError("Password is incorrect")
        self.set_username(trimmed)
        return trimmed

    def set_username(self, username: str) -> None:
        set_setting(SensitiveKey.ADMIN_USERNAME, username)


def validate_new_password(new_password) -> None:
    if not isinstance(new_password, str) or len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            "newPassword", f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def validate_username(new_username) -> str:
    """Trimmed username, or ``ValidationError``."""
    trimmed = (new_username or "").strip()
    if len(trimmed) < USERNAME_MIN:
        raise ValidationError("newUsername", f"Username must be at least {USERNAME_MIN} characters")
    if len(trimmed) > USERNAME_MAX:
        raise ValidationError("newUsername", f"Username must be {USERNAME_MAX} characters or less")
    if not USERNAME_RE.fullmatch(trimmed):
        raise ValidationError(
            "newUsername",
            "Username can only contain letters, numbers, dots, hyphens, underscores, and @",
        )
    return trimmed
