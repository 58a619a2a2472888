"""Shared models."""

from flask_login import UserMixin


class AdminUser(UserMixin):
    """The single administrative principal.

    There is no users table: the identity lives in the settings store
    (``admin_username`` / ``admin_password_hash``) and a session only needs
    to know that the caller has authenticated as it.
    """

    id = "admin"

    def __init__(self, username: str | None = None) -> None:
        self.username = username

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<AdminUser {self.username}>"
