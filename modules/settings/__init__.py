"""Site settings module package."""

from flask import Blueprint

bp = Blueprint("settings", __name__, url_prefix="/api/content/settings")

from . import models  # noqa: E402  pylint: disable=wrong-import-position
from . import routes  # noqa: E402  pylint: disable=wrong-import-position

__all__ = ["bp", "models", "routes"]
