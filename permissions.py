# permissions.py
"""
Access control for the admin API.

There is exactly one administrative identity, so the only question a route
asks is "is this session the admin?":
- admin_required — decorator for mutating/admin-only routes (401 JSON otherwise).
- is_admin()     — for public routes that show more to the admin (hidden rows).
"""

from functools import wraps

from flask import jsonify
from flask_login import current_user, login_required

from extensions import login_manager


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(error="Unauthorized"), 401


def admin_required(view_func):
    """
    Example:
        @bp.route("/things", methods=["POST"])
        @admin_required
        def create_thing(): ...
    """

    @wraps(view_func)
    @login_required
    def wrapped(*args, **kwargs):
        return view_func(*args, **kwargs)

    return wrapped


def is_admin() -> bool:
    return bool(current_user.is_authenticated)
