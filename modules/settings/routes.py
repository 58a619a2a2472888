"""HTTP routes for site settings."""

from flask import jsonify

from permissions import admin_required
from utils import json_body

from . import bp
from .models import admin_settings, public_settings, write_setting


@bp.route("", methods=["GET"])
def get_public_settings():
    return jsonify(public_settings())


@bp.route("/secure", methods=["GET"])
@admin_required
def get_secure_settings():
    return jsonify(admin_settings())


@bp.route("/<string:key>", methods=["PUT"])
@admin_required
def put_setting(key: str):
    data = json_body()
    write_setting(key, data.get("value"))
    return jsonify(success=True)
