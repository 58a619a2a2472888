"""HTTP routes for portfolio content.

One set of views serves every table in ``TABLES``; the URL converter only
matches registered table names.
"""

from flask import jsonify

from permissions import admin_required, is_admin
from utils import json_body

from . import bp
from .tables import TABLES, TAGGED_TABLES, engine_for

TABLE = "<any({}):table>".format(", ".join(TABLES))
TAGGED_TABLE = "<any({}):table>".format(", ".join(TAGGED_TABLES))


# ---------- Tag reads (projects, blog) ----------

@bp.route("/<any(projects):table>/featured")
def featured_items(table: str):
    return jsonify(engine_for(table).featured_and_recent(include_hidden=is_admin()))


@bp.route(f"/{TAGGED_TABLE}/category/<string:category>")
def items_by_category(table: str, category: str):
    return jsonify(engine_for(table).by_category(category, include_hidden=is_admin()))


@bp.route(f"/{TAGGED_TABLE}/categories")
def item_categories(table: str):
    return jsonify(engine_for(table).categories())


# ---------- CRUD ----------

@bp.route(f"/{TABLE}", methods=["GET"])
def list_items(table: str):
    return jsonify(engine_for(table).list(include_hidden=is_admin()))


@bp.route(f"/{TABLE}/<string:item_id>", methods=["GET"])
def get_item(table: str, item_id: str):
    return jsonify(engine_for(table).get(item_id, include_hidden=is_admin()))


@bp.route(f"/{TABLE}", methods=["POST"])
@admin_required
def create_item(table: str):
    item_id = engine_for(table).create(json_body())
    return jsonify(id=item_id, success=True)


@bp.route(f"/{TABLE}/<string:item_id>", methods=["PUT"])
@admin_required
def update_item(table: str, item_id: str):
    changes = engine_for(table).update(item_id, json_body())
    return jsonify(success=True, changes=changes)


@bp.route(f"/{TABLE}/<string:item_id>", methods=["DELETE"])
@admin_required
def delete_item(table: str, item_id: str):
    changes = engine_for(table).delete(item_id)
    return jsonify(success=True, changes=changes)


@bp.route(f"/{TABLE}/<string:item_id>/toggle", methods=["PATCH"])
@admin_required
def toggle_item(table: str, item_id: str):
    changes = engine_for(table).toggle_hidden(item_id)
    return jsonify(success=True, changes=changes)
