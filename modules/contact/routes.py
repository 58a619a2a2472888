"""HTTP routes for the contact form and the admin inbox."""

import smtplib
from datetime import datetime
from email.errors import MessageError

from flask import current_app, jsonify, make_response, request
from markupsafe import escape

from errors import StorageError
from extensions import logger
from mailer import send_email, smtp_config
from permissions import admin_required
from utils import json_body

from . import bp
from .models import create_message, delete_message, export_csv, export_xlsx, list_messages, mark_read

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _notify_admin(msg) -> None:
    """Best effort: the message is already stored, a failed send is only logged."""
    try:
        smtp = smtp_config()
    except StorageError:
        return
    if smtp is None:
        return
    base_url = current_app.config.get("APP_BASE_URL") or request.host_url.rstrip("/")
    body = str(escape(msg.message)).replace("\n", "<br>")
    html = f"""
    <h3>New Contact Form Submission</h3>
    <p><strong>Name:</strong> {escape(msg.name)}</p>
    <p><strong>Email:</strong> {escape(msg.email)}</p>
    <p><strong>Subject:</strong> {escape(msg.subject or 'N/A')}</p>
    <p><strong>Message:</strong></p>
    <p>{body}</p>
    <hr>
    <p>View in admin panel: <a href="{base_url}/admin/dashboard">Open Dashboard</a></p>
    """
    try:
        send_email(smtp["user"], f"Portfolio Contact: {msg.subject or 'New message'}", html, smtp)
    except (smtplib.SMTPException, OSError, MessageError):
        logger.exception("Contact notification email failed for message %s", msg.id)


@bp.route("", methods=["POST"])
def submit_message():
    msg = create_message(json_body())
    _notify_admin(msg)
    return jsonify(success=True, message="Message sent successfully")


@bp.route("/messages", methods=["GET"])
@admin_required
def get_messages():
    return jsonify([m.to_dict() for m in list_messages()])


@bp.route("/messages/export", methods=["GET"])
@admin_required
def export_messages():
    """CSV by default; ?format=xlsx for a workbook."""
    messages = list_messages()
    stamp = f"{datetime.utcnow():%Y-%m-%d}"
    if request.args.get("format") == "xlsx":
        resp = make_response(export_xlsx(messages))
        resp.headers["Content-Type"] = XLSX_MIMETYPE
        resp.headers["Content-Disposition"] = f'attachment; filename="messages-{stamp}.xlsx"'
        return resp

    resp = make_response(export_csv(messages))
    resp.headers["Content-Type"] = "text/csv; charset=utf-8"
    resp.headers["Content-Disposition"] = f'attachment; filename="messages-{stamp}.csv"'
    return resp


@bp.route("/messages/<string:message_id>/read", methods=["PATCH"])
@admin_required
def read_message(message_id: str):
    return jsonify(success=True, changes=mark_read(message_id))


@bp.route("/messages/<string:message_id>", methods=["DELETE"])
@admin_required
def remove_message(message_id: str):
    return jsonify(success=True, changes=delete_message(message_id))
