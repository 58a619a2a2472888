"""HTTP routes for admin authentication."""

import smtplib

from flask import current_app, jsonify, session
from flask_login import login_user, logout_user

from errors import ConfigurationError, MailDeliveryError
from extensions import login_manager, logger
from mailer import recovery_recipient, send_email, smtp_config
from models import AdminUser
from permissions import admin_required, is_admin
from utils import json_body, mask_email

from . import bp
from .credentials import CredentialResolver
from .tokens import GENERIC_RESET_MESSAGE, ResetTokenRegistry, request_reset, reset_password


@login_manager.user_loader
def load_user(user_id: str | None) -> AdminUser | None:
    """Resolve the admin principal for Flask-Login sessions."""

    if user_id != AdminUser.id:
        return None
    return AdminUser(session.get("username"))


def _credentials() -> CredentialResolver:
    return current_app.extensions["credentials"]


def _reset_tokens() -> ResetTokenRegistry:
    return current_app.extensions["reset_tokens"]


@bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    username = _credentials().authenticate(data.get("username"), data.get("password"))
    session.permanent = True
    session["username"] = username
    login_user(AdminUser(username))
    return jsonify(success=True, message="Logged in successfully")


@bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    session.clear()
    return jsonify(success=True, message="Logged out successfully")


@bp.route("/check", methods=["GET"])
def check():
    return jsonify(isAuthenticated=is_admin())


@bp.route("/request-password-reset", methods=["POST"])
def request_password_reset():
    data = json_body()
    masked = request_reset(_credentials(), _reset_tokens(), data.get("username"))
    if masked is None:
        return jsonify(success=True, message=GENERIC_RESET_MESSAGE)
    return jsonify(
        success=True,
        emailSent=True,
        maskedEmail=masked,
        message=f"Reset code sent to {masked}",
    )


@bp.route("/reset-password", methods=["POST"])
def reset_password_with_code():
    data = json_body()
    reset_password(_credentials(), _reset_tokens(), data.get("resetCode"), data.get("newPassword"))
    return jsonify(success=True, message="Password reset successfully")


@bp.route("/change-password", methods=["POST"])
@admin_required
def change_password():
    data = json_body()
    _credentials().change_password(data.get("currentPassword"), data.get("newPassword"))
    return jsonify(success=True, message="Password changed successfully")


@bp.route("/change-username", methods=["POST"])
@admin_required
def change_username():
    data = json_body()
    username = _credentials().change_username(data.get("currentPassword"), data.get("newUsername"))
    session["username"] = username
    return jsonify(success=True, message=f'Username changed to "{username}"')


@bp.route("/admin-info", methods=["GET"])
@admin_required
def admin_info():
    return jsonify(username=_credentials().admin_username())


@bp.route("/test-email", methods=["POST"])
@admin_required
def test_email():
    smtp = smtp_config()
    if smtp is None:
        raise ConfigurationError("SMTP not configured. Enter your Gmail address and App Password first.")
    recipient = recovery_recipient(smtp)
    sender = smtp["user"]
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 480px; margin: 0 auto; padding: 32px; background: #111118; color: #ffffff; border-radius: 12px;">
        <h2 style="color: #00d4aa; margin-bottom: 16px;">Email Configuration Working</h2>
        <p style="color: #9ca3af;">This is a test email from your admin panel. If you received this, your SMTP settings are configured correctly.</p>
        <p style="color: #6b7280; font-size: 13px; margin-top: 16px;">Sent from: {sender}<br>Sent to: {recipient}</p>
    </div>
    """
    try:
        send_email(recipient, "Test Email - Admin Panel", html, smtp)
    except (smtplib.SMTPException, OSError) as exc:
        logger.exception("Test email failed")
        raise MailDeliveryError(f"Email failed: {exc}") from exc
    return jsonify(success=True, message=f"Test email sent to {mask_email(recipient)}")
