"""Outgoing mail.

SMTP credentials are resolved on every send: the settings table first
(``smtp_user`` / ``smtp_app_password``, editable from the admin panel), then
``GMAIL_USER`` / ``GMAIL_APP_PASSWORD`` from the environment.
"""

import smtplib
from email.mime.text import MIMEText

from flask import current_app

from modules.settings.models import SensitiveKey, get_setting


def smtp_config():
    """Dict with host/port/user/password/timeout, or ``None`` when not configured."""
    user = get_setting(SensitiveKey.SMTP_USER) or current_app.config.get("GMAIL_USER")
    password = get_setting(SensitiveKey.SMTP_APP_PASSWORD) or current_app.config.get("GMAIL_APP_PASSWORD")
    if not user or not password:
        return None
    return {
        "host": current_app.config.get("SMTP_HOST", "smtp.gmail.com"),
        "port": int(current_app.config.get("SMTP_PORT", 587)),
        "timeout": current_app.config.get("SMTP_TIMEOUT", 20),
        "user": user,
        "password": password,
    }


def recovery_recipient(smtp_conf):
    """Where admin mail goes: the recovery address, else the SMTP account itself."""
    return get_setting(SensitiveKey.RECOVERY_EMAIL) or (smtp_conf["user"] if smtp_conf else None)


def send_email(to_email, subject, html_body, smtp_conf):
    """Send one HTML message. SMTP and socket errors propagate to the caller."""
    msg = MIMEText(html_body, "html", "utf-8")
    msg["Subject"] = subject
    msg["From"] = smtp_conf["user"]
    msg["To"] = to_email
    with smtplib.SMTP(smtp_conf["host"], smtp_conf["port"], timeout=smtp_conf["timeout"]) as server:
        server.starttls()
        server.login(smtp_conf["user"], smtp_conf["password"])
        server.sendmail(msg["From"], [to_email], msg.as_string())
