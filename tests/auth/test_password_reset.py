"""Password reset by emailed code."""

import email
import re

import pytest

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME
from modules.auth.tokens import GENERIC_RESET_MESSAGE
from modules.settings.models import SensitiveKey, set_setting


@pytest.fixture()
def smtp_settings(app):
    set_setting(SensitiveKey.SMTP_USER, "sender@gmail.com")
    set_setting(SensitiveKey.SMTP_APP_PASSWORD, "abcd efgh ijkl mnop")
    set_setting(SensitiveKey.RECOVERY_EMAIL, "owner@example.com")


def _mailed_code(outbox):
    body = email.message_from_string(outbox[-1]["raw"]).get_payload(decode=True).decode("utf-8")
    return re.search(r">([A-Z0-9]{8})</span>", body).group(1)


def _request(client, username=ADMIN_USERNAME):
    return client.post("/api/auth/request-password-reset", json={"username": username})


def test_unknown_username_gets_generic_answer(client, app, smtp_settings, outbox):
    resp = _request(client, "somebody-else")
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": GENERIC_RESET_MESSAGE}
    assert outbox == []
    assert len(app.extensions["reset_tokens"]) == 0


def test_missing_username(client):
    resp = client.post("/api/auth/request-password-reset", json={})
    assert resp.status_code == 400


def test_reset_flow(client, smtp_settings, outbox):
    resp = _request(client)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["emailSent"] is True
    assert data["maskedEmail"] == "ow***@example.com"
    assert outbox[-1]["to"] == ["owner@example.com"]

    code = _mailed_code(outbox)
    resp = client.post("/api/auth/reset-password", json={"resetCode": f" {code} ", "newPassword": "fresh-password"})
    assert resp.status_code == 200

    login = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": "fresh-password"})
    assert login.status_code == 200
    old = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert old.status_code == 401


def test_code_works_only_once(client, smtp_settings, outbox):
    _request(client)
    code = _mailed_code(outbox)

    first = client.post("/api/auth/reset-password", json={"resetCode": code, "newPassword": "fresh-password"})
    assert first.status_code == 200
    second = client.post("/api/auth/reset-password", json={"resetCode": code, "newPassword": "other-password"})
    assert second.status_code == 401
    assert second.get_json() == {"error": "Invalid or expired reset code"}


def test_short_password_does_not_burn_code(client, smtp_settings, outbox):
    _request(client)
    code = _mailed_code(outbox)

    short = client.post("/api/auth/reset-password", json={"resetCode": code, "newPassword": "short"})
    assert short.status_code == 400
    ok = client.post("/api/auth/reset-password", json={"resetCode": code, "newPassword": "long-enough"})
    assert ok.status_code == 200


def test_wrong_code(client):
    resp = client.post("/api/auth/reset-password", json={"resetCode": "ZZZZZZZZ", "newPassword": "long-enough"})
    assert resp.status_code == 401


def test_recovery_falls_back_to_smtp_user(client, outbox):
    set_setting(SensitiveKey.SMTP_USER, "sender@gmail.com")
    set_setting(SensitiveKey.SMTP_APP_PASSWORD, "app-password")

    resp = _request(client)
    assert resp.status_code == 200
    assert resp.get_json()["maskedEmail"] == "se***@gmail.com"
    assert outbox[-1]["to"] == ["sender@gmail.com"]


def test_reset_without_smtp_is_configuration_error(client, app, outbox):
    resp = _request(client)
    assert resp.status_code == 500
    assert resp.get_json()["error"].startswith("Cannot send reset email. SMTP not configured")
    assert outbox == []


def test_smtp_failure(client, smtp_settings, failing_smtp):
    resp = _request(client)
    assert resp.status_code == 500
    assert resp.get_json()["error"].startswith("Failed to send reset email")


def test_test_email(admin_client, smtp_settings, outbox):
    resp = admin_client.post("/api/auth/test-email")
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Test email sent to ow***@example.com"
    assert len(outbox) == 1


def test_test_email_without_smtp(admin_client, outbox):
    resp = admin_client.post("/api/auth/test-email")
    assert resp.status_code == 500
    assert outbox == []


def test_test_email_failure_reports_reason(admin_client, smtp_settings, failing_smtp):
    resp = admin_client.post("/api/auth/test-email")
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Email failed: connection refused"
