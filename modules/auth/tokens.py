# -*- coding: utf-8 -*-
"""
Password reset codes.

A reset request registers a token in a process-local registry and mails an
8-character code to the recovery address. Tokens are never persisted: a
restart drops every pending reset.

Token states:
- ISSUED  — live until expires_at;
- USED    — consumed by a successful reset (terminal);
- EXPIRED — past expires_at (terminal).
Terminal tokens are evicted by a background sweep.
"""

import secrets
import smtplib
import string
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional
from uuid import uuid4

from errors import AuthError, ConfigurationError, MailDeliveryError, ValidationError
from extensions import logger
from mailer import recovery_recipient, send_email, smtp_config
from utils import mask_email

from .credentials import CredentialResolver, validate_new_password

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8

GENERIC_RESET_MESSAGE = "If the username exists, a reset code has been sent to the recovery email."


class ResetToken:
    def __init__(self, token: str, code: str, username: str, created_at: datetime, expires_at: datetime):
        self.token = token
        self.code = code
        self.username = username
        self.created_at = created_at
        self.expires_at = expires_at
        self.used = False

    def is_live(self, now: datetime) -> bool:
        return not self.used and self.expires_at > now


class ResetTokenRegistry:
    """
    In-memory token store with a TTL and a periodic sweep.

    All reads and writes of the mapping happen under one lock, so finding a
    code and marking it used is a single step the sweep cannot split.
    """

    def __init__(self, ttl: timedelta = timedelta(minutes=15), sweep_interval: float = 15 * 60,
                 clock: Callable[[], datetime] = datetime.utcnow) -> None:
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self.clock = clock
        self._tokens: Dict[str, ResetToken] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    @staticmethod
    def _new_code() -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))

    def issue(self, username: str) -> ResetToken:
        now = self.clock()
        with self._lock:
            live_codes = {t.code for t in self._tokens.values() if t.is_live(now)}
            code = self._new_code()
            while code in live_codes:
                code = self._new_code()
            token = ResetToken(str(uuid4()), code, username, now, now + self.ttl)
            self._tokens[token.token] = token
        return token

    def find_live(self, code: str) -> Optional[ResetToken]:
        now = self.clock()
        with self._lock:
            return self._find_live(code, now)

    def _find_live(self, code, now):
        for token in self._tokens.values():
            if token.is_live(now) and secrets.compare_digest(token.code.encode(), code.encode()):
                return token
        return None

    def redeem(self, code: str, on_redeem: Callable[[ResetToken], None]) -> ResetToken:
        """
        Run ``on_redeem`` for the live token matching ``code`` and mark it used.
        If ``on_redeem`` raises, the token stays live.
        """
        now = self.clock()
        with self._lock:
            token = self._find_live(code, now)
            if token is None:
                raise AuthError("Invalid or expired reset code")
            on_redeem(token)
            token.used = True
            return token

    def sweep(self) -> int:
        """Evict used and expired tokens; returns how many were removed."""
        now = self.clock()
        with self._lock:
            dead = [key for key, t in self._tokens.items() if t.used or t.expires_at < now]
            for key in dead:
                del self._tokens[key]
        return len(dead)

    # ------ background sweep ------

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="reset-token-sweep", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.sweep_interval):
            removed = self.sweep()
            if removed:
                logger.debug("Swept %d reset tokens", removed)


# ---------- Flows ----------

def _reset_email_html(code: str, ttl_minutes: int) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 480px; margin: 0 auto; padding: 32px; background: #111118; color: #ffffff; border-radius: 12px;">
        <h2 style="color: #00d4aa; margin-bottom: 16px;">Password Reset Request</h2>
        <p style="color: #9ca3af;">A password reset was requested for the admin panel. Use the code below to set a new password:</p>
        <div style="background: #0a0a0f; padding: 20px; border-radius: 8px; text-align: center; margin: 24px 0; border: 1px solid #00d4aa;">
            <span style="font-size: 28px; font-weight: bold; letter-spacing: 4px; color: #00d4aa; font-family: monospace;">{code}</span>
        </div>
        <p style="color: #6b7280; font-size: 13px;">This code expires in <strong>{ttl_minutes} minutes</strong>. If you didn't request this, ignore this email.</p>
    </div>
    """


def request_reset(credentials: CredentialResolver, registry: ResetTokenRegistry, username) -> Optional[str]:
    """
    Issue a reset code for the admin and mail it.

    Returns the masked recipient, or ``None`` when ``username`` is not the
    admin (the caller answers with the same generic message either way).
    """
    if not username or not isinstance(username, str):
        raise ValidationError("username", "Username is required")
    if username != credentials.admin_username():
        return None

    token = registry.issue(username)

    smtp = smtp_config()
    recipient = recovery_recipient(smtp)
    if smtp is None or not recipient:
        reason = (
            "SMTP not configured. Go to Admin → Settings → Email Configuration."
            if smtp is None
            else "No recovery email set. Go to Admin → Settings → Email Configuration."
        )
        logger.warning("Password reset requested but email cannot be sent: %s", reason)
        raise ConfigurationError(f"Cannot send reset email. {reason}")

    masked = mask_email(recipient)
    ttl_minutes = int(registry.ttl.total_seconds() // 60)
    try:
        send_email(recipient, "Admin Password Reset Code", _reset_email_html(token.code, ttl_minutes), smtp)
    except (smtplib.SMTPException, OSError) as exc:
        logger.exception("Failed to send reset email to %s", masked)
        raise MailDeliveryError(
            "Failed to send reset email. Check SMTP settings in Admin → Settings."
        ) from exc
    logger.info("Password reset code sent to %s", masked)
    return masked


def reset_password(credentials: CredentialResolver, registry: ResetTokenRegistry, code, new_password) -> None:
    if not code or not new_password or not isinstance(code, str):
        raise ValidationError(None, "Reset code and new password are required")
    validate_new_password(new_password)
    registry.redeem(code.strip(), lambda token: credentials.set_password(new_password))
    logger.info("Admin password reset with a reset code")
