"""Contact form messages: model and domain operations."""

import csv
import io
import re
from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from openpyxl import Workbook
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError

from errors import StorageError, ValidationError
from extensions import db, logger
from utils import new_id

MAX_NAME_LENGTH = 100
MAX_SUBJECT_LENGTH = 200
MAX_MESSAGE_LENGTH = 5000

_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")

CSV_HEADER = ["Name", "Email", "Subject", "Message", "Read", "Created At"]


class Message(db.Model):
    """A submission from the public contact form."""

    __tablename__ = "messages"

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(MAX_NAME_LENGTH), nullable=False)
    email = db.Column(db.String(320), nullable=False)
    subject = db.Column(db.String(MAX_SUBJECT_LENGTH))
    message = db.Column(db.Text, nullable=False)
    read = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "read": self.read,
            "created_at": self.created_at.isoformat(sep=" ", timespec="seconds") if self.created_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Message {self.id} from {self.email}>"


# ---------- Domain operations ----------

def clean_submission(data):
    """Validate a contact payload; returns trimmed (name, email, subject, message)."""
    name, email = data.get("name"), data.get("email")
    subject, message = data.get("subject"), data.get("message")

    if not name or not email or not message:
        raise ValidationError(None, "Name, email, and message are required")
    if not isinstance(name, str) or not name.strip() or len(name) > MAX_NAME_LENGTH:
        raise ValidationError("name", f"Name must be between 1 and {MAX_NAME_LENGTH} characters")
    if not isinstance(email, str):
        raise ValidationError("email", "Please provide a valid email address")
    try:
        validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError("email", "Please provide a valid email address") from exc
    if not isinstance(message, str) or not message.strip() or len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError("message", f"Message must be between 1 and {MAX_MESSAGE_LENGTH} characters")
    if subject and (not isinstance(subject, str) or len(subject) > MAX_SUBJECT_LENGTH):
        raise ValidationError("subject", f"Subject must be less than {MAX_SUBJECT_LENGTH} characters")

    # the subject ends up in a mail header
    subject = _LINE_BREAKS.sub(" ", (subject or "").strip())
    return name.strip(), email.strip().lower(), subject, message.strip()


def create_message(data) -> Message:
    name, email, subject, body = clean_submission(data)
    msg = Message(id=new_id(), name=name, email=email, subject=subject, message=body)
    try:
        db.session.add(msg)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Failed to save contact message")
        raise StorageError("Failed to save message") from exc
    return msg


def list_messages():
    try:
        return Message.query.order_by(Message.created_at.desc()).all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Failed to list contact messages")
        raise StorageError("Failed to load messages") from exc


def _execute(statement, action):
    try:
        changes = db.session.execute(statement.execution_options(synchronize_session=False)).rowcount
        db.session.commit()
        return changes
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Failed to %s contact message", action)
        raise StorageError(f"Failed to {action} message") from exc


def mark_read(message_id) -> int:
    return _execute(update(Message).where(Message.id == message_id).values(read=1), "update")


def delete_message(message_id) -> int:
    return _execute(delete(Message).where(Message.id == message_id), "delete")


def _export_row(m):
    return [
        m.name,
        m.email,
        m.subject or "",
        m.message,
        "Yes" if m.read else "No",
        m.created_at.isoformat(sep=" ", timespec="seconds") if m.created_at else "",
    ]


def export_csv(messages) -> bytes:
    """Excel-friendly CSV: every cell quoted, UTF-8 with a BOM."""
    out = io.StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(_export_row(m) for m in messages)
    return ("\ufeff" + out.getvalue()).encode("utf-8")


def export_xlsx(messages) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Messages"
    ws.append(CSV_HEADER)
    for m in messages:
        ws.append(_export_row(m))
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()
