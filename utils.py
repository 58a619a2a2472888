import re
from uuid import uuid4

from flask import request

from errors import ValidationError

_EMAIL_MASK = re.compile(r"^(.{2})(.*)(@.*)$")


def new_id():
    """Opaque row id."""
    return str(uuid4())


def mask_email(address):
    """'jane.doe@example.com' -> 'ja***@example.com'. One-character local parts are left alone."""
    return _EMAIL_MASK.sub(r"\1***\3", address or "")


def json_body():
    """Return the request's JSON object, ``{}`` when there is no body."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(None, "Request body must be a JSON object")
    return data
