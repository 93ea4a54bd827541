"""
Field validators shared by the services.

Each helper either returns the cleaned value or records a message in the
``errors`` dict under the field name. Callers raise one ValidationError
with every field problem at once:

    errors = {}
    title = require_text(data.get("title"), "title", errors, max_len=200)
    kind = require_choice(data.get("kind"), "kind", ENTRY_KINDS, errors)
    if errors:
        raise ValidationError("Invalid capture input", details=errors)
"""

import uuid

from leaderdojo.utils.helpers import parse_date, parse_datetime


def require_text(value, field, errors, *, max_len, min_len=1):
    if value is None or not isinstance(value, str) or not value.strip():
        errors[field] = "required"
        return None
    text = value.strip()
    if len(text) < min_len:
        errors[field] = f"must be at least {min_len} characters"
        return None
    if len(text) > max_len:
        errors[field] = f"must be at most {max_len} characters"
        return None
    return text


def optional_text(value, field, errors, *, max_len=None):
    if value is None:
        return None
    if not isinstance(value, str):
        errors[field] = "must be a string"
        return None
    text = value.strip()
    if not text:
        return None
    if max_len and len(text) > max_len:
        errors[field] = f"must be at most {max_len} characters"
        return None
    return text


def require_choice(value, field, choices, errors, *, default=None):
    if value is None or value == "":
        if default is not None:
            return default
        errors[field] = "required"
        return None
    if value not in choices:
        errors[field] = f"must be one of {sorted(choices)}"
        return None
    return value


def require_uuid(value, field, errors):
    if not value:
        errors[field] = "required"
        return None
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        errors[field] = "must be a UUID"
        return None


def score(value, field, errors, *, default):
    """Integer in [1, 5]. Booleans and floats with a fraction are rejected."""
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        errors[field] = "must be an integer between 1 and 5"
        return None
    try:
        number = float(value)
    except ValueError:
        errors[field] = "must be an integer between 1 and 5"
        return None
    if not number.is_integer() or not 1 <= number <= 5:
        errors[field] = "must be an integer between 1 and 5"
        return None
    return int(number)


def optional_date(value, field, errors):
    if value in (None, ""):
        return None
    parsed = parse_date(value)
    if parsed is None:
        errors[field] = "must be a date (YYYY-MM-DD)"
    return parsed


def optional_datetime(value, field, errors):
    if value in (None, ""):
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        errors[field] = "must be an ISO-8601 timestamp"
    return parsed
