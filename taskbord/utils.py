"""Small helpers shared by models, services and blueprints."""

from datetime import datetime, timezone

import bleach


def utcnow():
    return datetime.now(timezone.utc)


def isoformat(value):
    """ISO-8601 string for a datetime, or None."""
    return value.isoformat() if value else None


def sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return text
    return bleach.clean(str(text), tags=[], strip=True).strip()


def parse_datetime(value):
    """Parse an ISO-8601 timestamp from a JSON body.

    Empty values map to None. Raises ValueError on garbage; callers turn
    that into a ValidationError.
    """
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def truncate(text, length):
    text = text or ""
    return text if len(text) <= length else text[:length] + "..."
