"""Small helpers for identifiers, clocks and slugs."""

import re
import uuid
from datetime import datetime, timezone

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (SQLite drops tzinfo anyway)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated form of ``text``."""
    slug = _NON_SLUG.sub("-", (text or "").lower()).strip("-")
    return slug or "job"


def unique_ordered(values) -> list:
    """Drop repeats while keeping first-seen order."""
    return list(dict.fromkeys(values))
